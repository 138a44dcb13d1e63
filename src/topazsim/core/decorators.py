# src/topazsim/core/decorators.py
"""
The ``@event`` shorthand for defining pipeline stages.

::

    from topazsim.core import event

    @event
    class PayDividend:
        def execute(self, ctx): ...

is equivalent to subclassing `Event` and applying ``@dataclass(slots=True)``
by hand; the class is registered as ``pay_dividend``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, TypeVar

T = TypeVar("T")


def event(
    cls: type[T] | None = None,
    *,
    name: str | None = None,
    **dataclass_kwargs: Any,
) -> type[T] | Callable[[type[T]], type[T]]:
    """
    Turn a plain class into a registered, slotted Event dataclass.

    Usable bare (``@event``) or with arguments (``@event(name=...)``).
    Extra keyword arguments go to `dataclasses.dataclass`; ``slots``
    defaults to True.

    Examples
    --------
    >>> @event(name="bonus_round")
    ... class BonusRound:
    ...     def execute(self, ctx) -> None:
    ...         ctx.ledger.morale = min(100.0, ctx.ledger.morale + 1.0)
    >>> BonusRound.name
    'bonus_round'
    """
    from topazsim.core.event import Event

    dataclass_kwargs.setdefault("slots", True)

    def decorator(target: type[T]) -> type[T]:
        if issubclass(target, Event):
            if name is not None:
                target.name = name
            return dataclass(**dataclass_kwargs)(target)

        # slots forbid multiple inheritance, so rebuild on Event alone
        namespace = {
            key: value
            for key, value in vars(target).items()
            if key not in ("__dict__", "__weakref__")
        }
        rebuilt = type(target.__name__, (Event,), namespace, name=name or "")
        return dataclass(**dataclass_kwargs)(rebuilt)  # type: ignore[return-value]

    return decorator if cls is None else decorator(cls)
