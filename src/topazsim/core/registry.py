"""
Name → class lookup for pipeline events.

Event subclasses add themselves here when their class statement runs, so a
pipeline (or a YAML pipeline file) can refer to every stage by its
snake_case name.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from topazsim.core.event import Event

_EVENT_REGISTRY: dict[str, type[Event]] = {}


def register_event(cls: type[Event]) -> None:
    """Store *cls* under ``cls.name``; a later class with the same name wins."""
    _EVENT_REGISTRY[cls.name] = cls


def get_event(name: str) -> type[Event]:
    """
    Look up the event class registered under *name*.

    Raises
    ------
    KeyError
        If nothing is registered under *name*; the message lists what is.
    """
    try:
        return _EVENT_REGISTRY[name]
    except KeyError:
        raise KeyError(
            f"Event '{name}' not found in registry. "
            f"Available events: {', '.join(list_events())}"
        ) from None


def list_events() -> list[str]:
    return sorted(_EVENT_REGISTRY)


def clear_registry() -> None:
    """Forget every registered event. Test teardown only."""
    _EVENT_REGISTRY.clear()
