"""Event (pipeline stage) base class definition."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar


def _camel_to_snake(name: str) -> str:
    """Convert CamelCase to snake_case."""
    # Insert underscore before uppercase letters (except first)
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    # Insert underscore before uppercase letters followed by lowercase
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


@dataclass(slots=True)
class Event(ABC):
    """
    Base class for all pipeline stages of a tick.

    An Event encapsulates one step of the quarterly transform and mutates
    the context it receives in-place. Market events receive a
    `topazsim.worksheet.MarketContext`, company events a
    `topazsim.worksheet.CompanyContext`. Events are executed by the Pipeline
    in the exact order specified.

    Notes
    -----
    Events are registered automatically via __init_subclass__ hook.
    The order of event execution is critical (later stages read outputs of
    earlier ones) and must be explicitly defined in the pipeline
    configuration.
    """

    # Class variable for event name (set by subclass)
    name: ClassVar[str] = ""

    def __init_subclass__(cls, name: str = "", **kwargs: Any) -> None:
        """
        Auto-register Event subclasses in the global registry.

        Parameters
        ----------
        name : str, optional
            Custom name for the event.
            If not provided, uses the class name converted to snake_case.
        **kwargs
            Additional keyword arguments passed to parent __init_subclass__.
        """
        super(Event, cls).__init_subclass__(**kwargs)

        # @dataclass(slots=True) creates a new class and triggers
        # __init_subclass__ a second time without the custom name
        if name != "":
            cls.name = name
        elif cls.name == "":
            cls.name = _camel_to_snake(cls.__name__)

        from topazsim.core.registry import register_event

        register_event(cls)

    def get_logger(self) -> logging.Logger:
        """
        Get logger for this event with per-event log level applied.

        Notes
        -----
        Logger name format: 'topazsim.events.{event_name}'
        Per-event log levels can be configured via defaults.yml or kwargs:

        logging:
          events:
            run_production: DEBUG
            sell_products: WARNING
        """
        return logging.getLogger(f"topazsim.events.{self.name}")

    @abstractmethod
    def execute(self, ctx: Any) -> None:
        """
        Execute the event's logic.

        Mutates the context in-place.

        Parameters
        ----------
        ctx : MarketContext | CompanyContext
            State of the tick in progress.
        """
        pass

    def __repr__(self) -> str:
        """Provide informative repr."""
        return f"{self.__class__.__name__}(name={self.name!r})"
