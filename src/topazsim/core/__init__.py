"""Pipeline infrastructure for topazsim."""

from typing import Any, Callable

from topazsim.core.decorators import event as event_decorator
from topazsim.core.event import Event
from topazsim.core.pipeline import Pipeline
from topazsim.core.registry import get_event, list_events

# Export the decorator under its intended name; this overrides the submodule
event: Callable[..., Any] = event_decorator

__all__ = [
    "Event",
    "Pipeline",
    "event",
    "get_event",
    "list_events",
]
