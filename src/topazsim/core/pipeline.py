"""Event pipelines with explicit execution order."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from topazsim.core.event import Event
from topazsim.core.registry import get_event


def _instantiate(event: Event | str) -> Event:
    return get_event(event.strip())() if isinstance(event, str) else event


@dataclass(slots=True)
class Pipeline:
    """
    Ordered list of events run against one context.

    The engine owns two pipelines: the *market* pipeline, run once per tick
    on the shared market, and the *company* pipeline, run once per
    submitting company. Events execute in exactly the listed order; later
    stages read values that earlier stages leave in the context. There is
    no dependency resolution, so editing a pipeline is the caller's
    responsibility.

    See Also
    --------
    Pipeline.from_event_list : Build pipeline from event name list
    Pipeline.from_yaml : Build pipeline from one section of a YAML file
    """

    events: list[Event] = field(default_factory=list)

    @classmethod
    def from_event_list(cls, event_names: list[str]) -> Pipeline:
        """
        Instantiate the registered event of every name, keeping the order.

        Raises
        ------
        KeyError
            If a name is not registered.
        """
        return cls(events=[_instantiate(name) for name in event_names])

    @classmethod
    def from_yaml(cls, yaml_path: str | Path, section: str) -> Pipeline:
        """
        Build pipeline from one section of a YAML configuration file.

        The file holds one list of event names per section::

            market:
              - apply_market_shock
              - grow_market_demand
            company:
              - adjust_morale
              - ...

        Raises
        ------
        ValueError
            If the section is missing or is not a list.
        """
        path = Path(yaml_path)
        with path.open("rt", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)

        if not isinstance(data, dict) or section not in data:
            raise ValueError(f"YAML file must have '{section}' key: {path}")

        names = data[section]
        if not isinstance(names, list):
            raise ValueError(
                f"Pipeline '{section}' must be a list, got {type(names).__name__}"
            )
        return cls.from_event_list([str(n) for n in names])

    def execute(self, ctx: Any) -> None:
        """Run every event on *ctx* (a MarketContext or CompanyContext)."""
        for event in self.events:
            event.execute(ctx)

    # editing
    # ---------------------------------------------------------------------
    def _position(self, name: str) -> int:
        for idx, event in enumerate(self.events):
            if event.name == name:
                return idx
        raise ValueError(f"Event '{name}' not found in pipeline")

    def insert_after(self, after: str, event: Event | str) -> None:
        """
        Insert *event* (an instance or a registered name) after *after*.

        Raises
        ------
        ValueError
            If *after* is not in the pipeline.
        """
        self.events.insert(self._position(after) + 1, _instantiate(event))

    def remove(self, event_name: str) -> None:
        """Drop *event_name*; ValueError if it is not in the pipeline."""
        del self.events[self._position(event_name)]

    def replace(self, old_name: str, new_event: Event | str) -> None:
        """Swap *old_name* for *new_event*, keeping its position."""
        self.events[self._position(old_name)] = _instantiate(new_event)

    @property
    def names(self) -> list[str]:
        """Event names in execution order."""
        return [event.name for event in self.events]

    def __len__(self) -> int:
        return len(self.events)

    def __repr__(self) -> str:
        return f"Pipeline(n_events={len(self.events)})"
