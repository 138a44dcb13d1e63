# src/topazsim/market.py
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Mapping


@dataclass(slots=True)
class MarketState:
    """
    Pure *state* container for the shared world of one session.

    Every company of a session sees the same market; the engine replaces it
    with an updated copy once per tick.
    """

    gdp_growth: float  # multiplicative demand growth per tick
    interest_rate: float  # annual rate charged on loans
    material_cost: float  # per unit produced
    total_demand: float  # market-wide units of demand
    quarter: int  # current quarter, starts at 1

    def copy(self) -> MarketState:
        return replace(self)

    def to_dict(self) -> dict[str, Any]:
        return {
            "gdp_growth": self.gdp_growth,
            "interest_rate": self.interest_rate,
            "material_cost": self.material_cost,
            "total_demand": self.total_demand,
            "quarter": self.quarter,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> MarketState:
        return cls(
            gdp_growth=float(data["gdp_growth"]),
            interest_rate=float(data["interest_rate"]),
            material_cost=float(data["material_cost"]),
            total_demand=float(data["total_demand"]),
            quarter=int(data["quarter"]),
        )


def default_market(overrides: Mapping[str, Any] | None = None) -> MarketState:
    """
    Return the initial market of a new session.

    *overrides* is the ``market:`` section of the engine configuration; keys
    it omits fall back to the package defaults.
    """
    values: dict[str, Any] = {
        "gdp_growth": 1.02,
        "interest_rate": 0.08,
        "material_cost": 15.0,
        "total_demand": 10000.0,
        "quarter": 1,
    }
    values.update(overrides or {})
    return MarketState.from_dict(values)
