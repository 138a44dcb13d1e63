"""
Competitor strategies for AI-controlled companies.

A strategy turns a company's ledger and the current market into the
`Decisions` for the quarter in progress. Strategies are registered by name
so that sessions can store *which* strategy drives each AI company as plain
data.

Built-in strategies
-------------------
noop
    Idle every quarter (no production, no marketing).
cost_leader, quality_innovator, aggressive_marketer
    `RuleBasedStrategy` with the matching `Personality`.

Examples
--------
>>> from topazsim.competitors import ScriptedStrategy, register_strategy
>>> from topazsim.decisions import default_decisions
>>> register_strategy("replay", ScriptedStrategy([default_decisions()]))
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence

from topazsim.decisions import (
    Decisions,
    Operations,
    Personnel,
    ProductDecision,
    default_decisions,
    idle_decisions,
)
from topazsim.ledger import CompanyLedger
from topazsim.market import MarketState

__all__ = [
    "CompetitorStrategy",
    "NoOpStrategy",
    "Personality",
    "RuleBasedStrategy",
    "ScriptedStrategy",
    "get_strategy",
    "list_strategies",
    "register_strategy",
]


class CompetitorStrategy(ABC):
    """Decides for one AI company, one quarter at a time."""

    @abstractmethod
    def decide(self, ledger: CompanyLedger, market: MarketState) -> Decisions:
        """Return the decisions for ``market.quarter``."""


class NoOpStrategy(CompetitorStrategy):
    """Sit the quarter out: idle decisions at the reference wage."""

    def __init__(self, reference_wage: float = 12.0) -> None:
        self.reference_wage = reference_wage

    def decide(self, ledger: CompanyLedger, market: MarketState) -> Decisions:
        return idle_decisions(self.reference_wage)


class Personality(str, Enum):
    COST_LEADER = "COST_LEADER"
    QUALITY_INNOVATOR = "QUALITY_INNOVATOR"
    AGGRESSIVE_MARKETER = "AGGRESSIVE_MARKETER"


@dataclass(frozen=True)
class _Profile:
    price_factor: float  # applied to the default price list
    marketing_factor: float  # applied to the default marketing budget
    wage_factor: float  # applied to the reference wage
    shift_level: int
    stock_cover: float  # target stock as a multiple of default production


_PROFILES: dict[Personality, _Profile] = {
    Personality.COST_LEADER: _Profile(0.85, 0.6, 1.0, 2, 1.2),
    Personality.QUALITY_INNOVATOR: _Profile(1.2, 1.0, 1.15, 1, 0.8),
    Personality.AGGRESSIVE_MARKETER: _Profile(1.0, 2.0, 1.0, 1, 1.0),
}


class RuleBasedStrategy(CompetitorStrategy):
    """
    Deterministic rules driven by a personality.

    Starting from the default decision draft, prices, marketing budgets and
    wages are scaled by the personality's profile. Production tops inventory
    back up to a target stock level, without exceeding what the current fleet
    can build on the chosen shift.
    """

    def __init__(
        self,
        personality: Personality | str,
        reference_wage: float = 12.0,
        units_per_machine: int = 500,
    ) -> None:
        self.personality = Personality(personality)
        self.reference_wage = reference_wage
        self.units_per_machine = units_per_machine

    def decide(self, ledger: CompanyLedger, market: MarketState) -> Decisions:
        profile = _PROFILES[self.personality]
        base = default_decisions()

        # Rough capacity at current productivity, 1.5x for a second shift
        shift_mult = {1: 1.0, 2: 1.5, 3: 2.0}[profile.shift_level]
        capacity = (
            ledger.machines * self.units_per_machine * ledger.productivity * shift_mult
        )

        targets = []
        for i, p in enumerate(base.products):
            target_stock = p.production * profile.stock_cover
            targets.append(max(0.0, target_stock - float(ledger.inventory[i])))
        wanted = sum(targets)
        scale = min(1.0, capacity / wanted) if wanted > 0 else 0.0

        products = tuple(
            ProductDecision(
                price=round(p.price * profile.price_factor, 2),
                production=int(math.floor(targets[i] * scale)),
                marketing=tuple(m * profile.marketing_factor for m in p.marketing),
            )
            for i, p in enumerate(base.products)
        )

        return Decisions(
            products=products,
            operations=Operations(
                shift_level=profile.shift_level,
                maintenance_hours=base.operations.maintenance_hours,
                buy_machines=0,
                sell_machines=0,
            ),
            personnel=Personnel(
                worker_wage=round(self.reference_wage * profile.wage_factor, 2),
                recruit_workers=0,
                dismiss_workers=0,
                sales_salary=base.personnel.sales_salary,
            ),
            regional_staff=base.regional_staff,
        )

    def __repr__(self) -> str:
        return f"RuleBasedStrategy(personality={self.personality.value!r})"


class ScriptedStrategy(CompetitorStrategy):
    """
    Replay a fixed list of decisions, one per quarter starting at quarter 1.

    Quarters past the end of the script fall back to *fallback* (idle by
    default).
    """

    def __init__(
        self,
        script: Sequence[Decisions | Mapping[str, Any]],
        fallback: CompetitorStrategy | None = None,
    ) -> None:
        self.script = [Decisions.from_mapping(d) for d in script]
        self.fallback = fallback or NoOpStrategy()

    def decide(self, ledger: CompanyLedger, market: MarketState) -> Decisions:
        idx = market.quarter - 1
        if 0 <= idx < len(self.script):
            return self.script[idx]
        return self.fallback.decide(ledger, market)


# --------------------------------------------------------------------------- #
#  Registry                                                                   #
# --------------------------------------------------------------------------- #
_STRATEGY_REGISTRY: dict[str, CompetitorStrategy] = {
    "noop": NoOpStrategy(),
    "cost_leader": RuleBasedStrategy(Personality.COST_LEADER),
    "quality_innovator": RuleBasedStrategy(Personality.QUALITY_INNOVATOR),
    "aggressive_marketer": RuleBasedStrategy(Personality.AGGRESSIVE_MARKETER),
}


def register_strategy(name: str, strategy: CompetitorStrategy) -> None:
    """Register *strategy* under *name*, replacing any previous one."""
    if not isinstance(strategy, CompetitorStrategy):
        raise TypeError(
            f"strategy must be a CompetitorStrategy, got {type(strategy).__name__}"
        )
    _STRATEGY_REGISTRY[name] = strategy


def get_strategy(name: str) -> CompetitorStrategy:
    """
    Return the strategy registered under *name*.

    Raises
    ------
    KeyError
        If no strategy is registered under *name*.
    """
    if name not in _STRATEGY_REGISTRY:
        available = ", ".join(sorted(_STRATEGY_REGISTRY))
        raise KeyError(
            f"Strategy '{name}' not found in registry. "
            f"Available strategies: {available}"
        )
    return _STRATEGY_REGISTRY[name]


def list_strategies() -> list[str]:
    return sorted(_STRATEGY_REGISTRY)
