# src/topazsim/worksheet.py
"""
Per-tick working state handed to pipeline events.

The market pipeline mutates a `MarketContext`; the company pipeline mutates
a `CompanyContext` whose `Worksheet` carries the intermediate figures of one
company's quarter (capacity, output, sales, P&L lines) from the stage that
computes them to the stages that consume them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np
from numpy.random import Generator

from topazsim.ledger import PRODUCTS, REGIONS, CompanyLedger, Expenses, QuarterResult
from topazsim.market import MarketState
from topazsim.typing import Float1D, Int1D, Int2D

if TYPE_CHECKING:
    from topazsim.config import Config
    from topazsim.decisions import Decisions


def _zeros_int(n: int) -> Int1D:
    return np.zeros(n, dtype=np.int64)


@dataclass(slots=True)
class Worksheet:
    """Scratch figures of one company for one tick."""

    # production
    capacity: float = 0.0
    fulfillment_ratio: float = 1.0
    inventory_opening: Int1D = field(default_factory=lambda: _zeros_int(len(PRODUCTS)))
    units_produced: Int1D = field(default_factory=lambda: _zeros_int(len(PRODUCTS)))
    production_cost: float = 0.0

    # fleet
    maintenance_cost: float = 0.0
    purchase_cost: float = 0.0
    sale_proceeds: float = 0.0

    # sales
    demand: Int1D = field(default_factory=lambda: _zeros_int(len(PRODUCTS)))
    units_sold: Int1D = field(default_factory=lambda: _zeros_int(len(PRODUCTS)))
    revenue: Float1D = field(default_factory=lambda: np.zeros(len(PRODUCTS)))
    regional_units: Int2D = field(
        default_factory=lambda: np.zeros((len(PRODUCTS), len(REGIONS)), np.int64)
    )

    # P&L
    expenses: Expenses | None = None
    avg_unit_cost: float = 0.0
    cogs: float = 0.0
    gross_profit: float = 0.0
    ebit: float = 0.0
    net_profit: float = 0.0
    eps: float = 0.0

    result: QuarterResult | None = None


@dataclass(slots=True)
class MarketContext:
    config: Config
    rng: Generator
    market: MarketState
    notes: list[str] = field(default_factory=list)


@dataclass(slots=True)
class CompanyContext:
    """
    Everything the company pipeline needs for one company.

    ``ledger`` is a private copy owned by this tick; ``market`` is the
    already-updated market of the tick and must be treated as read-only.
    """

    config: Config
    market: MarketState
    ledger: CompanyLedger
    decisions: Decisions
    sheet: Worksheet = field(default_factory=Worksheet)
    notes: list[str] = field(default_factory=list)
