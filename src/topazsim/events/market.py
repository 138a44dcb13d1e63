"""
Market events run once per tick, before any company is processed.

Every company of the tick is then evaluated against the updated market.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from topazsim.core.decorators import event

if TYPE_CHECKING:
    from topazsim.worksheet import MarketContext


@event
class ApplyMarketShock:
    """
    With a small probability, hit the market with exactly one shock.

    Rule
    ----
        u₁ < p            → shock
        u₂ > 0.5          → r  ←  r + Δr
        otherwise         → m  ←  m · (1 + δm)

    p: Shock Probability (0.10), r: Interest Rate, Δr: Rate Shock (0.02),
    m: Material Cost, δm: Material Shock (15%), u₁, u₂: uniform draws from
    the session RNG (u₂ is only drawn when a shock happens)

    A human-readable note is attached to every result of the tick.
    """

    def execute(self, ctx: MarketContext) -> None:
        from topazsim.events._internal.market import apply_market_shock

        apply_market_shock(ctx.market, ctx.rng, ctx.config, ctx.notes)


@event
class GrowMarketDemand:
    """
    Grow total market demand.

    Rule
    ----
        D  ←  D · g

    D: Total Demand, g: GDP Growth
    """

    def execute(self, ctx: MarketContext) -> None:
        from topazsim.events._internal.market import grow_market_demand

        grow_market_demand(ctx.market)
