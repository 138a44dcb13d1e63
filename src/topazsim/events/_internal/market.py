"""
System functions for market events.

This module contains the internal implementation functions for market events.
Event classes wrap these functions and provide the primary documentation.

See Also
--------
topazsim.events.market : Event classes (primary documentation source)
"""

from __future__ import annotations

from numpy.random import Generator

from topazsim import logging
from topazsim.config import Config
from topazsim.market import MarketState

log = logging.getLogger(__name__)


def apply_market_shock(
    market: MarketState,
    rng: Generator,
    cfg: Config,
    notes: list[str],
) -> None:
    """
    Draw at most one shock and apply it to the market.

    See Also
    --------
    topazsim.events.market.ApplyMarketShock : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Applying Market Shock ---")

    draw = rng.random()
    if draw >= cfg.shock_probability:
        if log.isEnabledFor(logging.DEBUG):
            log.debug(
                f"  No shock this quarter (draw={draw:.4f} >= "
                f"p={cfg.shock_probability:.2f})"
            )
        if info_enabled:
            log.info("--- Market Shock complete ---")
        return

    if rng.random() > 0.5:
        old = market.interest_rate
        market.interest_rate = old + cfg.rate_shock
        note = (
            f"Global Market Shock: Interest rates spiked by "
            f"{cfg.rate_shock * 100:.0f}% due to inflation."
        )
        if info_enabled:
            log.info(f"  Interest rate {old:.4f} -> {market.interest_rate:.4f}")
    else:
        old = market.material_cost
        market.material_cost = old * cfg.material_shock
        note = (
            f"Supply Chain Crisis: Raw material costs surged by "
            f"{(cfg.material_shock - 1.0) * 100:.0f}%."
        )
        if info_enabled:
            log.info(f"  Material cost {old:.2f} -> {market.material_cost:.2f}")

    notes.append(note)
    log.warning(f"  {note}")

    if info_enabled:
        log.info("--- Market Shock complete ---")


def grow_market_demand(market: MarketState) -> None:
    """
    Scale total demand by the GDP growth factor.

    See Also
    --------
    topazsim.events.market.GrowMarketDemand : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Growing Market Demand ---")

    previous = market.total_demand
    market.total_demand = previous * market.gdp_growth

    if info_enabled:
        log.info(
            f"  Total demand {previous:,.1f} -> {market.total_demand:,.1f} "
            f"(growth x{market.gdp_growth:.3f})"
        )
        log.info("--- Market Demand Growth complete ---")
