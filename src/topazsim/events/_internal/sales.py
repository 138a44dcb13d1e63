"""
System functions for sales events.

See Also
--------
topazsim.events.sales : Event classes (primary documentation source)
"""

from __future__ import annotations

import numpy as np

from topazsim import logging
from topazsim.config import Config
from topazsim.decisions import Decisions
from topazsim.errors import ComputationError
from topazsim.helpers import proportional_split
from topazsim.ledger import PRODUCTS, CompanyLedger
from topazsim.market import MarketState
from topazsim.worksheet import Worksheet

log = logging.getLogger(__name__)

_DEMAND_CAP = float(2**62)


def sell_products(
    ledger: CompanyLedger,
    decisions: Decisions,
    market: MarketState,
    cfg: Config,
    sheet: Worksheet,
) -> None:
    """
    Compute demand per product and sell from inventory.

    See Also
    --------
    topazsim.events.sales.SellProducts : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Selling Products ---")

    prices = decisions.prices
    spend = decisions.marketing.sum(axis=1)

    base_demand = market.total_demand / len(PRODUCTS)
    with np.errstate(over="ignore", invalid="ignore"):
        price_factor = np.power(cfg.reference_price / prices, cfg.elasticity)
        marketing_factor = 1.0 + np.log(spend + 1.0) / cfg.marketing_k
        raw = base_demand * price_factor * marketing_factor * cfg.demand_scale

    if np.isnan(raw).any():
        raise ComputationError(
            f"Company '{ledger.company_id}': demand is undefined for prices "
            f"{prices.tolist()}"
        )
    # near-zero prices overflow; cap so the cast to int64 stays defined
    demand = np.floor(np.clip(raw, 0.0, _DEMAND_CAP)).astype(np.int64)

    sold = np.minimum(demand, ledger.inventory)
    np.subtract(ledger.inventory, sold, out=ledger.inventory)

    sheet.demand = demand
    sheet.units_sold = sold
    sheet.revenue = sold * prices

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] "
            f"price factor={np.round(price_factor, 4).tolist()}, "
            f"marketing factor={np.round(marketing_factor, 4).tolist()}"
        )
        log.debug(
            f"  [{ledger.company_id}] demand={demand.tolist()}, sold={sold.tolist()}, "
            f"closing inventory={ledger.inventory.tolist()}"
        )
    if info_enabled:
        log.info(
            f"  [{ledger.company_id}] sold {int(sold.sum()):,} units for "
            f"{sheet.revenue.sum():,.2f}"
        )
        log.info("--- Product Sales complete ---")


def distribute_regional_sales(
    decisions: Decisions, cfg: Config, sheet: Worksheet
) -> None:
    """
    Split units sold across regions by marketing weight.

    See Also
    --------
    topazsim.events.sales.DistributeRegionalSales : Full documentation
    """
    weights = cfg.region_base_weight + decisions.marketing
    for i in range(len(PRODUCTS)):
        sheet.regional_units[i] = proportional_split(
            int(sheet.units_sold[i]), weights[i]
        )

    log.deep(f"  regional units:\n{sheet.regional_units}")
