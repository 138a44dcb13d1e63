"""
Sales events: demand, fulfillment and the regional breakdown.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from topazsim.core.decorators import event

if TYPE_CHECKING:
    from topazsim.worksheet import CompanyContext


@event
class SellProducts:
    """
    Compute demand per product and sell from inventory.

    Rule
    ----
        D_j  =  ⌊(D / n) · (p̄ / p_j)^ε · (1 + ln(M_j + 1) / 10) · 0.1⌋
        q_j  =  min(D_j, S_j)
        S_j  ←  S_j − q_j
        R_j  =  q_j · p_j

    D: Total Market Demand, n: Number of Products, p̄: Reference Price (150),
    ε: Elasticity (1.5), M: Marketing Spend summed over regions,
    q: Units Sold, S: Inventory, R: Revenue
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.sales import sell_products

        sell_products(ctx.ledger, ctx.decisions, ctx.market, ctx.config, ctx.sheet)


@event
class DistributeRegionalSales:
    """
    Split units sold across regions by marketing weight.

    Rule
    ----
        ω_r   =  1000 + M_r
        q_r   =  ⌊q · ω_r / Σ ω⌋

    The rounding remainder goes to the region with the largest weight, so
    regional units always sum to the units sold.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.sales import distribute_regional_sales

        distribute_regional_sales(ctx.decisions, ctx.config, ctx.sheet)
