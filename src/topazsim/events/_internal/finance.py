"""
System functions for finance events.

See Also
--------
topazsim.events.finance : Event classes (primary documentation source)
"""

from __future__ import annotations

import dataclasses
import math

import numpy as np

from topazsim import logging
from topazsim.config import Config
from topazsim.decisions import Decisions
from topazsim.errors import ComputationError
from topazsim.helpers import safe_divide
from topazsim.ledger import (
    PRODUCTS,
    REGIONS,
    BalanceSheet,
    CompanyLedger,
    Expenses,
    Financials,
    Metrics,
    ProductSales,
    QuarterResult,
    RegionSales,
)
from topazsim.market import MarketState
from topazsim.worksheet import Worksheet

log = logging.getLogger(__name__)


def book_expenses(
    ledger: CompanyLedger,
    decisions: Decisions,
    market: MarketState,
    cfg: Config,
    sheet: Worksheet,
) -> None:
    """
    Itemize the quarter's operating expenses.

    See Also
    --------
    topazsim.events.finance.BookExpenses : Full documentation
    """
    staff = ledger.regional_staff
    sheet.expenses = Expenses(
        marketing=float(decisions.marketing.sum()),
        rd=0.0,
        personnel=ledger.employees * cfg.admin_cost_per_employee
        + decisions.personnel.sales_salary * cfg.sales_salary_multiplier,
        maintenance=sheet.maintenance_cost,
        depreciation=ledger.machines * cfg.depreciation_per_machine,
        interest=ledger.loans * market.interest_rate / 4.0,
        salesforce=staff.total_reps * cfg.sales_rep_cost
        + staff.total_marketing_staff * cfg.marketing_staff_cost,
        tax=0.0,
    )

    if log.isEnabledFor(logging.DEBUG):
        log.debug(f"  [{ledger.company_id}] expenses: {sheet.expenses}")


def close_books(ledger: CompanyLedger, cfg: Config, sheet: Worksheet) -> None:
    """
    Derive COGS, profit and tax, then settle cash and net worth.

    See Also
    --------
    topazsim.events.finance.CloseBooks : Full documentation
    """
    info_enabled = log.isEnabledFor(logging.INFO)
    if info_enabled:
        log.info("--- Closing Books ---")

    if sheet.expenses is None:
        raise ComputationError(
            f"Company '{ledger.company_id}': expenses must be booked before closing"
        )

    produced = int(sheet.units_produced.sum())
    sheet.avg_unit_cost = safe_divide(sheet.production_cost, produced)
    sheet.cogs = sheet.avg_unit_cost * int(sheet.units_sold.sum())

    revenue = float(sheet.revenue.sum())
    sheet.gross_profit = revenue - sheet.cogs
    sheet.ebit = sheet.gross_profit - sheet.expenses.operating
    tax = max(0.0, sheet.ebit) * cfg.tax_rate
    sheet.expenses = dataclasses.replace(sheet.expenses, tax=tax)
    sheet.net_profit = sheet.ebit - tax

    figures = {
        "revenue": revenue,
        "cogs": sheet.cogs,
        "operating expenses": sheet.expenses.operating,
        "ebit": sheet.ebit,
        "net profit": sheet.net_profit,
    }
    for label, value in figures.items():
        if not math.isfinite(value):
            raise ComputationError(
                f"Company '{ledger.company_id}': {label} is not finite ({value})"
            )
    if np.any(ledger.inventory < 0):
        raise ComputationError(
            f"Company '{ledger.company_id}': negative inventory "
            f"{ledger.inventory.tolist()}"
        )

    ledger.cash += sheet.net_profit + sheet.sale_proceeds - sheet.purchase_cost
    ledger.net_worth += sheet.net_profit

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] avg unit cost={sheet.avg_unit_cost:.4f}, "
            f"COGS={sheet.cogs:,.2f}, EBIT={sheet.ebit:,.2f}, tax={tax:,.2f}"
        )
    if info_enabled:
        log.info(
            f"  [{ledger.company_id}] net profit {sheet.net_profit:,.2f}, "
            f"cash {ledger.cash:,.2f}"
        )
        log.info("--- Books closed ---")


def revalue_shares(ledger: CompanyLedger, cfg: Config, sheet: Worksheet) -> None:
    """
    Move the share price with earnings per share.

    See Also
    --------
    topazsim.events.finance.RevalueShares : Full documentation
    """
    sheet.eps = sheet.net_profit / ledger.share_count
    previous = ledger.share_price
    ledger.share_price = max(
        cfg.share_price_floor, previous + sheet.eps * cfg.pe_multiplier
    )

    if log.isEnabledFor(logging.DEBUG):
        log.debug(
            f"  [{ledger.company_id}] EPS={sheet.eps:.6f}, share price "
            f"{previous:.4f} -> {ledger.share_price:.4f}"
        )


def append_result(
    ledger: CompanyLedger,
    decisions: Decisions,
    market: MarketState,
    cfg: Config,
    sheet: Worksheet,
    notes: list[str],
) -> None:
    """
    Assemble the immutable QuarterResult and append it to the history.

    See Also
    --------
    topazsim.events.finance.AppendResult : Full documentation
    """
    assert sheet.expenses is not None

    prices = decisions.prices
    units_sold = int(sheet.units_sold.sum())

    balance = BalanceSheet(
        cash=ledger.cash,
        inventory_value=float(ledger.inventory.sum()) * sheet.avg_unit_cost,
        machine_value=ledger.machines * cfg.machine_book_value,
        loans=ledger.loans,
        net_worth=ledger.net_worth,
    )
    financials = Financials(
        revenue=float(sheet.revenue.sum()),
        cogs=sheet.cogs,
        gross_profit=sheet.gross_profit,
        expenses=sheet.expenses,
        ebit=sheet.ebit,
        net_profit=sheet.net_profit,
        balance_sheet=balance,
    )
    metrics = Metrics(
        units_sold=units_sold,
        units_produced=int(sheet.units_produced.sum()),
        market_share=safe_divide(units_sold, market.total_demand) * 100.0,
        share_price=ledger.share_price,
        eps=sheet.eps,
        morale=ledger.morale,
        productivity=ledger.productivity,
        capacity=sheet.capacity,
        fulfillment_ratio=sheet.fulfillment_ratio,
    )

    result = QuarterResult(
        quarter=market.quarter,
        financials=financials,
        metrics=metrics,
        inventory_opening=sheet.inventory_opening,
        units_produced_by_product=sheet.units_produced,
        units_sold_by_product=sheet.units_sold,
        inventory_closing=ledger.inventory,
        sales_by_product=tuple(
            ProductSales(p, int(sheet.units_sold[i]), float(sheet.revenue[i]))
            for i, p in enumerate(PRODUCTS)
        ),
        sales_by_region=tuple(
            RegionSales(
                region=r,
                units=sheet.regional_units[:, j],
                revenue=sheet.regional_units[:, j] * prices,
            )
            for j, r in enumerate(REGIONS)
        ),
        events=tuple(notes),
    )

    ledger.append_result(result)
    sheet.result = result

    log.deep(f"  [{ledger.company_id}] result: {result.to_dict()}")
