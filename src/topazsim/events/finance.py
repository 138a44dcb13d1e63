"""
Finance events: expenses, profit and loss, share price and reporting.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from topazsim.core.decorators import event

if TYPE_CHECKING:
    from topazsim.worksheet import CompanyContext


@event
class BookExpenses:
    """
    Itemize operating expenses.

    Rule
    ----
        marketing     =  Σ marketing spend
        personnel     =  E · 3000 + salesSalary · 10
        maintenance   =  from TradeMachines
        depreciation  =  K · 500
        interest      =  L · r / 4
        salesforce    =  Σ reps · 2500 + Σ marketing staff · 3000
        rd            =  0

    E: Employees (after hiring), K: Machines (after trading), L: Loans,
    r: Interest Rate
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.finance import book_expenses

        book_expenses(ctx.ledger, ctx.decisions, ctx.market, ctx.config, ctx.sheet)


@event
class CloseBooks:
    """
    Compute the P&L and settle cash and net worth.

    Rule
    ----
        c̄       =  production cost / units produced   (0 if none)
        COGS    =  c̄ · units sold
        EBIT    =  revenue − COGS − operating expenses
        tax     =  max(0, EBIT) · 0.20
        net     =  EBIT − tax
        cash    ←  cash + net + sale proceeds − purchase cost
        NW      ←  NW + net

    Raises `topazsim.errors.ComputationError` on any non-finite figure or
    negative stock.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.finance import close_books

        close_books(ctx.ledger, ctx.config, ctx.sheet)


@event
class RevalueShares:
    """
    Move the share price with earnings.

    Rule
    ----
        EPS  =  net / shares
        P    ←  max(0.1, P + EPS · 5)
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.finance import revalue_shares

        revalue_shares(ctx.ledger, ctx.config, ctx.sheet)


@event
class AppendResult:
    """
    Record the quarter as an immutable QuarterResult in the ledger history.

    The closing balance sheet values inventory at the quarter's average unit
    cost and machines at book value (40 000 each); market share is units
    sold over total market demand, in percent.
    """

    def execute(self, ctx: CompanyContext) -> None:
        from topazsim.events._internal.finance import append_result

        append_result(
            ctx.ledger, ctx.decisions, ctx.market, ctx.config, ctx.sheet, ctx.notes
        )
