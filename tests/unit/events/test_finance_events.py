"""Unit tests for expenses, closing the books and share valuation."""

import math

import numpy as np
import pytest

from tests.helpers.factories import mock_decisions, mock_ledger, mock_market
from topazsim.errors import ComputationError
from topazsim.events._internal.finance import book_expenses, close_books, revalue_shares
from topazsim.ledger import Expenses
from topazsim.worksheet import Worksheet


def _expenses(**items: float) -> Expenses:
    values = dict.fromkeys(
        (
            "marketing",
            "rd",
            "personnel",
            "maintenance",
            "depreciation",
            "interest",
            "salesforce",
            "tax",
        ),
        0.0,
    )
    values.update(items)
    return Expenses(**values)


def _trading_sheet(expenses: Expenses | None) -> Worksheet:
    """1000 units built for 33 000, 500 of them sold at 100."""
    sheet = Worksheet()
    sheet.units_produced = np.array([1000, 0, 0], dtype=np.int64)
    sheet.production_cost = 33_000.0
    sheet.units_sold = np.array([500, 0, 0], dtype=np.int64)
    sheet.revenue = np.array([50_000.0, 0.0, 0.0])
    sheet.expenses = expenses
    return sheet


class TestBookExpenses:
    def test_itemized(self, engine):
        ledger = mock_ledger(employees=50, machines=10, loans=100_000.0)
        sheet = Worksheet()
        sheet.maintenance_cost = 8_000.0
        book_expenses(
            ledger,
            mock_decisions(),
            mock_market(interest_rate=0.08),
            engine.config,
            sheet,
        )

        exp = sheet.expenses
        assert exp.marketing == 12_000.0
        assert exp.rd == 0.0
        assert exp.personnel == 50 * 3_000.0 + 2_000.0 * 10
        assert exp.maintenance == 8_000.0
        assert exp.depreciation == 10 * 500.0
        assert exp.interest == pytest.approx(2_000.0)
        assert exp.salesforce == 16 * 2_500.0 + 8 * 3_000.0
        assert exp.tax == 0.0
        assert exp.operating == pytest.approx(261_000.0)

    def test_no_loans_no_interest(self, engine):
        sheet = Worksheet()
        book_expenses(
            mock_ledger(loans=0.0),
            mock_decisions(),
            mock_market(),
            engine.config,
            sheet,
        )
        assert sheet.expenses.interest == 0.0


class TestCloseBooks:
    def test_profitable_quarter(self, engine):
        ledger = mock_ledger(cash=100_000.0, net_worth=1_000_000.0)
        sheet = _trading_sheet(_expenses(marketing=1_000.0))
        close_books(ledger, engine.config, sheet)

        assert sheet.avg_unit_cost == 33.0
        assert sheet.cogs == 16_500.0
        assert sheet.gross_profit == 33_500.0
        assert sheet.ebit == 32_500.0
        assert sheet.expenses.tax == pytest.approx(6_500.0)
        assert sheet.net_profit == pytest.approx(26_000.0)
        assert ledger.cash == pytest.approx(126_000.0)
        assert ledger.net_worth == pytest.approx(1_026_000.0)

    def test_loss_is_untaxed_and_cash_may_go_negative(self, engine):
        ledger = mock_ledger(cash=1_000.0)
        sheet = _trading_sheet(_expenses(personnel=100_000.0))
        close_books(ledger, engine.config, sheet)

        assert sheet.expenses.tax == 0.0
        assert sheet.net_profit == pytest.approx(-66_500.0)
        assert ledger.cash == pytest.approx(-65_500.0)

    def test_machine_trades_settle_in_cash(self, engine):
        ledger = mock_ledger(cash=0.0, net_worth=0.0)
        sheet = _trading_sheet(_expenses())
        sheet.purchase_cost = 50_000.0
        sheet.sale_proceeds = 25_000.0
        close_books(ledger, engine.config, sheet)

        assert ledger.cash == pytest.approx(sheet.net_profit - 25_000.0)
        # machine trades are not profit
        assert ledger.net_worth == pytest.approx(sheet.net_profit)

    def test_nothing_produced_zero_cogs(self, engine):
        """Zero output gives an average unit cost of 0, not a division error."""
        ledger = mock_ledger()
        sheet = Worksheet()
        sheet.units_sold = np.array([10, 0, 0], dtype=np.int64)
        sheet.revenue = np.array([1_000.0, 0.0, 0.0])
        sheet.expenses = _expenses()
        close_books(ledger, engine.config, sheet)

        assert sheet.avg_unit_cost == 0.0
        assert sheet.cogs == 0.0
        assert not math.isnan(sheet.net_profit)

    def test_monetary_identity(self, engine):
        ledger = mock_ledger()
        sheet = _trading_sheet(
            _expenses(marketing=1.5, personnel=2.25, interest=3.0, salesforce=4.0)
        )
        close_books(ledger, engine.config, sheet)

        fin_total = sheet.cogs + sheet.expenses.operating + sheet.expenses.tax
        assert sheet.net_profit == pytest.approx(50_000.0 - fin_total)

    def test_requires_booked_expenses(self, engine):
        with pytest.raises(ComputationError, match="expenses must be booked"):
            close_books(mock_ledger(), engine.config, _trading_sheet(None))

    def test_non_finite_revenue(self, engine):
        sheet = _trading_sheet(_expenses())
        sheet.revenue = np.array([np.nan, 0.0, 0.0])
        with pytest.raises(ComputationError, match="revenue is not finite"):
            close_books(mock_ledger(), engine.config, sheet)

    def test_negative_inventory(self, engine):
        ledger = mock_ledger(inventory=[-1, 0, 0])
        with pytest.raises(ComputationError, match="negative inventory"):
            close_books(ledger, engine.config, _trading_sheet(_expenses()))

    def test_failure_leaves_cash_untouched(self, engine):
        ledger = mock_ledger(cash=123.0, inventory=[-1, 0, 0])
        with pytest.raises(ComputationError):
            close_books(ledger, engine.config, _trading_sheet(_expenses()))
        assert ledger.cash == 123.0


class TestRevalueShares:
    def test_profit_lifts_price(self, engine):
        ledger = mock_ledger(share_price=1.0, share_count=1_000_000)
        sheet = Worksheet()
        sheet.net_profit = 26_000.0
        revalue_shares(ledger, engine.config, sheet)

        assert sheet.eps == pytest.approx(0.026)
        assert ledger.share_price == pytest.approx(1.13)

    def test_price_floor(self, engine):
        ledger = mock_ledger(share_price=1.0)
        sheet = Worksheet()
        sheet.net_profit = -1_000_000.0
        revalue_shares(ledger, engine.config, sheet)
        assert ledger.share_price == engine.config.share_price_floor

    def test_share_count_unchanged(self, engine):
        ledger = mock_ledger(share_count=250_000)
        sheet = Worksheet()
        sheet.net_profit = 5_000.0
        revalue_shares(ledger, engine.config, sheet)
        assert ledger.share_count == 250_000
