"""Unit tests for personnel events."""

import numpy as np
import pytest

from tests.helpers.factories import mock_decisions, mock_ledger
from topazsim.events._internal.personnel import (
    adjust_morale,
    update_headcount,
    update_regional_staff,
)


class TestAdjustMorale:
    def test_market_wage_keeps_morale(self, engine):
        ledger = mock_ledger(morale=50.0)
        adjust_morale(ledger, mock_decisions(worker_wage=12.0).personnel, engine.config)
        assert ledger.morale == 50.0
        assert ledger.productivity == pytest.approx(1.0)

    def test_generous_wage_raises_morale(self, engine):
        ledger = mock_ledger(morale=50.0)
        adjust_morale(ledger, mock_decisions(worker_wage=14.0).personnel, engine.config)
        assert ledger.morale == 55.0
        assert ledger.productivity == pytest.approx(0.8 + 0.4 * 0.55)

    def test_low_wage_penalty(self, engine):
        """A wage 20% below the reference costs exactly the fixed penalty."""
        ledger = mock_ledger(morale=50.0)
        adjust_morale(ledger, mock_decisions(worker_wage=9.6).personnel, engine.config)
        assert ledger.morale == 40.0

    def test_low_wage_clamps_at_zero(self, engine):
        """Repeating a below-market wage never takes morale below 0."""
        ledger = mock_ledger(morale=25.0)
        personnel = mock_decisions(worker_wage=9.6).personnel
        seen = []
        for _ in range(5):
            adjust_morale(ledger, personnel, engine.config)
            seen.append(ledger.morale)
        assert seen == [15.0, 5.0, 0.0, 0.0, 0.0]
        assert ledger.productivity == pytest.approx(0.8)

    def test_generous_wage_clamps_at_hundred(self, engine):
        ledger = mock_ledger(morale=98.0)
        adjust_morale(ledger, mock_decisions(worker_wage=20.0).personnel, engine.config)
        assert ledger.morale == 100.0
        assert ledger.productivity == pytest.approx(1.2)

    def test_dismissal_penalty_stacks(self, engine):
        ledger = mock_ledger(morale=50.0)
        personnel = mock_decisions(worker_wage=9.6, dismiss_workers=1).personnel
        adjust_morale(ledger, personnel, engine.config)
        assert ledger.morale == 25.0


class TestUpdateHeadcount:
    def test_recruit_and_dismiss(self):
        ledger = mock_ledger(employees=50)
        personnel = mock_decisions(recruit_workers=10, dismiss_workers=4).personnel
        update_headcount(ledger, personnel)
        assert ledger.employees == 56

    def test_never_negative(self):
        ledger = mock_ledger(employees=3)
        update_headcount(ledger, mock_decisions(dismiss_workers=10).personnel)
        assert ledger.employees == 0


class TestUpdateRegionalStaff:
    def test_none_keeps_staffing(self):
        ledger = mock_ledger()
        before = ledger.regional_staff.copy()
        update_regional_staff(ledger, mock_decisions(regional_staff=None))
        assert ledger.regional_staff == before

    def test_replaces_staffing(self):
        ledger = mock_ledger()
        decisions = mock_decisions(regional_staff=((5, 0, 2, 1), (1, 1, 0, 3)))
        update_regional_staff(ledger, decisions)
        np.testing.assert_array_equal(ledger.regional_staff.sales_reps, [5, 0, 2, 1])
        np.testing.assert_array_equal(
            ledger.regional_staff.marketing_staff, [1, 1, 0, 3]
        )
        assert ledger.regional_staff.total_reps == 8
