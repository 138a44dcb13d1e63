"""Multi-quarter sessions mixing human and AI companies."""

import pytest

from tests.helpers.factories import mock_decisions
from tests.helpers.invariants import assert_result_invariants
from topazsim.barrier import CompletedResult, SubmissionBarrier
from topazsim.competitors import list_strategies

N_QUARTERS = 12


@pytest.mark.regression
def test_every_strategy_survives_a_long_session(shocky_engine):
    barrier = SubmissionBarrier(shocky_engine)
    humans = ["h1", "h2"]
    for cid in humans:
        barrier.join("g1", cid)
    for name in list_strategies():
        barrier.join("g1", f"ai-{name}", strategy=name)

    plans = {
        "h1": mock_decisions(production=(1500, 800, 200), shift_level=2),
        "h2": mock_decisions(prices=(80.0, 95.0, 120.0), worker_wage=14.0),
    }

    for quarter in range(1, N_QUARTERS + 1):
        record = barrier.repository.get("g1")
        before = {cid: led.copy() for cid, led in record.companies.items()}

        barrier.submit("g1", "h1", quarter, plans["h1"])
        outcome = barrier.submit("g1", "h2", quarter, plans["h2"])

        assert isinstance(outcome, CompletedResult)
        assert outcome.quarter == quarter
        assert len(outcome.results) == len(before)
        for cid, result in outcome.results.items():
            assert_result_invariants(result, before[cid], record.companies[cid])

    record = barrier.repository.get("g1")
    assert record.quarter == N_QUARTERS + 1
    for ledger in record.companies.values():
        assert [r.quarter for r in ledger.history] == list(range(1, N_QUARTERS + 1))


@pytest.mark.regression
def test_shocks_hit_every_company_alike(shocky_engine):
    barrier = SubmissionBarrier(shocky_engine)
    barrier.join("g1", "a")
    barrier.join("g1", "b", strategy="noop")

    for quarter in range(1, 5):
        outcome = barrier.submit("g1", "a", quarter, mock_decisions())
        notes_a = outcome.results["a"].events
        notes_b = outcome.results["b"].events
        assert notes_a[0] == notes_b[0]
        assert notes_a[0].startswith(("Global Market Shock", "Supply Chain Crisis"))
