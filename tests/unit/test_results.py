"""Tests for history export."""

import pytest
import yaml

from tests.helpers.factories import mock_ledger
from topazsim.decisions import default_decisions
from topazsim.results import (
    dumps_history,
    history_frame,
    history_records,
    session_frame,
)


@pytest.fixture
def played(engine):
    """A ledger with two recorded quarters."""
    market = engine.new_market()
    ledger = engine.new_ledger("acme", "Acme Corp")
    for _ in range(2):
        ledger, _ = engine.process_company(ledger, market, default_decisions())
        market.quarter += 1
    return ledger


class TestRecords:
    def test_one_record_per_quarter(self, played):
        records = history_records(played)
        assert [r["quarter"] for r in records] == [1, 2]

    def test_flat_keys(self, played):
        row = history_records(played)[0]
        for key in (
            "revenue",
            "net_profit",
            "expense_tax",
            "expense_salesforce",
            "cash",
            "net_worth",
            "share_price",
            "units_sold",
            "produced_p1",
            "sold_p3",
            "inventory_p2",
            "events",
        ):
            assert key in row
        assert isinstance(row["events"], str)
        assert row["sold_p1"] + row["sold_p2"] + row["sold_p3"] == row["units_sold"]

    def test_empty_history(self):
        assert history_records(mock_ledger()) == []

    def test_dumps_history(self, played):
        doc = yaml.safe_load(dumps_history(played))
        assert doc["company_id"] == "acme"
        assert doc["name"] == "Acme Corp"
        assert len(doc["history"]) == 2
        assert doc["history"][1]["quarter"] == 2


class TestFrames:
    def test_history_frame(self, played):
        pytest.importorskip("pandas")
        df = history_frame(played)
        assert list(df.index) == [1, 2]
        assert df.loc[1, "revenue"] == played.history[0].financials.revenue

    def test_empty_history_frame(self):
        pytest.importorskip("pandas")
        assert history_frame(mock_ledger()).empty

    def test_session_frame(self, barrier):
        pytest.importorskip("pandas")
        barrier.join("g1", "a")
        barrier.join("g1", "b")
        barrier.submit("g1", "a", 1, default_decisions())
        barrier.submit("g1", "b", 1, default_decisions())

        record = barrier.repository.get("g1")
        df = session_frame(record)

        assert df.index.names == ["company_id", "quarter"]
        assert set(df.index) == {("a", 1), ("b", 1)}

    def test_empty_session_frame(self, barrier):
        pytest.importorskip("pandas")
        barrier.join("g1", "a")
        assert session_frame(barrier.repository.get("g1")).empty
