"""Tests for the quarterly engine facade."""

from pathlib import Path

import numpy as np
import pytest

from tests.helpers.factories import mock_decisions, mock_ledger, mock_market
from tests.helpers.invariants import assert_result_invariants
from topazsim.decisions import default_decisions, idle_decisions
from topazsim.engine import Engine


class TestInit:
    def test_package_defaults(self):
        cfg = Engine.init().config
        assert cfg.units_per_machine == 500
        assert cfg.shift_capacity == (1.0, 1.5, 2.0)
        assert cfg.tax_rate == 0.20
        assert cfg.seed is None

    def test_precedence_yaml_then_kwargs(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text("tax_rate: 0.3\nmarketing_k: 20.0\n")

        cfg = Engine.init(config=path, tax_rate=0.25).config
        assert cfg.tax_rate == 0.25
        assert cfg.marketing_k == 20.0

    def test_mapping_config(self):
        cfg = Engine.init(config={"elasticity": 2.0}).config
        assert cfg.elasticity == 2.0

    def test_yaml_root_must_be_mapping(self, tmp_path: Path):
        path = tmp_path / "cfg.yml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(TypeError, match="config root must be mapping"):
            Engine.init(config=path)

    def test_config_is_frozen(self):
        cfg = Engine.init().config
        with pytest.raises(AttributeError):
            cfg.tax_rate = 0.5  # type: ignore[misc]

    def test_custom_pipeline_path(self, tmp_path: Path):
        """A pipeline without valuation keeps the share price constant."""
        path = tmp_path / "pipeline.yml"
        path.write_text(
            "market:\n  - grow_market_demand\n"
            "company:\n"
            + "".join(
                f"  - {name}\n"
                for name in (
                    "adjust_morale",
                    "calc_capacity",
                    "run_production",
                    "sell_products",
                    "distribute_regional_sales",
                    "book_expenses",
                    "close_books",
                    "append_result",
                )
            )
        )
        engine = Engine.init(pipeline_path=str(path))
        assert "revalue_shares" not in engine.company_pipeline.names

        ledger, result = engine.process_company(
            mock_ledger(share_price=2.0), mock_market(), default_decisions()
        )
        assert ledger.share_price == 2.0
        assert result.metrics.share_price == 2.0


class TestProcessCompany:
    def test_ten_machines_half_shift_load(self, engine):
        """10 machines at morale 50 and the reference wage: 2000 of 5000."""
        ledger = mock_ledger(machines=10, morale=50.0, productivity=1.0)
        decisions = mock_decisions(production=(2000, 0, 0), shift_level=1)

        after, result = engine.process_company(ledger, mock_market(), decisions)

        assert result.metrics.capacity == 5000.0
        assert result.metrics.fulfillment_ratio == 1.0
        np.testing.assert_array_equal(result.units_produced_by_product, [2000, 0, 0])
        assert after.productivity == pytest.approx(1.0)
        assert_result_invariants(result, ledger, after)

    def test_is_pure(self, engine):
        ledger = mock_ledger(inventory=[10, 10, 10])
        market = mock_market()
        before = ledger.to_dict()

        engine.process_company(ledger, market, default_decisions())

        assert ledger.to_dict() == before
        assert market == mock_market()

    def test_accepts_wire_decisions(self, engine):
        _, result = engine.process_company(
            mock_ledger(), mock_market(), default_decisions().to_mapping()
        )
        assert result.metrics.units_produced > 0

    def test_result_is_stamped_with_market_quarter(self, engine):
        _, result = engine.process_company(
            mock_ledger(), mock_market(quarter=7), default_decisions()
        )
        assert result.quarter == 7

    def test_zero_machines(self, engine):
        ledger = mock_ledger(machines=0, inventory=[0, 0, 0])
        after, result = engine.process_company(
            ledger, mock_market(), mock_decisions(production=(500, 500, 500))
        )
        assert result.metrics.capacity == 0.0
        assert result.metrics.fulfillment_ratio == 0.0
        assert result.metrics.units_sold == 0
        assert result.financials.cogs == 0.0
        assert_result_invariants(result, ledger, after)

    def test_zero_machines_idle_order(self, engine):
        ledger = mock_ledger(machines=0)
        after, result = engine.process_company(
            ledger, mock_market(), mock_decisions(production=(0, 0, 0))
        )
        assert result.metrics.capacity == 0.0
        assert result.metrics.fulfillment_ratio == 0.0
        assert_result_invariants(result, ledger, after)

    def test_zero_production_sells_from_stock(self, engine):
        ledger = mock_ledger(inventory=[100, 0, 0])
        after, result = engine.process_company(
            ledger, mock_market(), mock_decisions(production=(0, 0, 0))
        )
        assert result.financials.cogs == 0.0
        assert result.metrics.units_sold == 100
        assert result.units_sold_by_product[1] == 0
        assert_result_invariants(result, ledger, after)

    def test_negative_cash_is_reported(self, engine):
        ledger = mock_ledger(cash=0.0)
        after, result = engine.process_company(
            ledger, mock_market(), idle_decisions()
        )
        assert after.cash < 0.0
        assert result.financials.balance_sheet.cash == after.cash
        assert result.financials.net_profit < 0.0

    def test_dismissals_shrink_workforce(self, engine):
        ledger = mock_ledger(employees=50)
        after, _ = engine.process_company(
            ledger, mock_market(), mock_decisions(dismiss_workers=5)
        )
        assert after.employees == 45

    def test_notes_become_result_events(self, engine):
        _, result = engine.process_company(
            mock_ledger(), mock_market(), default_decisions(), notes=["hello"]
        )
        assert result.events[0] == "hello"

    def test_missing_append_result(self, engine):
        engine.company_pipeline.remove("append_result")
        with pytest.raises(RuntimeError, match="append_result"):
            engine.process_company(mock_ledger(), mock_market(), default_decisions())


class TestRunTick:
    def test_advances_quarter_once(self, engine):
        market = engine.new_market()
        outcome = engine.run_tick(
            market,
            {
                "a": (engine.new_ledger("a"), default_decisions()),
                "b": (engine.new_ledger("b"), idle_decisions()),
            },
            engine.new_rng("g"),
        )

        assert market.quarter == 1
        assert outcome.market.quarter == 2
        assert set(outcome.results) == {"a", "b"}
        assert all(r.quarter == 1 for r in outcome.results.values())
        assert outcome.market.total_demand == pytest.approx(10_000.0 * 1.02)

    def test_inputs_not_mutated(self, engine):
        ledger = engine.new_ledger("a")
        snapshot = ledger.to_dict()
        outcome = engine.run_tick(
            engine.new_market(),
            {"a": (ledger, default_decisions())},
            engine.new_rng("g"),
        )
        assert ledger.to_dict() == snapshot
        assert outcome.ledgers["a"] is not ledger
        assert len(outcome.ledgers["a"].history) == 1

    def test_shock_notes_reach_every_company(self, shocky_engine):
        engine = shocky_engine
        outcome = engine.run_tick(
            engine.new_market(),
            {
                "a": (engine.new_ledger("a"), default_decisions()),
                "b": (engine.new_ledger("b"), default_decisions()),
            },
            engine.new_rng("g"),
        )
        assert len(outcome.notes) == 1
        for result in outcome.results.values():
            assert result.events[0] == outcome.notes[0]

    def test_deterministic_with_seed(self, shocky_engine):
        def play():
            engine = shocky_engine
            market, rng = engine.new_market(), engine.new_rng("replay")
            ledger = engine.new_ledger("a")
            history = []
            for _ in range(4):
                submissions = {"a": (ledger, default_decisions())}
                outcome = engine.run_tick(market, submissions, rng)
                market, ledger = outcome.market, outcome.ledgers["a"]
                history.append((market.to_dict(), outcome.results["a"].to_dict()))
            return history

        assert play() == play()

    def test_no_submissions_still_updates_market(self, engine):
        outcome = engine.run_tick(engine.new_market(), {}, engine.new_rng("g"))
        assert outcome.results == {}
        assert outcome.market.quarter == 2


def test_get_event(engine):
    assert engine.get_event("run_production").name == "run_production"
    assert engine.get_event("apply_market_shock").name == "apply_market_shock"
    with pytest.raises(KeyError, match="not found in pipeline"):
        engine.get_event("print_money")
