"""Tests for competitor strategies and their registry."""

import pytest

import topazsim.competitors as competitors
from tests.helpers.factories import mock_ledger, mock_market
from topazsim.competitors import (
    NoOpStrategy,
    Personality,
    RuleBasedStrategy,
    ScriptedStrategy,
    get_strategy,
    list_strategies,
    register_strategy,
)
from topazsim.decisions import Decisions, default_decisions, idle_decisions


def test_noop_is_idle():
    dec = NoOpStrategy(reference_wage=11.0).decide(mock_ledger(), mock_market())
    assert dec == idle_decisions(11.0)
    assert dec.production.sum() == 0
    assert dec.marketing.sum() == 0.0


class TestRuleBased:
    @pytest.mark.parametrize("personality", list(Personality))
    def test_production_fits_capacity(self, personality):
        ledger = mock_ledger(machines=2, productivity=0.9)
        dec = RuleBasedStrategy(personality).decide(ledger, mock_market())

        shift_mult = {1: 1.0, 2: 1.5, 3: 2.0}[dec.operations.shift_level]
        assert dec.production.sum() <= 2 * 500 * 0.9 * shift_mult
        assert (dec.production >= 0).all()
        assert dec.regional_staff is not None

    def test_cost_leader_undercuts(self):
        dec = get_strategy("cost_leader").decide(mock_ledger(), mock_market())
        base = default_decisions()
        assert (dec.prices < base.prices).all()
        assert dec.operations.shift_level == 2

    def test_quality_innovator_pays_more(self):
        dec = get_strategy("quality_innovator").decide(mock_ledger(), mock_market())
        assert dec.personnel.worker_wage > 12.0
        assert (dec.prices > default_decisions().prices).all()

    def test_aggressive_marketer_doubles_budget(self):
        dec = get_strategy("aggressive_marketer").decide(mock_ledger(), mock_market())
        assert dec.marketing.sum() == pytest.approx(
            2 * default_decisions().marketing.sum()
        )

    def test_full_stock_means_no_production(self):
        ledger = mock_ledger(inventory=[10_000, 10_000, 10_000])
        dec = RuleBasedStrategy("COST_LEADER").decide(ledger, mock_market())
        assert dec.production.sum() == 0

    def test_unknown_personality(self):
        with pytest.raises(ValueError):
            RuleBasedStrategy("LAZY")

    def test_repr(self):
        assert "COST_LEADER" in repr(RuleBasedStrategy(Personality.COST_LEADER))


class TestScripted:
    def test_replays_by_quarter(self):
        first = default_decisions()
        second = idle_decisions(price=99.0)
        strategy = ScriptedStrategy([first, second.to_mapping()])

        assert strategy.decide(mock_ledger(), mock_market(quarter=1)) == first
        assert strategy.decide(mock_ledger(), mock_market(quarter=2)) == second

    def test_falls_back_past_the_end(self):
        strategy = ScriptedStrategy(
            [default_decisions()], fallback=get_strategy("cost_leader")
        )
        dec = strategy.decide(mock_ledger(), mock_market(quarter=5))
        assert dec.operations.shift_level == 2

    def test_default_fallback_is_idle(self):
        dec = ScriptedStrategy([]).decide(mock_ledger(), mock_market(quarter=1))
        assert isinstance(dec, Decisions)
        assert dec.production.sum() == 0


class TestRegistry:
    def test_builtins(self):
        assert list_strategies() == [
            "aggressive_marketer",
            "cost_leader",
            "noop",
            "quality_innovator",
        ]

    def test_register_and_get(self, monkeypatch):
        monkeypatch.setattr(
            competitors, "_STRATEGY_REGISTRY", dict(competitors._STRATEGY_REGISTRY)
        )
        strategy = ScriptedStrategy([default_decisions()])
        register_strategy("replay", strategy)
        assert get_strategy("replay") is strategy
        assert "replay" in list_strategies()

    def test_unknown_name(self):
        with pytest.raises(KeyError, match="Available strategies"):
            get_strategy("genius")

    def test_register_rejects_non_strategy(self):
        with pytest.raises(TypeError, match="CompetitorStrategy"):
            register_strategy("bad", object())  # type: ignore[arg-type]
