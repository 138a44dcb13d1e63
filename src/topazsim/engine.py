# src/topazsim/engine.py
from __future__ import annotations

from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml
from numpy.random import Generator

import topazsim.events  # noqa: F401 - needed to register events
from topazsim import logging
from topazsim.config import Config
from topazsim.core.default_pipeline import create_default_pipelines
from topazsim.core.event import Event
from topazsim.core.pipeline import Pipeline
from topazsim.decisions import Decisions
from topazsim.helpers import session_rng
from topazsim.ledger import CompanyLedger, QuarterResult, default_ledger
from topazsim.market import MarketState, default_market
from topazsim.worksheet import CompanyContext, MarketContext

__all__ = ["Engine", "TickOutcome"]

log = logging.getLogger(__name__)


# helpers
# ---------------------------------------------------------------------------
def _read_yaml(obj: str | Path | Mapping[str, Any] | None) -> Dict[str, Any]:
    """Return a plain dict – {} if *obj* is None."""
    if obj is None:
        return {}
    if isinstance(obj, Mapping):
        return dict(obj)
    p = Path(obj)
    with p.open("rt", encoding="utf-8") as fh:
        data = yaml.safe_load(fh) or {}
    if not isinstance(data, Mapping):
        raise TypeError(f"config root must be mapping, got {type(data)!r}")
    return dict(data)


def _package_defaults() -> Dict[str, Any]:
    """Load topazsim/defaults.yml"""
    txt = resources.files("topazsim").joinpath("defaults.yml").read_text()
    return yaml.safe_load(txt) or {}


def _merge_section(base: Any, update: Any) -> Any:
    """Shallow-merge the ``market`` / ``company`` sections instead of replacing."""
    if isinstance(base, Mapping) and isinstance(update, Mapping):
        return {**base, **update}
    return update


@dataclass(slots=True)
class TickOutcome:
    """
    Everything one tick produced, ready to be committed to a session.

    Nothing in here aliases the inputs of `Engine.run_tick`.
    """

    market: MarketState  # quarter already advanced
    ledgers: dict[str, CompanyLedger]
    results: dict[str, QuarterResult]
    notes: list[str] = field(default_factory=list)


# Engine
# ---------------------------------------------------------------------
@dataclass(slots=True)
class Engine:
    """
    Facade that advances a market and a set of companies by one quarter.

    The engine is stateless between ticks: sessions own the market, the
    ledgers and the random stream, and the engine only transforms copies of
    them. One call to `run_tick` → one `update_market` and one
    `process_company` per submission.
    """

    config: Config
    market_pipeline: Pipeline
    company_pipeline: Pipeline

    @classmethod
    def init(
        cls,
        config: str | Path | Mapping[str, Any] | None = None,
        **overrides: Any,  # anything here wins last
    ) -> "Engine":
        """
        Build an Engine.

        Order of precedence (later overrides earlier):

            1. package defaults  (topazsim/defaults.yml)
            2. *config*  (Path / str / Mapping / None)
            3. explicit keyword arguments (**overrides)

        The ``market`` and ``company`` sections are merged key by key, so an
        override such as ``company={"cash": 0.0}`` keeps every other default.
        """
        # 1 + 2 + 3 → one merged dict
        cfg_dict: Dict[str, Any] = _package_defaults()
        for layer in (_read_yaml(config), overrides):
            for key, value in layer.items():
                cfg_dict[key] = _merge_section(cfg_dict.get(key), value)

        # Validate configuration (centralized validation)
        from topazsim.config import ConfigValidator

        ConfigValidator.validate_config(cfg_dict)

        pipeline_path = cfg_dict.pop("pipeline_path", None)
        if pipeline_path is not None:
            ConfigValidator.validate_pipeline_path(pipeline_path)
            ConfigValidator.validate_pipeline_yaml(pipeline_path)
            market_pipeline = Pipeline.from_yaml(pipeline_path, "market")
            company_pipeline = Pipeline.from_yaml(pipeline_path, "company")
        else:
            market_pipeline, company_pipeline = create_default_pipelines()

        log_config = cfg_dict.pop("logging", None)
        if log_config:
            logging.configure(log_config)

        unknown = set(cfg_dict) - set(Config.__dataclass_fields__)
        if unknown:
            log.warning(f"Ignoring unknown config keys: {sorted(unknown)}")

        return cls(
            config=Config.from_dict(cfg_dict),
            market_pipeline=market_pipeline,
            company_pipeline=company_pipeline,
        )

    # factories
    # ---------------------------------------------------------------------
    def new_market(self) -> MarketState:
        """Initial market of a new session."""
        return default_market(self.config.market)

    def new_ledger(self, company_id: str, name: str | None = None) -> CompanyLedger:
        """Initial ledger of a company joining a session."""
        return default_ledger(company_id, name, self.config.company)

    def new_rng(self, game_id: str) -> Generator:
        """Random stream of a session, derived from the configured seed."""
        return session_rng(self.config.seed, game_id)

    # public API
    # ---------------------------------------------------------------------
    def update_market(
        self, market: MarketState, rng: Generator
    ) -> tuple[MarketState, list[str]]:
        """
        Run the market pipeline on a copy of *market*.

        Returns
        -------
        (MarketState, list[str])
            The updated market (same quarter) and human-readable notes about
            any shock that occurred.
        """
        ctx = MarketContext(config=self.config, rng=rng, market=market.copy())
        self.market_pipeline.execute(ctx)
        return ctx.market, ctx.notes

    def process_company(
        self,
        ledger: CompanyLedger,
        market: MarketState,
        decisions: Decisions,
        notes: list[str] | tuple[str, ...] = (),
    ) -> tuple[CompanyLedger, QuarterResult]:
        """
        Advance one company by one quarter.

        Pure: *ledger* is copied before the company pipeline runs, and
        *market* is only read. *notes* (e.g. market-shock messages) are
        copied into the result's ``events``.

        Raises
        ------
        topazsim.errors.ComputationError
            If the quarter produced a non-finite figure or negative stock.
        """
        ctx = CompanyContext(
            config=self.config,
            market=market,
            ledger=ledger.copy(),
            decisions=Decisions.from_mapping(decisions),
            notes=list(notes),
        )
        self.company_pipeline.execute(ctx)

        result = ctx.sheet.result
        if result is None:
            raise RuntimeError(
                "company pipeline finished without recording a result; "
                "is 'append_result' missing from it?"
            )
        return ctx.ledger, result

    def run_tick(
        self,
        market: MarketState,
        submissions: Mapping[str, tuple[CompanyLedger, Decisions]],
        rng: Generator,
    ) -> TickOutcome:
        """
        Advance the world by exactly one quarter.

        The market is updated once; every submitted company is then processed
        against the updated market. Results are stamped with the quarter
        being closed and the returned market is on the next quarter.

        Parameters
        ----------
        market : MarketState
            Market at the start of the tick (not mutated).
        submissions : Mapping[str, (CompanyLedger, Decisions)]
            Ledger and decisions of each company taking part, by company id.
        rng : Generator
            The session's random stream; advanced by the market pipeline.
        """
        info_enabled = log.isEnabledFor(logging.INFO)
        if info_enabled:
            n = len(submissions)
            log.info(
                f"===== Quarter {market.quarter}: "
                f"{n} compan{'y' if n == 1 else 'ies'} ====="
            )

        new_market, notes = self.update_market(market, rng)

        ledgers: dict[str, CompanyLedger] = {}
        results: dict[str, QuarterResult] = {}
        for company_id, (ledger, decisions) in submissions.items():
            ledgers[company_id], results[company_id] = self.process_company(
                ledger, new_market, decisions, notes
            )

        new_market.quarter += 1

        if info_enabled:
            log.info(f"===== Quarter {market.quarter} complete =====")

        return TickOutcome(
            market=new_market, ledgers=ledgers, results=results, notes=notes
        )

    def get_event(self, name: str) -> Event:
        """
        Get event instance from either pipeline by name.

        Raises
        ------
        KeyError
            If event not found in pipeline.
        """
        for event in [*self.market_pipeline.events, *self.company_pipeline.events]:
            if event.name == name:
                return event

        raise KeyError(
            f"Event '{name}' not found in pipeline. Available: "
            f"{self.market_pipeline.names + self.company_pipeline.names}"
        )
