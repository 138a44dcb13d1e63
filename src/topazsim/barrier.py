"""
Submission barrier: turns independent quarterly submissions into one tick.

Every company of a session moves through

    PENDING ──submit──▶ SUBMITTED ──(tick)──▶ PENDING
       │                                        ▲
       └───────lock──▶ LOCKED ──(tick/unlock)───┘

The submission that leaves no company PENDING fires the tick, while still
holding the session's lock: staging, the barrier check, the engine run and
the commit form one critical section, so concurrent submissions can neither
skip nor duplicate a tick.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

from topazsim import logging
from topazsim.competitors import CompetitorStrategy, get_strategy
from topazsim.decisions import Decisions, idle_decisions
from topazsim.engine import Engine
from topazsim.errors import (
    CompanyLockedError,
    SessionNotFoundError,
    StaleQuarterError,
    ValidationError,
)
from topazsim.ledger import QuarterResult
from topazsim.repository import InMemorySessionRepository, SessionRepository
from topazsim.session import CompanyStatus, SessionRecord

__all__ = [
    "CompletedResult",
    "ResetReport",
    "SessionSummary",
    "StatusReport",
    "SubmissionBarrier",
    "WaitingResult",
]

log = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
#  Reports                                                                    #
# --------------------------------------------------------------------------- #
@dataclass(slots=True, frozen=True)
class WaitingResult:
    """The barrier is not satisfied yet; nothing was simulated."""

    submitted_count: int
    total_count: int
    pending_company_ids: tuple[str, ...]

    status = "WAITING"

    def to_dict(self) -> dict[str, Any]:
        n = len(self.pending_company_ids)
        return {
            "status": self.status,
            "message": f"Waiting for {n} other company/companies to submit...",
            "submittedCount": self.submitted_count,
            "totalCount": self.total_count,
            "pendingCompanyIds": list(self.pending_company_ids),
        }


@dataclass(slots=True, frozen=True)
class CompletedResult:
    """The barrier fired: one quarter was simulated for every submitter."""

    quarter: int  # the quarter that was closed
    next_quarter: int
    results: dict[str, QuarterResult] = field(default_factory=dict)

    status = "COMPLETED"

    def to_dict(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "message": f"Quarter {self.quarter} simulation complete!",
            "nextQuarter": self.next_quarter,
            "results": {cid: r.to_dict() for cid, r in self.results.items()},
        }


@dataclass(slots=True, frozen=True)
class StatusReport:
    exists: bool
    quarter: int
    statuses: dict[str, CompanyStatus]
    submitted_count: int
    pending_count: int
    all_submitted: bool
    submitted_at: dict[str, str] = field(default_factory=dict)
    company_id: str | None = None
    company_status: CompanyStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "exists": self.exists,
            "quarter": self.quarter,
            "companies": [
                {
                    "companyId": cid,
                    "status": st.value,
                    "submittedAt": self.submitted_at.get(cid),
                }
                for cid, st in self.statuses.items()
            ],
            "submittedCount": self.submitted_count,
            "pendingCount": self.pending_count,
            "allSubmitted": self.all_submitted,
        }
        if self.company_id is not None:
            out["companyStatus"] = (
                self.company_status.value if self.company_status is not None else None
            )
        return out


@dataclass(slots=True, frozen=True)
class ResetReport:
    success: bool
    companies_reset: int
    results_cleared: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "companiesReset": self.companies_reset,
            "resultsCleared": self.results_cleared,
        }


@dataclass(slots=True, frozen=True)
class SessionSummary:
    game_id: str
    quarter: int
    company_count: int
    all_submitted: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "gameId": self.game_id,
            "quarter": self.quarter,
            "companyCount": self.company_count,
            "allSubmitted": self.all_submitted,
        }


# --------------------------------------------------------------------------- #
#  Barrier                                                                    #
# --------------------------------------------------------------------------- #
def _require_id(value: Any, field_name: str) -> str:
    if value is None or value == "":
        raise ValidationError(f"missing required field '{field_name}'")
    if not isinstance(value, str):
        raise ValidationError(
            f"'{field_name}' must be a string, got {type(value).__name__}"
        )
    return value


class SubmissionBarrier:
    """
    Synchronizes the companies of each session into quarterly ticks.

    Parameters
    ----------
    engine : Engine, optional
        The simulation engine; ``Engine.init()`` when omitted.
    repository : SessionRepository, optional
        Where sessions live; a fresh in-memory repository when omitted. Share
        one repository between every entry point of a process.
    strategies : Mapping[str, CompetitorStrategy], optional
        Extra competitor strategies, looked up before the global registry.
    """

    def __init__(
        self,
        engine: Engine | None = None,
        repository: SessionRepository | None = None,
        strategies: Mapping[str, CompetitorStrategy] | None = None,
    ) -> None:
        self.engine = engine if engine is not None else Engine.init()
        self.repository = (
            repository if repository is not None else InMemorySessionRepository()
        )
        self.strategies = dict(strategies or {})

    # ---- helpers -------------------------------------------------------- #
    def _strategy(self, name: str) -> CompetitorStrategy:
        if name in self.strategies:
            return self.strategies[name]
        return get_strategy(name)

    def _find(self, game_id: str) -> SessionRecord | None:
        try:
            return self.repository.get(game_id)
        except SessionNotFoundError:
            return None

    def _new_session(self, game_id: str) -> SessionRecord:
        log.info(f"Creating session '{game_id}'")
        return SessionRecord(
            game_id=game_id,
            market=self.engine.new_market(),
            rng=self.engine.new_rng(game_id),
        )

    def _stage_ai(self, record: SessionRecord) -> None:
        for cid, name in record.ai_companies.items():
            if record.statuses[cid] is CompanyStatus.PENDING:
                decisions = self._strategy(name).decide(
                    record.companies[cid], record.market
                )
                record.stage(cid, decisions)
                log.debug(f"[{record.game_id}] AI company '{cid}' staged via '{name}'")

    @staticmethod
    def _snapshot(record: SessionRecord) -> tuple[dict[str, Any], ...]:
        return (
            dict(record.companies),
            dict(record.ai_companies),
            dict(record.statuses),
            dict(record.staged),
            dict(record.submitted_at),
        )

    @staticmethod
    def _restore(record: SessionRecord, saved: tuple[dict[str, Any], ...]) -> None:
        (
            record.companies,
            record.ai_companies,
            record.statuses,
            record.staged,
            record.submitted_at,
        ) = saved

    def _waiting(self, record: SessionRecord) -> WaitingResult:
        return WaitingResult(
            submitted_count=record.count(CompanyStatus.SUBMITTED),
            total_count=len(record.statuses),
            pending_company_ids=tuple(record.ids_with(CompanyStatus.PENDING)),
        )

    def _tick(self, record: SessionRecord) -> CompletedResult:
        """Run one tick for every SUBMITTED company and commit it to *record*."""
        submitted = record.ids_with(CompanyStatus.SUBMITTED)
        locked = record.ids_with(CompanyStatus.LOCKED)
        closing = record.quarter

        log.info(
            f"[{record.game_id}] Barrier satisfied for Q{closing}: "
            f"{len(submitted)} submitted, {len(locked)} locked"
        )

        outcome = self.engine.run_tick(
            record.market,
            {cid: (record.companies[cid], record.staged[cid]) for cid in submitted},
            record.rng,
        )

        # commit: nothing above touched the record except the rng stream
        record.market = outcome.market
        record.companies.update(outcome.ledgers)
        record.reset_statuses()

        return CompletedResult(
            quarter=closing,
            next_quarter=record.quarter,
            results=outcome.results,
        )

    def _evaluate(
        self, record: SessionRecord
    ) -> WaitingResult | CompletedResult:
        """Check the barrier and tick if satisfied; rolls back on failure."""
        if not record.ready_to_tick:
            return self._waiting(record)

        rng_state = record.rng.bit_generator.state
        try:
            return self._tick(record)
        except Exception:
            record.rng.bit_generator.state = rng_state
            raise

    # ---- operations ----------------------------------------------------- #
    def join(
        self,
        game_id: str,
        company_id: str,
        name: str | None = None,
        *,
        strategy: str | None = None,
    ) -> StatusReport:
        """
        Register a company in a session, creating the session if needed.

        With *strategy* the company is an AI competitor whose decisions are
        staged automatically. Joining an existing company is a no-op.

        Raises
        ------
        ValidationError
            If an id is missing, or the strategy is unknown.
        """
        game_id = _require_id(game_id, "gameId")
        company_id = _require_id(company_id, "companyId")
        if strategy is not None:
            try:
                self._strategy(strategy)
            except KeyError as exc:
                raise ValidationError(str(exc)) from exc

        with self.repository.lock(game_id):
            record = self._find(game_id) or self._new_session(game_id)
            if company_id not in record.companies:
                record.add_company(
                    self.engine.new_ledger(company_id, name), strategy=strategy
                )
                log.info(
                    f"[{game_id}] Company '{company_id}' joined"
                    + (f" (AI: {strategy})" if strategy else "")
                )
            self.repository.put(record)
            return self._status(record, company_id)

    def submit(
        self,
        game_id: str,
        company_id: str,
        quarter: int,
        decisions: Decisions | Mapping[str, Any],
    ) -> WaitingResult | CompletedResult:
        """
        Stage a company's decisions and fire the tick if everyone is ready.

        Unknown sessions and companies are created on the fly. Re-submitting
        before the tick overwrites the staged decisions.

        Raises
        ------
        ValidationError
            Missing or malformed fields; nothing is changed.
        CompanyLockedError
            The company is LOCKED for this quarter.
        StaleQuarterError
            *quarter* is not the session's current quarter.
        topazsim.errors.ComputationError
            The tick produced a degenerate figure; the submission is rolled
            back.
        """
        game_id = _require_id(game_id, "gameId")
        company_id = _require_id(company_id, "companyId")
        if quarter is None:
            raise ValidationError("missing required field 'quarter'")
        if isinstance(quarter, bool) or not isinstance(quarter, int):
            raise ValidationError(
                f"'quarter' must be an integer, got {type(quarter).__name__}"
            )
        if decisions is None:
            raise ValidationError("missing required field 'decisions'")
        parsed = Decisions.from_mapping(decisions)

        with self.repository.lock(game_id):
            record = self._find(game_id)
            current = record.quarter if record else self.engine.new_market().quarter

            if (
                record is not None
                and record.statuses.get(company_id) is CompanyStatus.LOCKED
            ):
                raise CompanyLockedError(
                    f"Company '{company_id}' is locked for quarter {current}"
                )
            if quarter != current:
                raise StaleQuarterError(
                    f"Submission for quarter {quarter} rejected; "
                    f"session '{game_id}' is on quarter {current}"
                )

            if record is None:
                record = self._new_session(game_id)
            saved = self._snapshot(record)
            if company_id not in record.companies:
                record.add_company(self.engine.new_ledger(company_id))

            record.stage(company_id, parsed)
            log.info(f"[{game_id}] Company '{company_id}' submitted for Q{quarter}")

            try:
                self._stage_ai(record)
                outcome = self._evaluate(record)
            except Exception:
                self._restore(record, saved)
                raise

            self.repository.put(record)
            return outcome

    def status(self, game_id: str, company_id: str | None = None) -> StatusReport:
        """
        Report the session's statuses. Never mutates anything.

        An unknown session reports ``exists=False`` on quarter 1.
        """
        game_id = _require_id(game_id, "gameId")
        with self.repository.lock(game_id):
            record = self._find(game_id)
            if record is None:
                return StatusReport(
                    exists=False,
                    quarter=self.engine.new_market().quarter,
                    statuses={},
                    submitted_count=0,
                    pending_count=0,
                    all_submitted=False,
                    company_id=company_id,
                )
            return self._status(record, company_id)

    def _status(self, record: SessionRecord, company_id: str | None) -> StatusReport:
        company_status = None
        if company_id is not None:
            company_status = record.statuses.get(company_id, CompanyStatus.PENDING)
        return StatusReport(
            exists=True,
            quarter=record.quarter,
            statuses=dict(record.statuses),
            submitted_count=record.count(CompanyStatus.SUBMITTED),
            pending_count=record.count(CompanyStatus.PENDING),
            all_submitted=record.all_submitted,
            submitted_at=dict(record.submitted_at),
            company_id=company_id,
            company_status=company_status,
        )

    def reset(self, game_id: str) -> ResetReport:
        """
        Restore a session to its initial state, keeping its companies.

        Market and ledgers return to their defaults (same ids, names and AI
        strategies), every status becomes PENDING, staged decisions are
        dropped and the session's random stream is re-seeded. An unknown
        session is reported with ``success=False`` and nothing is created.
        """
        game_id = _require_id(game_id, "gameId")
        with self.repository.lock(game_id):
            record = self._find(game_id)
            if record is None:
                log.info(f"Reset of unknown session '{game_id}' ignored")
                return ResetReport(
                    success=False, companies_reset=0, results_cleared=False
                )

            fresh = self._new_session(game_id)
            for cid, ledger in record.companies.items():
                fresh.add_company(
                    self.engine.new_ledger(cid, ledger.name),
                    strategy=record.ai_companies.get(cid),
                )
            self.repository.put(fresh)

            log.warning(
                f"[ADMIN] Session '{game_id}' reset. "
                f"{len(fresh.companies)} companies restored to Q{fresh.quarter}."
            )
            return ResetReport(
                success=True,
                companies_reset=len(fresh.companies),
                results_cleared=True,
            )

    def list_sessions(self) -> list[SessionSummary]:
        """Summarize every stored session, each read under its own lock."""
        out = []
        for game_id in self.repository.game_ids():
            with self.repository.lock(game_id):
                record = self._find(game_id)
                if record is None:
                    continue
                out.append(
                    SessionSummary(
                        game_id=game_id,
                        quarter=record.quarter,
                        company_count=len(record.companies),
                        all_submitted=record.all_submitted,
                    )
                )
        return out

    def _existing(self, game_id: str, company_id: str) -> SessionRecord:
        record = self.repository.get(game_id)
        if company_id not in record.companies:
            raise ValidationError(
                f"Company '{company_id}' is not part of session '{game_id}'"
            )
        return record

    def lock(self, game_id: str, company_id: str) -> WaitingResult | CompletedResult:
        """
        Freeze a company for the current quarter.

        Its staged decisions are dropped and the tick will skip it. Locking
        the last PENDING company may satisfy the barrier, in which case the
        tick fires here.

        Raises
        ------
        SessionNotFoundError
            If the session does not exist.
        ValidationError
            If the company is not part of the session.
        """
        game_id = _require_id(game_id, "gameId")
        company_id = _require_id(company_id, "companyId")
        with self.repository.lock(game_id):
            record = self._existing(game_id, company_id)
            saved = self._snapshot(record)
            record.statuses[company_id] = CompanyStatus.LOCKED
            record.staged.pop(company_id, None)
            record.submitted_at.pop(company_id, None)
            log.info(f"[{game_id}] Company '{company_id}' locked for Q{record.quarter}")

            try:
                self._stage_ai(record)
                outcome = self._evaluate(record)
            except Exception:
                self._restore(record, saved)
                raise
            self.repository.put(record)
            return outcome

    def unlock(self, game_id: str, company_id: str) -> StatusReport:
        """
        Return a LOCKED company to PENDING.

        Raises
        ------
        SessionNotFoundError
            If the session does not exist.
        ValidationError
            If the company is not part of the session.
        """
        game_id = _require_id(game_id, "gameId")
        company_id = _require_id(company_id, "companyId")
        with self.repository.lock(game_id):
            record = self._existing(game_id, company_id)
            if record.statuses[company_id] is CompanyStatus.LOCKED:
                record.statuses[company_id] = CompanyStatus.PENDING
                log.info(f"[{game_id}] Company '{company_id}' unlocked")
            self.repository.put(record)
            return self._status(record, company_id)

    def advance(self, game_id: str) -> CompletedResult:
        """
        Tick a single-player session on demand.

        The one human company is given idle decisions when it has none
        staged; AI competitors decide for themselves.

        Raises
        ------
        SessionNotFoundError
            If the session does not exist.
        ValidationError
            If the session does not have exactly one human company.
        """
        game_id = _require_id(game_id, "gameId")
        with self.repository.lock(game_id):
            record = self.repository.get(game_id)
            humans = [cid for cid in record.companies if cid not in record.ai_companies]
            if len(humans) != 1:
                raise ValidationError(
                    f"advance requires exactly one human company in session "
                    f"'{game_id}', found {len(humans)}"
                )

            saved = self._snapshot(record)
            human = humans[0]
            if record.statuses[human] is CompanyStatus.PENDING:
                record.stage(
                    human, idle_decisions(self.engine.config.reference_wage)
                )

            try:
                self._stage_ai(record)
                outcome = self._evaluate(record)
            except Exception:
                self._restore(record, saved)
                raise
            if not isinstance(outcome, CompletedResult):
                # every company LOCKED; nothing to simulate
                self._restore(record, saved)
                raise ValidationError(
                    f"Session '{game_id}' has no company able to advance"
                )
            self.repository.put(record)
            return outcome
