"""
Session records and their self-describing serialized form.

A session is one running game: a shared market, the ledgers of every
company taking part, each company's submission status for the quarter in
progress, the decisions staged so far and the session's own random stream.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Mapping

import numpy as np
from numpy.random import Generator

from topazsim.decisions import Decisions
from topazsim.ledger import CompanyLedger
from topazsim.market import MarketState

__all__ = [
    "CompanyStatus",
    "SessionRecord",
    "session_from_dict",
    "session_to_dict",
]

SCHEMA_VERSION = 1


class CompanyStatus(str, Enum):
    """Submission status of one company for the quarter in progress."""

    PENDING = "PENDING"
    SUBMITTED = "SUBMITTED"
    LOCKED = "LOCKED"  # frozen for this quarter; skipped by the tick


@dataclass(slots=True, eq=False)
class SessionRecord:
    """
    Complete state of one game session.

    ``companies`` and ``statuses`` share the same keys and keep join order.
    ``staged`` holds decisions of SUBMITTED companies only and is emptied by
    every tick. ``ai_companies`` maps AI competitors to the name of the
    strategy that decides for them.
    """

    game_id: str
    market: MarketState
    rng: Generator
    companies: dict[str, CompanyLedger] = field(default_factory=dict)
    statuses: dict[str, CompanyStatus] = field(default_factory=dict)
    staged: dict[str, Decisions] = field(default_factory=dict)
    submitted_at: dict[str, str] = field(default_factory=dict)
    ai_companies: dict[str, str] = field(default_factory=dict)

    @property
    def quarter(self) -> int:
        return self.market.quarter

    def add_company(self, ledger: CompanyLedger, strategy: str | None = None) -> None:
        cid = ledger.company_id
        self.companies[cid] = ledger
        self.statuses[cid] = CompanyStatus.PENDING
        if strategy is not None:
            self.ai_companies[cid] = strategy

    def stage(self, company_id: str, decisions: Decisions) -> None:
        """Record *decisions* and mark the company SUBMITTED (overwrites)."""
        self.staged[company_id] = decisions
        self.statuses[company_id] = CompanyStatus.SUBMITTED
        self.submitted_at[company_id] = datetime.now(timezone.utc).isoformat()

    def ids_with(self, status: CompanyStatus) -> list[str]:
        return [cid for cid, st in self.statuses.items() if st is status]

    def count(self, status: CompanyStatus) -> int:
        return sum(1 for st in self.statuses.values() if st is status)

    @property
    def all_submitted(self) -> bool:
        """True when at least one company exists and none is PENDING."""
        statuses = self.statuses.values()
        return bool(self.statuses) and CompanyStatus.PENDING not in statuses

    @property
    def ready_to_tick(self) -> bool:
        """Barrier condition: nobody pending and somebody actually submitted."""
        return self.all_submitted and CompanyStatus.SUBMITTED in self.statuses.values()

    def reset_statuses(self) -> None:
        for cid in self.statuses:
            self.statuses[cid] = CompanyStatus.PENDING
        self.staged.clear()
        self.submitted_at.clear()


# --------------------------------------------------------------------------- #
#  Serialization                                                              #
# --------------------------------------------------------------------------- #
def _rng_to_dict(rng: Generator) -> dict[str, Any]:
    return dict(rng.bit_generator.state)


def _rng_from_dict(state: Mapping[str, Any]) -> Generator:
    bit_generator = getattr(np.random, state["bit_generator"])()
    bit_generator.state = dict(state)
    return Generator(bit_generator)


def session_to_dict(record: SessionRecord) -> dict[str, Any]:
    """
    Return a plain, YAML/JSON-friendly snapshot of *record*.

    The snapshot holds the market, every ledger with its full history, the
    statuses, staged decisions (wire form), AI flags and the exact state of
    the session's random stream.
    """
    return {
        "schema_version": SCHEMA_VERSION,
        "game_id": record.game_id,
        "market": record.market.to_dict(),
        "companies": [ledger.to_dict() for ledger in record.companies.values()],
        "statuses": {cid: st.value for cid, st in record.statuses.items()},
        "staged": {cid: d.to_mapping() for cid, d in record.staged.items()},
        "submitted_at": dict(record.submitted_at),
        "ai_companies": dict(record.ai_companies),
        "rng": _rng_to_dict(record.rng),
    }


def session_from_dict(data: Mapping[str, Any]) -> SessionRecord:
    """
    Rebuild a SessionRecord from `session_to_dict` output.

    Raises
    ------
    ValueError
        If the snapshot was written by an unsupported schema version.
    """
    version = data.get("schema_version", SCHEMA_VERSION)
    if version != SCHEMA_VERSION:
        raise ValueError(
            f"Unsupported session schema version {version} "
            f"(expected {SCHEMA_VERSION})"
        )

    companies = {}
    for raw in data.get("companies", ()):
        ledger = CompanyLedger.from_dict(raw)
        companies[ledger.company_id] = ledger

    return SessionRecord(
        game_id=str(data["game_id"]),
        market=MarketState.from_dict(data["market"]),
        rng=_rng_from_dict(data["rng"]),
        companies=companies,
        statuses={
            cid: CompanyStatus(st) for cid, st in (data.get("statuses") or {}).items()
        },
        staged={
            cid: Decisions.from_mapping(d)
            for cid, d in (data.get("staged") or {}).items()
        },
        submitted_at=dict(data.get("submitted_at") or {}),
        ai_companies=dict(data.get("ai_companies") or {}),
    )
