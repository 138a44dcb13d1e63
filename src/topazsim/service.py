"""
Dict-in / dict-out facade over one shared barrier.

`GameService` is what a transport layer (HTTP handlers, a message consumer,
a CLI) calls. All of its entry points share a single `SubmissionBarrier`
and therefore a single session repository, so a reset is immediately
visible to status queries and submissions, and vice versa. Credential
checks for the admin operations happen before the service is called.
"""

from __future__ import annotations

from typing import Any, Mapping

from topazsim.barrier import SubmissionBarrier
from topazsim.errors import ValidationError
from topazsim.results import history_records

__all__ = ["GameService"]


class GameService:
    def __init__(self, barrier: SubmissionBarrier | None = None) -> None:
        self.barrier = barrier if barrier is not None else SubmissionBarrier()

    def submit_decisions(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """
        Submit one company's decisions.

        *payload* carries ``gameId``, ``companyId``, ``quarter`` and
        ``decisions`` (``payload`` is accepted as an alias of the latter).

        Raises
        ------
        ValidationError
            If a required field is missing or malformed.
        """
        if not isinstance(payload, Mapping):
            raise ValidationError(
                f"request body must be a mapping, got {type(payload).__name__}"
            )
        missing = [
            key
            for key in ("gameId", "companyId", "quarter")
            if payload.get(key) in (None, "")
        ]
        decisions = payload.get("decisions", payload.get("payload"))
        if decisions is None:
            missing.append("decisions")
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

        outcome = self.barrier.submit(
            payload["gameId"], payload["companyId"], payload["quarter"], decisions
        )
        return outcome.to_dict()

    def get_status(
        self, game_id: str, company_id: str | None = None
    ) -> dict[str, Any]:
        return self.barrier.status(game_id, company_id).to_dict()

    def admin_reset(self, game_id: str) -> dict[str, Any]:
        return self.barrier.reset(game_id).to_dict()

    def list_sessions(self) -> list[dict[str, Any]]:
        return [s.to_dict() for s in self.barrier.list_sessions()]

    def join(
        self,
        game_id: str,
        company_id: str,
        name: str | None = None,
        strategy: str | None = None,
    ) -> dict[str, Any]:
        return self.barrier.join(game_id, company_id, name, strategy=strategy).to_dict()

    def lock_company(self, game_id: str, company_id: str) -> dict[str, Any]:
        return self.barrier.lock(game_id, company_id).to_dict()

    def unlock_company(self, game_id: str, company_id: str) -> dict[str, Any]:
        return self.barrier.unlock(game_id, company_id).to_dict()

    def company_history(self, game_id: str, company_id: str) -> list[dict[str, Any]]:
        """
        Flat per-quarter records of one company (see `history_records`).

        Raises
        ------
        topazsim.errors.SessionNotFoundError
            If the session does not exist.
        ValidationError
            If the company is not part of the session.
        """
        repo = self.barrier.repository
        with repo.lock(game_id):
            record = repo.get(game_id)
            if company_id not in record.companies:
                raise ValidationError(
                    f"Company '{company_id}' is not part of session '{game_id}'"
                )
            return history_records(record.companies[company_id])
