"""
Exception taxonomy for topazsim.

Only request-level problems surface to callers. Concurrency conflicts are
prevented by the per-session locking in `topazsim.repository` and never
raised; an unknown session is reported as "not found" by read operations
and created lazily by submissions.
"""

from __future__ import annotations


class TopazError(Exception):
    """Base class for all topazsim errors."""


class ValidationError(TopazError, ValueError):
    """
    A request field is missing or malformed.

    Raised before any state is touched, so the caller may fix the request
    and resubmit.
    """


class CompanyLockedError(ValidationError):
    """The company is LOCKED for the current quarter and cannot submit."""


class StaleQuarterError(ValidationError):
    """The submission targets a quarter other than the session's current one."""


class SessionNotFoundError(TopazError, KeyError):
    """No session is stored under the requested game id."""

    def __init__(self, game_id: str) -> None:
        super().__init__(game_id)
        self.game_id = game_id

    def __str__(self) -> str:
        return f"Session '{self.game_id}' not found"


class ComputationError(TopazError, ArithmeticError):
    """
    The engine produced a degenerate figure (NaN, infinity, negative stock).

    The tick is aborted before anything is committed to the session.
    """
