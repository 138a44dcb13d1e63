"""
topazsim - Turn-Based Business Management Simulation
====================================================

topazsim runs multi-player management games in which every company takes
quarterly decisions (prices, production, marketing, staffing, machines) and
a server-authoritative engine advances the shared market by one quarter once
every participant of a session has submitted.

Quick Start
-----------
Two companies playing one quarter:

>>> import topazsim as tz
>>> service = tz.GameService(tz.SubmissionBarrier(tz.Engine.init(seed=42)))
>>> draft = tz.default_decisions().to_mapping()
>>> service.join("demo", "alpha")["exists"] and service.join("demo", "beta")["exists"]
True
>>> service.submit_decisions(
...     {"gameId": "demo", "companyId": "alpha", "quarter": 1, "decisions": draft}
... )["status"]
'WAITING'

Processing one company directly with the engine:

>>> engine = tz.Engine.init(seed=42)
>>> ledger = engine.new_ledger("alpha")
>>> ledger, result = engine.process_company(
...     ledger, engine.new_market(), tz.default_decisions()
... )
>>> result.metrics.units_produced
3000

Custom configuration via YAML file or keyword overrides:

>>> engine = tz.Engine.init(config="my_config.yml", tax_rate=0.25)  # doctest: +SKIP

Key Concepts
------------
**Submission Barrier**
  Companies move PENDING → SUBMITTED; the submission that leaves nobody
  PENDING fires one tick for the whole session, under the session's lock.

**Event Pipeline**
  A tick runs the market pipeline once (shocks, demand growth) and the
  company pipeline once per submitter: personnel → operations → sales →
  finance → result. Both pipelines are lists of registered events and can
  be customized.

**Deterministic RNG**
  Each session owns a random stream derived from the configured ``seed``
  and its game id, so sessions replay exactly.

Public API
----------
Engine
    Quarterly simulation facade.
SubmissionBarrier
    Session synchronization (submit, status, reset, lock, advance).
GameService
    Dict-in / dict-out facade for transport layers.
InMemorySessionRepository, YamlSessionRepository
    Session storage with per-session locking.
Decisions, default_decisions, idle_decisions
    Quarterly decision value objects.
Event, event, Pipeline
    Base class, decorator and pipeline for custom stages.

Notes
-----
- Time scale: 1 tick = 1 quarter
- Configuration precedence: defaults.yml → user config → kwargs
- Pipeline events execute in explicit order (no automatic dependency resolution)
"""

from __future__ import annotations

__version__: str = "0.1.0"

from typing import TypeAlias

import numpy as np

# Type alias for RNG
Rng: TypeAlias = np.random.Generator

from . import logging  # noqa: E402 (circular‑safe)


def make_rng(seed: int | None = None) -> Rng:
    """Create a new random number generator.

    Parameters
    ----------
    seed : int | None
        Seed for reproducibility. If `None`, uses a random seed.

    Examples
    --------
    >>> import topazsim as tz
    >>> rng = tz.make_rng(42)  # Reproducible
    >>> rng2 = tz.make_rng()  # Random seed

    See Also
    --------
    numpy.random.default_rng : The underlying NumPy function
    """
    return np.random.default_rng(seed)


from .barrier import (  # noqa: E402
    CompletedResult,
    ResetReport,
    SessionSummary,
    StatusReport,
    SubmissionBarrier,
    WaitingResult,
)
from .core import Event, Pipeline, event, get_event, list_events  # noqa: E402
from .decisions import Decisions, default_decisions, idle_decisions  # noqa: E402
from .engine import Engine, TickOutcome  # noqa: E402
from .errors import (  # noqa: E402
    CompanyLockedError,
    ComputationError,
    SessionNotFoundError,
    StaleQuarterError,
    TopazError,
    ValidationError,
)
from .ledger import PRODUCTS, REGIONS, CompanyLedger, QuarterResult  # noqa: E402
from .market import MarketState  # noqa: E402
from .repository import (  # noqa: E402
    InMemorySessionRepository,
    SessionRepository,
    YamlSessionRepository,
)
from .service import GameService  # noqa: E402
from .session import CompanyStatus, SessionRecord  # noqa: E402

__all__ = [
    "__version__",
    # Facades
    "Engine",
    "GameService",
    "SubmissionBarrier",
    "TickOutcome",
    # Barrier reports
    "CompletedResult",
    "ResetReport",
    "SessionSummary",
    "StatusReport",
    "WaitingResult",
    # State
    "CompanyLedger",
    "CompanyStatus",
    "MarketState",
    "QuarterResult",
    "SessionRecord",
    "PRODUCTS",
    "REGIONS",
    # Decisions
    "Decisions",
    "default_decisions",
    "idle_decisions",
    # Storage
    "InMemorySessionRepository",
    "SessionRepository",
    "YamlSessionRepository",
    # Pipeline extensibility
    "Event",
    "Pipeline",
    "event",
    "get_event",
    "list_events",
    # Errors
    "CompanyLockedError",
    "ComputationError",
    "SessionNotFoundError",
    "StaleQuarterError",
    "TopazError",
    "ValidationError",
    # Utilities
    "Rng",
    "logging",
    "make_rng",
]
