"""Pytest configuration and fixtures for topazsim tests."""

import os

import pytest

import topazsim.events  # noqa: F401 - register all events
from topazsim import logging
from topazsim.barrier import SubmissionBarrier
from topazsim.core.registry import clear_registry
from topazsim.engine import Engine
from topazsim.repository import InMemorySessionRepository
from topazsim.service import GameService


@pytest.fixture
def clean_registry():
    """
    Save registry state, clear it for the test, then restore it.

    This fixture should be explicitly requested by tests that need isolation
    from the real pipeline events or from test pollution by other test
    modules.

    DO NOT use autouse=True, as it would interfere with integration tests
    that rely on real events being registered.
    """
    # noinspection PyProtectedMember
    from topazsim.core.registry import _EVENT_REGISTRY

    # Save current state
    saved_events = dict(_EVENT_REGISTRY)

    # Clear for test
    clear_registry()

    yield

    # Restore original state
    _EVENT_REGISTRY.clear()
    _EVENT_REGISTRY.update(saved_events)


def _test_log_level() -> str:
    # DEBUG for the CI coverage run so every logging branch executes
    return "DEBUG" if os.environ.get("COVERAGE_RUN") == "true" else "ERROR"


@pytest.fixture
def engine() -> Engine:
    """Engine with package defaults, a fixed seed and shocks switched off."""
    return Engine.init(
        seed=123,
        shock_probability=0.0,
        logging={"default_level": _test_log_level()},
    )


@pytest.fixture
def shocky_engine() -> Engine:
    """Engine whose market is shocked every single quarter."""
    return Engine.init(
        seed=123,
        shock_probability=1.0,
        logging={"default_level": _test_log_level()},
    )


@pytest.fixture
def barrier(engine: Engine) -> SubmissionBarrier:
    """A barrier over a fresh in-memory repository."""
    return SubmissionBarrier(engine, InMemorySessionRepository())


@pytest.fixture
def service(barrier: SubmissionBarrier) -> GameService:
    return GameService(barrier)


@pytest.fixture(autouse=True)
def mute_topazsim_logs(caplog):
    # Optimize log level based on context:
    # - CI coverage run: DEBUG to execute all logging for accurate coverage
    # - Everything else: ERROR for faster tests
    if os.environ.get("COVERAGE_RUN") == "true":
        level = logging.DEBUG
    else:
        level = logging.ERROR

    # Set both caplog level (for capture) and actual logger level
    caplog.set_level(level, logger="topazsim")
    logging.getLogger("topazsim").setLevel(level)
