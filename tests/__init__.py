# tests/__init__.py

from tests.helpers.factories import mock_decisions, mock_ledger, mock_market
from tests.helpers.invariants import assert_result_invariants

__all__ = [
    "mock_decisions",
    "mock_ledger",
    "mock_market",
    "assert_result_invariants",
]
