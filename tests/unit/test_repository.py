"""Tests for session repositories."""

import threading

import numpy as np
import pytest

from tests.helpers.factories import mock_decisions, mock_ledger, mock_market
from topazsim.errors import SessionNotFoundError
from topazsim.repository import InMemorySessionRepository, YamlSessionRepository
from topazsim.session import CompanyStatus, SessionRecord


def _record(game_id: str = "g1") -> SessionRecord:
    record = SessionRecord(
        game_id=game_id, market=mock_market(), rng=np.random.default_rng(1)
    )
    record.add_company(mock_ledger(company_id="a"))
    return record


class TestInMemory:
    def test_get_missing(self):
        repo = InMemorySessionRepository()
        with pytest.raises(SessionNotFoundError) as exc_info:
            repo.get("nope")
        assert "nope" in str(exc_info.value)
        assert isinstance(exc_info.value, KeyError)

    def test_put_get_returns_live_record(self):
        repo = InMemorySessionRepository()
        record = _record()
        repo.put(record)

        assert repo.get("g1") is record
        assert repo.exists("g1")
        assert not repo.exists("g2")

    def test_game_ids_keep_creation_order(self):
        repo = InMemorySessionRepository()
        for gid in ("z", "a", "m"):
            repo.put(_record(gid))
        assert repo.game_ids() == ["z", "a", "m"]

    def test_lock_is_reentrant(self):
        repo = InMemorySessionRepository()
        with repo.lock("g1"):
            with repo.lock("g1"):
                repo.put(_record())
        assert repo.exists("g1")

    def test_sessions_have_independent_locks(self):
        repo = InMemorySessionRepository()
        acquired = threading.Event()

        def other():
            with repo.lock("g2"):
                acquired.set()

        with repo.lock("g1"):
            worker = threading.Thread(target=other)
            worker.start()
            worker.join(timeout=5)

        assert acquired.is_set()


class TestYaml:
    def test_round_trip(self, tmp_path):
        repo = YamlSessionRepository(tmp_path)
        record = _record()
        record.stage("a", mock_decisions(prices=(90.0, 110.0, 140.0)))
        repo.put(record)

        restored = repo.get("g1")

        assert restored is not record
        assert restored.statuses == {"a": CompanyStatus.SUBMITTED}
        assert restored.staged["a"] == record.staged["a"]
        assert restored.companies["a"].to_dict() == record.companies["a"].to_dict()
        assert (tmp_path / "g1.yml").is_file()
        assert not (tmp_path / "g1.yml.tmp").exists()

    def test_get_returns_fresh_copies(self, tmp_path):
        repo = YamlSessionRepository(tmp_path)
        repo.put(_record())

        first = repo.get("g1")
        first.statuses["a"] = CompanyStatus.LOCKED

        assert repo.get("g1").statuses["a"] is CompanyStatus.PENDING

    def test_missing(self, tmp_path):
        with pytest.raises(SessionNotFoundError):
            YamlSessionRepository(tmp_path).get("g1")

    def test_game_ids(self, tmp_path):
        repo = YamlSessionRepository(tmp_path / "sessions")
        repo.put(_record("b"))
        repo.put(_record("a"))
        assert repo.game_ids() == ["a", "b"]
        assert repo.exists("a")

    @pytest.mark.parametrize("game_id", ["../escape", "a/b", "", "with space"])
    def test_unsafe_ids_rejected(self, tmp_path, game_id):
        with pytest.raises(ValueError, match="cannot be used as a file name"):
            YamlSessionRepository(tmp_path).get(game_id)
