"""
Session repositories.

Every entry point of a process (submission, status, admin) reaches sessions
through one shared `SessionRepository`. The repository owns the per-session
mutex: callers wrap every read-modify-write of a session in
``with repo.lock(game_id): ...``. Different sessions never share a lock, so
traffic on one game never blocks another.
"""

from __future__ import annotations

import re
import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import yaml

from topazsim import logging
from topazsim.errors import SessionNotFoundError
from topazsim.session import SessionRecord, session_from_dict, session_to_dict

__all__ = [
    "InMemorySessionRepository",
    "SessionRepository",
    "YamlSessionRepository",
]

log = logging.getLogger(__name__)


class SessionRepository(ABC):
    """Storage for session records with per-session locking."""

    def __init__(self) -> None:
        self._locks: dict[str, threading.RLock] = {}
        self._registry_lock = threading.Lock()

    def _lock_for(self, game_id: str) -> threading.RLock:
        with self._registry_lock:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = self._locks[game_id] = threading.RLock()
            return lock

    @contextmanager
    def lock(self, game_id: str) -> Iterator[None]:
        """
        Hold the mutex of *game_id* for the duration of the block.

        Re-entrant, so a holder may call other locked operations of the same
        session.
        """
        lock = self._lock_for(game_id)
        with lock:
            yield

    def exists(self, game_id: str) -> bool:
        return game_id in self.game_ids()

    @abstractmethod
    def get(self, game_id: str) -> SessionRecord:
        """
        Return the stored session.

        Raises
        ------
        SessionNotFoundError
            If no session is stored under *game_id*.
        """

    @abstractmethod
    def put(self, record: SessionRecord) -> None:
        """Store *record* under its ``game_id``, replacing any previous one."""

    @abstractmethod
    def game_ids(self) -> list[str]:
        """Ids of all stored sessions, in creation order where known."""


class InMemorySessionRepository(SessionRepository):
    """
    Process-local repository.

    `get` hands out the live record; callers must hold the session lock
    while reading or mutating it.
    """

    def __init__(self) -> None:
        super().__init__()
        self._sessions: dict[str, SessionRecord] = {}

    def get(self, game_id: str) -> SessionRecord:
        try:
            return self._sessions[game_id]
        except KeyError:
            raise SessionNotFoundError(game_id) from None

    def put(self, record: SessionRecord) -> None:
        with self._registry_lock:
            self._sessions[record.game_id] = record

    def game_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._sessions)


_SAFE_ID = re.compile(r"^[A-Za-z0-9_.-]+$")


class YamlSessionRepository(SessionRepository):
    """
    Repository storing one ``<game_id>.yml`` snapshot per session.

    Each `put` rewrites the session's file through a temporary file and an
    atomic rename, so a crash never leaves a half-written snapshot behind.
    `get` always returns a fresh record read from disk.
    """

    def __init__(self, directory: str | Path) -> None:
        super().__init__()
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, game_id: str) -> Path:
        if not _SAFE_ID.match(game_id):
            raise ValueError(
                f"game id {game_id!r} cannot be used as a file name; "
                "use letters, digits, '.', '_' or '-'"
            )
        return self.directory / f"{game_id}.yml"

    def get(self, game_id: str) -> SessionRecord:
        path = self._path(game_id)
        if not path.is_file():
            raise SessionNotFoundError(game_id)
        with path.open("rt", encoding="utf-8") as fh:
            data = yaml.safe_load(fh)
        return session_from_dict(data)

    def put(self, record: SessionRecord) -> None:
        path = self._path(record.game_id)
        tmp = path.with_suffix(".yml.tmp")
        with tmp.open("wt", encoding="utf-8") as fh:
            yaml.safe_dump(session_to_dict(record), fh, sort_keys=False)
        tmp.replace(path)
        log.debug(f"Saved session '{record.game_id}' to {path}")

    def game_ids(self) -> list[str]:
        return sorted(p.stem for p in self.directory.glob("*.yml"))
