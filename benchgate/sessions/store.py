from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from benchgate.core.coercion import as_text
from benchgate.models.sessions import Session, SessionQuery
from benchgate.models.values import MISSING
from benchgate.sessions.client import GameBenchClient
from benchgate.validation.resolver import FieldResolver

logger = logging.getLogger(__name__)


class SessionLoadError(ValueError):
    """A session file could not be read or decoded."""


class SessionStore:
    """In-memory session provider keyed by session id.

    Sessions keep insertion order; the selection is what a validation run
    receives.
    """

    def __init__(
        self,
        sessions: Iterable[Session] = (),
        *,
        client: GameBenchClient | None = None,
        resolver: FieldResolver | None = None,
    ) -> None:
        self._client = client
        self._resolver = resolver or FieldResolver()
        self._sessions: dict[str, Session] = {}
        self._selected: set[str] = set()
        self.add_all(sessions)

    def __len__(self) -> int:
        return len(self._sessions)

    @property
    def sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def add(self, session: Session) -> str:
        value = self._resolver.resolve(session, "session.id")
        session_id = "" if value is MISSING else as_text(value)
        if not session_id:
            raise SessionLoadError("session record has no id")
        self._sessions[session_id] = session
        return session_id

    def add_all(self, sessions: Iterable[Session]) -> int:
        count = 0
        for session in sessions:
            self.add(session)
            count += 1
        return count

    def get(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def load_file(self, path: str | Path) -> int:
        """Load sessions from a JSON list or a ``{"content": [...]}`` page."""
        source = Path(path)
        try:
            payload = json.loads(source.read_text(encoding="utf-8"))
        except OSError as exc:
            raise SessionLoadError(f"cannot read session file {source}: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise SessionLoadError(f"invalid JSON in {source}: {exc}") from exc

        if isinstance(payload, dict) and isinstance(payload.get("content"), list):
            payload = payload["content"]
        if not isinstance(payload, list):
            raise SessionLoadError(f"{source} must contain a list of sessions or a page with 'content'")
        records = [item for item in payload if isinstance(item, dict)]
        if len(records) != len(payload):
            logger.warning("skipped %d non-object entries in %s", len(payload) - len(records), source)
        count = self.add_all(records)
        logger.info("loaded %d sessions from %s", count, source)
        return count

    def fetch(self, query: SessionQuery | None = None) -> int:
        if self._client is None:
            raise RuntimeError("no API client configured for this session store")
        page = self._client.search_sessions(query)
        return self.add_all(page.content)

    def select(self, session_ids: Iterable[str]) -> list[str]:
        """Select the given ids, returning those that are unknown."""
        unknown: list[str] = []
        for session_id in session_ids:
            if session_id in self._sessions:
                self._selected.add(session_id)
            else:
                unknown.append(session_id)
        return unknown

    def select_all(self) -> None:
        self._selected = set(self._sessions)

    def clear_selection(self) -> None:
        self._selected.clear()

    def selected(self) -> Sequence[Session]:
        return [session for session_id, session in self._sessions.items() if session_id in self._selected]


__all__ = ["SessionLoadError", "SessionStore"]
