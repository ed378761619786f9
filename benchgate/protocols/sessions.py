from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from benchgate.models.sessions import Session


@runtime_checkable
class SessionProvider(Protocol):
    def selected(self) -> Sequence[Session]: ...

    def get(self, session_id: str) -> Session | None: ...


__all__ = ["SessionProvider"]
