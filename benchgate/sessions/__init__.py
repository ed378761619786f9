from benchgate.sessions.client import DEFAULT_BASE_URL, GameBenchClient, SessionFetchError
from benchgate.sessions.store import SessionLoadError, SessionStore

__all__ = [
    "DEFAULT_BASE_URL",
    "GameBenchClient",
    "SessionFetchError",
    "SessionLoadError",
    "SessionStore",
]
