from benchgate.protocols.results import ResultsConsumer
from benchgate.protocols.sessions import SessionProvider

__all__ = [
    "ResultsConsumer",
    "SessionProvider",
]
