"""Business logic services for the PairDrop relay."""

from .connection_store import ConnectionStore
from .message_channel import BlobRef, MessageChannel
from .session import CheckResult, SessionService, get_session_service

__all__ = [
    "BlobRef",
    "CheckResult",
    "ConnectionStore",
    "MessageChannel",
    "SessionService",
    "get_session_service",
]
