# src/pairdrop/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .session import (
    CheckResponse,
    ConnectRequest,
    ConnectResponse,
    DisconnectRequest,
    MessageResponse,
    UploadResponse,
)
from .system import StatusResponse

__all__ = [
    "CheckResponse",
    "ConnectRequest", "ConnectResponse",
    "DisconnectRequest",
    "MessageResponse",
    "StatusResponse",
    "UploadResponse",
]
