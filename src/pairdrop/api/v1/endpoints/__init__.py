# src/pairdrop/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .audio import router as audio_router
from .session import router as session_router
from .system import router as system_router

__all__ = [
    "audio_router",
    "session_router",
    "system_router",
]
