# src/pairdrop/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import audio_router, session_router, system_router

__all__ = [
    "audio_router",
    "session_router",
    "system_router",
]
