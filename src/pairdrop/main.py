# src/pairdrop/main.py
"""Main entry point for the PairDrop relay."""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pairdrop.api.v1 import audio_router, session_router, system_router
from pairdrop.api.v1.errors import register_exception_handlers
from pairdrop.core.settings import settings
from pairdrop.services.session import get_session_service

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="PairDrop API",
    description="Walkie-talkie style voice message relay for paired clients",
    version=settings.app_version,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=settings.cors_allow_credentials,
    allow_methods=settings.cors_allow_methods,
    allow_headers=settings.cors_allow_headers,
)

register_exception_handlers(app)

# Include API routers
app.include_router(session_router, prefix="/api/v1")
app.include_router(audio_router, prefix="/api/v1")
app.include_router(system_router, prefix="/api/v1")


@app.on_event("startup")
async def on_startup() -> None:
    service = get_session_service()
    logger.info(
        "Storage ready: connections=%s audio=%s",
        service.store.root,
        service.channel.root,
    )


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Health check endpoint to verify the service is running."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint with basic information about the API."""
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "description": "Walkie-talkie style voice message relay for paired clients",
        "docs": "/docs",
        "redoc": "/redoc",
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("pairdrop.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
