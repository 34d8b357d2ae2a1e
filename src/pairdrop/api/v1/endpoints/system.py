"""System and diagnostics endpoints for the PairDrop API."""

from __future__ import annotations

import os
import platform
from typing import Any

from fastapi import APIRouter, HTTPException, status

from pairdrop.api.v1.dependencies import SessionServiceDep
from pairdrop.core.settings import settings
from pairdrop.schemas import StatusResponse

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/status", response_model=StatusResponse)
def get_status(service: SessionServiceDep) -> StatusResponse:
    """Report whether the storage directories are usable.

    Args:
        service: Session service bound to the configured storage root

    Returns:
        Writability of the audio and connections directories plus the
        interpreter version
    """
    return StatusResponse(
        status="OK",
        audio_dir_writable=os.access(service.channel.root, os.W_OK),
        connections_dir_writable=os.access(service.store.root, os.W_OK),
        python_version=platform.python_version(),
    )


@router.get("/connections")
def get_connections(service: SessionServiceDep) -> dict[str, Any]:
    """Dump every connection record and pair area.

    Only available when ``DEBUG`` is enabled since it exposes who is
    talking to whom.
    """
    if not settings.debug:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    return service.snapshot()
