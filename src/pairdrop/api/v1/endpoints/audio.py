# src/pairdrop/api/v1/endpoints/audio.py
"""Voice message endpoints for the PairDrop API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse

from pairdrop.api.v1.dependencies import SessionServiceDep
from pairdrop.core.settings import settings
from pairdrop.schemas import MessageResponse, UploadResponse

router = APIRouter(prefix="/audio", tags=["audio"])

AUDIO_MEDIA_TYPE = "audio/webm"
HTTP_PAYLOAD_TOO_LARGE = 413


@router.post("/upload", response_model=UploadResponse)
def upload_audio(
    service: SessionServiceDep,
    my_id: Annotated[str, Form()],
    partner_id: Annotated[str, Form()],
    audio: Annotated[UploadFile, File()],
) -> UploadResponse:
    """Store a recorded voice message for the caller's partner."""
    limit = settings.max_upload_bytes
    data = audio.file.read(limit + 1)
    if not data:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Audio file upload failed",
        )
    if len(data) > limit:
        raise HTTPException(
            status_code=HTTP_PAYLOAD_TOO_LARGE,
            detail=f"Audio file exceeds {limit} bytes",
        )

    blob = service.upload(my_id, partner_id, data)
    return UploadResponse(filename=blob.filename, filepath=blob.reference)


@router.get("/{pair_key}/{filename}")
def fetch_audio(pair_key: str, filename: str, service: SessionServiceDep) -> FileResponse:
    """Stream a pending voice message to the receiver."""
    reference = service.channel.reference_for(service.channel.area_for(pair_key) / filename)
    path = service.open_blob(reference)
    return FileResponse(
        path,
        media_type=AUDIO_MEDIA_TYPE,
        headers={"Cache-Control": "no-store"},
    )


@router.delete("", response_model=MessageResponse)
def delete_audio(
    service: SessionServiceDep,
    file: str = Query(..., description="Reference returned by check or upload"),
) -> MessageResponse:
    """Reclaim a voice message once it has been played."""
    if service.reclaim(file):
        return MessageResponse(message="File deleted successfully")
    return MessageResponse(message="File already deleted")
