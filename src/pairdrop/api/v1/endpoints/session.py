# src/pairdrop/api/v1/endpoints/session.py
"""Pairing lifecycle endpoints for the PairDrop API."""

from __future__ import annotations

from fastapi import APIRouter, Query

from pairdrop.api.v1.dependencies import SessionServiceDep
from pairdrop.schemas import (
    CheckResponse,
    ConnectRequest,
    ConnectResponse,
    DisconnectRequest,
    MessageResponse,
)

router = APIRouter(prefix="/session", tags=["session"])


@router.post("/connect", response_model=ConnectResponse)
def connect(payload: ConnectRequest, service: SessionServiceDep) -> ConnectResponse:
    """Pair the caller with a partner."""
    record = service.connect(payload.my_id, payload.partner_id)
    return ConnectResponse(message="Connection established", pair_key=record.pair_key)


@router.post("/disconnect", response_model=MessageResponse)
def disconnect(payload: DisconnectRequest, service: SessionServiceDep) -> MessageResponse:
    """Leave the current pairing and clear its pending messages."""
    service.disconnect(payload.my_id)
    return MessageResponse(message="Disconnected successfully")


@router.get("/check", response_model=CheckResponse)
def check(
    service: SessionServiceDep,
    my_id: str = Query(..., description="Caller identifier"),
    partner_id: str = Query(..., description="Partner identifier"),
) -> CheckResponse:
    """Keep the pairing alive and report the partner's pending message.

    Clients poll this every couple of seconds. A returned ``audio``
    reference stays valid until the client deletes it.
    """
    result = service.check(my_id, partner_id)
    return CheckResponse(connection_active=result.connection_active, audio=result.audio)
