# src/pairdrop/schemas/session.py
"""Session and voice-message Pydantic schemas."""

from pydantic import BaseModel, Field


class ConnectRequest(BaseModel):
    """Schema for pairing the caller with a partner."""

    my_id: str = Field(..., description="Caller identifier ([A-Za-z0-9_-])")
    partner_id: str = Field(..., description="Identifier of the partner to pair with")


class DisconnectRequest(BaseModel):
    """Schema for leaving the current pairing."""

    my_id: str = Field(..., description="Caller identifier")


class MessageResponse(BaseModel):
    """Plain acknowledgement returned by state-changing endpoints."""

    message: str


class ConnectResponse(MessageResponse):
    """Acknowledgement of a successful pairing."""

    pair_key: str


class CheckResponse(BaseModel):
    """Polling result for the caller's pairing."""

    connection_active: bool
    audio: str | None = Field(
        None,
        description="Reference of the partner's current message, if any",
    )


class UploadResponse(BaseModel):
    """Location of a freshly stored voice message."""

    filename: str
    filepath: str
