# src/pairdrop/schemas/system.py
"""System status Pydantic schemas."""

from pydantic import BaseModel


class StatusResponse(BaseModel):
    """Storage health report for operators."""

    status: str
    audio_dir_writable: bool
    connections_dir_writable: bool
    python_version: str
