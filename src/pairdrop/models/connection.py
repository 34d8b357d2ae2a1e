# src/pairdrop/models/connection.py
"""Persisted connection record model."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class ConnectionRecord(BaseModel):
    """One identifier's view of its pairing.

    Stored as ``connections/<owner_id>.json``. The liveness timestamp is
    serialized under the ``timestamp`` key in epoch seconds.
    """

    owner_id: str
    partner_id: str
    pair_key: str
    last_seen_at: float = Field(alias="timestamp")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def age(self, now: float) -> float:
        """Return seconds elapsed since the last refresh."""
        return now - self.last_seen_at

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)
