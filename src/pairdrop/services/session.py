"""Session protocol tying connection records to message channels.

An identifier is either disconnected (no record) or connected to exactly one
partner. Expiry is lazy: records and messages are only checked against their
windows when a request touches them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from pairdrop.core.errors import (
    BlobNotFoundError,
    InvalidIdentifierError,
    NoSuchConnectionError,
    StorageFailureError,
)
from pairdrop.core.settings import settings
from pairdrop.models import ConnectionRecord
from pairdrop.services.connection_store import Clock, ConnectionStore
from pairdrop.services.message_channel import BlobRef, MessageChannel
from pairdrop.utils.identity import derive_pair_key, sanitize_identifier

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CheckResult:
    """Outcome of a polling check."""

    connection_active: bool
    audio: str | None = None


class SessionService:
    """Connect, check, upload, reclaim and disconnect for paired clients."""

    def __init__(self, store: ConnectionStore, channel: MessageChannel) -> None:
        self._store = store
        self._channel = channel

    @property
    def store(self) -> ConnectionStore:
        return self._store

    @property
    def channel(self) -> MessageChannel:
        return self._channel

    def connect(self, my_id: str, partner_id: str) -> ConnectionRecord:
        """Pair ``my_id`` with ``partner_id`` and provision the pair's area.

        Raises:
            InvalidIdentifierError: If either identifier is unusable
            PartnerBusyError: If the partner is actively paired elsewhere
            StorageFailureError: If the record or the pair area cannot be created
        """
        my_id = sanitize_identifier(my_id)
        partner_id = sanitize_identifier(partner_id)
        if my_id == partner_id:
            raise InvalidIdentifierError("Cannot connect to yourself")

        pair_key = derive_pair_key(my_id, partner_id)
        record = self._store.create(my_id, partner_id, pair_key)
        try:
            self._channel.ensure_area(pair_key)
        except StorageFailureError:
            logger.error("Could not provision %s, rolling back connection of %s", pair_key, my_id)
            self._store.delete(my_id)
            raise

        logger.info("Connected %s to %s (%s)", my_id, partner_id, pair_key)
        return record

    def disconnect(self, my_id: str) -> bool:
        """Drop ``my_id``'s record and clear its pair area.

        Returns False when there was nothing to disconnect.
        """
        my_id = sanitize_identifier(my_id)
        record = self._store.get(my_id)
        if record is None:
            return False
        self._store.delete(my_id)
        self._channel.teardown(record.pair_key)
        logger.info("Disconnected %s from %s", my_id, record.partner_id)
        return True

    def check(self, my_id: str, partner_id: str) -> CheckResult:
        """Heartbeat for ``my_id`` and report the partner's current message.

        The message is only reported, never reclaimed here; the receiver
        reclaims it once it has fetched the bytes. Two overlapping checks may
        report the same message, which is harmless because reclaiming twice
        is a no-op.
        """
        my_id = sanitize_identifier(my_id)
        partner_id = sanitize_identifier(partner_id)

        record = self._store.get(my_id)
        if record is None:
            return CheckResult(connection_active=False)
        if record.partner_id != partner_id:
            logger.info("Partner mismatch for %s, purging record", my_id)
            self._store.delete(my_id)
            return CheckResult(connection_active=False)
        if not self._store.is_fresh(record):
            logger.info("Connection of %s expired, purging record", my_id)
            self._store.delete(my_id)
            return CheckResult(connection_active=False)

        self._store.refresh(my_id)
        latest = self._channel.latest_from(record.pair_key, partner_id)
        return CheckResult(
            connection_active=True,
            audio=latest.reference if latest is not None else None,
        )

    def upload(self, my_id: str, partner_id: str, data: bytes) -> BlobRef:
        """Store a message from ``my_id`` for its partner.

        Any existing record naming ``partner_id`` is accepted regardless of
        age; the upload itself refreshes the record.

        Raises:
            NoSuchConnectionError: If ``my_id`` is not paired with ``partner_id``
            StorageFailureError: If the message cannot be written
        """
        my_id = sanitize_identifier(my_id)
        partner_id = sanitize_identifier(partner_id)

        record = self._store.get(my_id)
        if record is None:
            raise NoSuchConnectionError()
        if record.partner_id != partner_id:
            raise NoSuchConnectionError("Invalid connection")

        blob = self._channel.deposit(record.pair_key, my_id, data)
        self._store.refresh(my_id)
        return blob

    def reclaim(self, reference: str) -> bool:
        """Delete a delivered message. Already-deleted messages are not an error.

        Raises:
            InvalidReferenceError: If the reference escapes the message storage
        """
        path = self._channel.resolve_reference(reference)
        return self._channel.reclaim(path)

    def open_blob(self, reference: str) -> Path:
        """Return the path of a stored message for streaming to the receiver.

        Raises:
            InvalidReferenceError: If the reference escapes the message storage
            BlobNotFoundError: If the message has already been reclaimed
        """
        path = self._channel.resolve_reference(reference)
        if not path.is_file():
            raise BlobNotFoundError()
        return path

    def snapshot(self) -> dict[str, Any]:
        """Describe every record and pair area for diagnostics."""
        connections: dict[str, Any] = {}
        for path, record in self._store.list_records():
            try:
                modified = path.stat().st_mtime
            except FileNotFoundError:
                continue
            connections[path.name] = {
                "data": record.model_dump(by_alias=True) if record is not None else None,
                "valid": record is not None and self._store.is_fresh(record),
                "modified": _isoformat(modified),
            }
        return {
            "connections": connections,
            "audio_dirs": self._channel.list_areas(),
            "server_time": _isoformat(self._store.now()),
        }


def _isoformat(epoch: float) -> str:
    return datetime.fromtimestamp(epoch, tz=timezone.utc).isoformat()


def get_session_service(clock: Clock = time.time) -> SessionService:
    """Return a session service over the configured storage root."""
    store = ConnectionStore(
        settings.connections_dir,
        inactivity_timeout=settings.inactivity_timeout_seconds,
        lock_timeout=settings.lock_timeout_seconds,
        clock=clock,
    )
    channel = MessageChannel(
        settings.audio_dir,
        reference_base=settings.storage_root,
        stale_after=settings.message_stale_seconds,
        clock=clock,
    )
    return SessionService(store, channel)
