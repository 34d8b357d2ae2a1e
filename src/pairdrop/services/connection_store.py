"""Filesystem-backed registry of who is paired with whom.

Each connected identifier owns one JSON record under the connections
directory. Records are replaced whole: a new version is written to a
temporary sibling and moved into place with ``os.replace`` so a concurrent
reader sees either the old or the new record, never a partial one. A
per-record ``FileLock`` serializes every write of the same record.

Lock files are left in place when a record is deleted. Unlinking a lock file
while another caller waits on it would let two holders lock different inodes,
so the directory keeps one ``.json.lock`` per identifier ever seen.
"""

from __future__ import annotations

import contextlib
import logging
import os
import time
from collections.abc import Callable, Iterator
from pathlib import Path

from filelock import FileLock, Timeout
from pydantic import ValidationError

from pairdrop.core.errors import PartnerBusyError, StorageFailureError
from pairdrop.models import ConnectionRecord

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

RECORD_SUFFIX = ".json"
LOCK_SUFFIX = ".lock"
TEMP_SUFFIX = ".tmp"


class ConnectionStore:
    """Create, read, refresh and delete per-identifier connection records."""

    def __init__(
        self,
        root: Path,
        *,
        inactivity_timeout: float,
        lock_timeout: float = 5.0,
        clock: Clock = time.time,
    ) -> None:
        self._root = Path(root)
        self._inactivity_timeout = float(inactivity_timeout)
        self._lock_timeout = float(lock_timeout)
        self._clock = clock
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailureError(f"Failed to create directory: {self._root}") from exc

    @property
    def root(self) -> Path:
        """Directory holding the record files."""
        return self._root

    @property
    def inactivity_timeout(self) -> float:
        return self._inactivity_timeout

    def now(self) -> float:
        """Return the store's notion of the current time."""
        return self._clock()

    def path_for(self, owner: str) -> Path:
        """Return the record path for ``owner``."""
        return self._root / f"{owner}{RECORD_SUFFIX}"

    def is_fresh(self, record: ConnectionRecord) -> bool:
        """Return True while the record is inside the inactivity window."""
        return record.age(self._clock()) < self._inactivity_timeout

    # --- Public operations -----------------------------------------------------

    def create(self, owner: str, partner: str, pair_key: str) -> ConnectionRecord:
        """Write a fresh record pairing ``owner`` with ``partner``.

        An existing record for ``owner`` is dropped when it has expired or
        names a different partner. A stale or corrupt record held by
        ``partner`` is purged; a fresh one naming someone else blocks the
        pairing.

        Raises:
            PartnerBusyError: If ``partner`` is actively paired with someone else
            StorageFailureError: If the record cannot be written
        """
        existing = self.get(owner)
        if existing is not None and (
            not self.is_fresh(existing) or existing.partner_id != partner
        ):
            logger.info(
                "Dropping previous connection of %s (partner %s)",
                owner,
                existing.partner_id,
            )
            self.delete(owner)

        partner_record = self.get(partner)
        if partner_record is not None and partner_record.partner_id != owner:
            if self.is_fresh(partner_record):
                raise PartnerBusyError()
            logger.info(
                "Purging expired connection of %s (partner %s)",
                partner,
                partner_record.partner_id,
            )
            self.delete(partner)
            self._purge_if_expired(partner_record.partner_id, partner)

        record = ConnectionRecord(
            owner_id=owner,
            partner_id=partner,
            pair_key=pair_key,
            last_seen_at=self._clock(),
        )
        with self._locked(owner):
            self._write(record)
        return record

    def get(self, owner: str) -> ConnectionRecord | None:
        """Return the record for ``owner``, or None when missing or corrupt.

        A record that cannot be parsed is deleted on sight.
        """
        raw = self._read_raw(owner)
        if raw is None:
            return None
        record = self._parse(owner, raw)
        if record is None:
            logger.warning("Discarding corrupt connection record for %s", owner)
            self.delete(owner)
        return record

    def refresh(self, owner: str) -> ConnectionRecord | None:
        """Stamp ``owner``'s record with the current time.

        The read-modify-write runs under the record's lock. Missing records
        are ignored and unparsable ones are left untouched.
        """
        with self._locked(owner):
            raw = self._read_raw(owner)
            if raw is None:
                return None
            record = self._parse(owner, raw)
            if record is None:
                return None
            record.last_seen_at = self._clock()
            self._write(record)
            return record

    def delete(self, owner: str) -> bool:
        """Remove ``owner``'s record. Returns False if it was already gone."""
        with self._locked(owner):
            path = self.path_for(owner)
            try:
                path.unlink()
            except FileNotFoundError:
                return False
            except OSError as exc:
                raise StorageFailureError("Failed to delete connection file") from exc
        logger.debug("Deleted connection record %s", path.name)
        return True

    def list_records(self) -> list[tuple[Path, ConnectionRecord | None]]:
        """Return every record file with its parsed content (None if corrupt).

        Read-only: corrupt records are reported, not purged.
        """
        entries: list[tuple[Path, ConnectionRecord | None]] = []
        for path in sorted(self._root.glob(f"*{RECORD_SUFFIX}")):
            owner = path.name[: -len(RECORD_SUFFIX)]
            raw = self._read_raw(owner)
            if raw is None:
                continue
            entries.append((path, self._parse(owner, raw)))
        return entries

    # --- Internals -------------------------------------------------------------

    def _purge_if_expired(self, owner: str, partner: str) -> None:
        """Drop ``owner``'s record if it still points at ``partner`` and has expired."""
        record = self.get(owner)
        if record is None or record.partner_id != partner or self.is_fresh(record):
            return
        logger.info("Purging expired connection of %s (partner %s)", owner, partner)
        self.delete(owner)

    @contextlib.contextmanager
    def _locked(self, owner: str) -> Iterator[None]:
        lock = FileLock(f"{self.path_for(owner)}{LOCK_SUFFIX}", timeout=self._lock_timeout)
        try:
            lock.acquire()
        except Timeout as exc:
            logger.warning("Timed out waiting for the record lock of %s", owner)
            raise StorageFailureError("Connection record is busy, try again") from exc
        try:
            yield
        finally:
            lock.release()

    def _read_raw(self, owner: str) -> str | None:
        try:
            return self.path_for(owner).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise StorageFailureError("Failed to read connection file") from exc

    @staticmethod
    def _parse(owner: str, raw: str) -> ConnectionRecord | None:
        try:
            record = ConnectionRecord.model_validate_json(raw)
        except ValidationError:
            return None
        if record.owner_id != owner:
            return None
        return record

    def _write(self, record: ConnectionRecord) -> None:
        path = self.path_for(record.owner_id)
        tmp_path = path.with_name(f"{path.name}{TEMP_SUFFIX}")
        try:
            tmp_path.write_text(record.to_json(), encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise StorageFailureError("Failed to save connection file") from exc
