"""Per-pair storage areas for voice messages in transit.

Every pairing key owns one directory under the audio root. A message is a
single file named ``msg_<sender>_<created_ms><ext>``; the newest file from a
sender is the current message and anything older is discarded.
"""

from __future__ import annotations

import contextlib
import logging
import os
import time
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from pairdrop.core.errors import InvalidReferenceError, StorageFailureError
from pairdrop.core.settings import AUDIO_EXTENSION

logger = logging.getLogger(__name__)

Clock = Callable[[], float]

BLOB_PREFIX = "msg_"
PARTIAL_SUFFIX = ".part"


@dataclass(frozen=True)
class BlobRef:
    """Location of one stored voice message."""

    pair_key: str
    sender: str
    created_ms: int
    path: Path
    reference: str

    @property
    def filename(self) -> str:
        return self.path.name


class MessageChannel:
    """Deposit, peek, reclaim and tear down voice messages for a pair."""

    def __init__(
        self,
        root: Path,
        *,
        reference_base: Path,
        stale_after: float,
        extension: str = AUDIO_EXTENSION,
        clock: Clock = time.time,
    ) -> None:
        self._root = Path(root)
        self._reference_base = Path(reference_base)
        self._stale_after = float(stale_after)
        self._extension = extension
        self._clock = clock
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailureError(f"Failed to create directory: {self._root}") from exc

    @property
    def root(self) -> Path:
        return self._root

    def area_for(self, pair_key: str) -> Path:
        return self._root / pair_key

    def ensure_area(self, pair_key: str) -> Path:
        """Create the pair's directory if needed and return it."""
        area = self.area_for(pair_key)
        try:
            area.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageFailureError("Failed to create pair directory") from exc
        return area

    def deposit(self, pair_key: str, sender: str, data: bytes) -> BlobRef:
        """Store ``data`` as the newest message from ``sender``.

        The payload is written beside its final name and renamed into place
        so a concurrent peek never reads a truncated file.

        Raises:
            StorageFailureError: If the file cannot be written
        """
        area = self.ensure_area(pair_key)
        now = self._clock()
        created_ms = int(now * 1000)
        path = area / f"{BLOB_PREFIX}{sender}_{created_ms}{self._extension}"
        partial = area / f".{path.name}{PARTIAL_SUFFIX}"
        try:
            partial.write_bytes(data)
            os.utime(partial, (now, now))
            os.replace(partial, path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                partial.unlink()
            raise StorageFailureError("Failed to save audio file") from exc

        logger.debug("Stored %d bytes from %s in %s", len(data), sender, pair_key)
        return self._blob_ref(pair_key, sender, created_ms, path)

    def latest_from(self, pair_key: str, sender: str) -> BlobRef | None:
        """Return the current message from ``sender`` without reading it.

        Older messages from the same sender are deleted. If the newest one has
        outlived the staleness window every message from the sender is
        deleted and None is returned.
        """
        candidates: list[tuple[float, BlobRef]] = []
        for blob in self._blobs_from(pair_key, sender):
            try:
                modified = blob.path.stat().st_mtime
            except FileNotFoundError:
                continue
            candidates.append((modified, blob))
        if not candidates:
            return None

        candidates.sort(
            key=lambda item: (item[0], item[1].created_ms, item[1].filename),
            reverse=True,
        )
        newest_mtime, newest = candidates[0]
        if self._clock() - newest_mtime > self._stale_after:
            for _, blob in candidates:
                self.reclaim(blob.path)
            logger.info("Discarded %d stale message(s) from %s", len(candidates), sender)
            return None

        for _, older in candidates[1:]:
            self.reclaim(older.path)
        return newest

    def peek_latest_from(self, pair_key: str, sender: str) -> tuple[BlobRef, bytes] | None:
        """Return the current message from ``sender`` together with its bytes."""
        blob = self.latest_from(pair_key, sender)
        if blob is None:
            return None
        try:
            return blob, blob.path.read_bytes()
        except FileNotFoundError:
            # reclaimed between listing and reading
            return None

    def reclaim(self, path: Path) -> bool:
        """Delete one message. Returns False if it was already gone."""
        try:
            Path(path).unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise StorageFailureError("Failed to delete file") from exc
        logger.debug("Reclaimed %s", Path(path).name)
        return True

    def teardown(self, pair_key: str) -> int:
        """Delete every file in the pair's area, then try to remove the area.

        Returns the number of files deleted. An area that is already gone,
        possibly removed by the partner's own teardown, counts as empty.
        """
        area = self.area_for(pair_key)
        entries = self._list_area(area)
        if entries is None:
            return 0
        removed = 0
        for entry in entries:
            if entry.is_file() and self.reclaim(entry):
                removed += 1
        with contextlib.suppress(OSError):
            area.rmdir()
        logger.info("Tore down %s (%d file(s) removed)", pair_key, removed)
        return removed

    def resolve_reference(self, reference: str) -> Path:
        """Map a client-supplied reference onto a message path.

        The reference is resolved against the storage root and must land on
        a message file name directly inside one pair area. Existence is not
        checked.

        Raises:
            InvalidReferenceError: If the reference points anywhere else
        """
        if not reference:
            raise InvalidReferenceError("File parameter is required")
        try:
            candidate = (self._reference_base / reference).resolve()
            root = self._root.resolve()
        except (OSError, RuntimeError, ValueError) as exc:
            raise InvalidReferenceError() from exc

        if candidate.parent.parent != root or self._parse_name(candidate.name) is None:
            logger.warning("Rejected blob reference %r", reference)
            raise InvalidReferenceError()
        return candidate

    def reference_for(self, path: Path) -> str:
        """Return the client-facing reference of a message path."""
        return Path(path).relative_to(self._reference_base).as_posix()

    def list_areas(self) -> list[str]:
        """Return the pairing keys that currently own an area."""
        return sorted(entry.name for entry in self._root.iterdir() if entry.is_dir())

    # --- Internals -------------------------------------------------------------

    def _blob_ref(self, pair_key: str, sender: str, created_ms: int, path: Path) -> BlobRef:
        return BlobRef(
            pair_key=pair_key,
            sender=sender,
            created_ms=created_ms,
            path=path,
            reference=self.reference_for(path),
        )

    def _blobs_from(self, pair_key: str, sender: str) -> list[BlobRef]:
        blobs: list[BlobRef] = []
        for entry in self._list_area(self.area_for(pair_key)) or []:
            parsed = self._parse_name(entry.name)
            if parsed is None or parsed[0] != sender or not entry.is_file():
                continue
            blobs.append(self._blob_ref(pair_key, sender, parsed[1], entry))
        return blobs

    @staticmethod
    def _list_area(area: Path) -> list[Path] | None:
        """Snapshot the entries of ``area``; None when the area does not exist."""
        try:
            return list(area.iterdir())
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as exc:
            raise StorageFailureError("Failed to list pair directory") from exc

    def _parse_name(self, name: str) -> tuple[str, int] | None:
        """Split a message file name into (sender, created_ms)."""
        if not name.startswith(BLOB_PREFIX) or not name.endswith(self._extension):
            return None
        stem = name[len(BLOB_PREFIX) : len(name) - len(self._extension)]
        sender, sep, stamp = stem.rpartition("_")
        if not sep or not sender or not stamp.isdigit():
            return None
        return sender, int(stamp)
