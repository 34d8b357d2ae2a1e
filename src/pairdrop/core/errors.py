"""Protocol-level failures raised by the relay services.

These exceptions carry a human-readable message that is safe to return to
clients. The API layer maps each class to an HTTP status code.
"""

from __future__ import annotations


class RelayError(RuntimeError):
    """Base exception for all relay protocol failures."""

    default_message = "Relay request failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self)


class InvalidIdentifierError(RelayError):
    """Raised when a client identifier is empty or too long after sanitizing."""

    default_message = "Invalid user ID format"


class PartnerBusyError(RelayError):
    """Raised when the requested partner is paired with someone else."""

    default_message = "Partner is already connected to someone else"


class NoSuchConnectionError(RelayError):
    """Raised when an operation needs a connection record that is missing."""

    default_message = "Connection does not exist"


class InvalidReferenceError(RelayError):
    """Raised when a blob reference points outside the message storage."""

    default_message = "Invalid file path"


class StorageFailureError(RelayError):
    """Raised when the filesystem cannot complete a write or delete."""

    default_message = "Storage operation failed"


class BlobNotFoundError(RelayError):
    """Raised when a referenced blob has already been reclaimed."""

    default_message = "Audio message not found"
