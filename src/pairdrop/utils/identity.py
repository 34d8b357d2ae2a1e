# src/pairdrop/utils/identity.py
"""Identifier sanitizing and pairing-key derivation."""

from __future__ import annotations

import re
from typing import Final

from pairdrop.core.errors import InvalidIdentifierError

PAIR_KEY_PREFIX: Final[str] = "pair_"
MAX_IDENTIFIER_LENGTH: Final[int] = 64
_DISALLOWED = re.compile(r"[^A-Za-z0-9_-]")


def sanitize_identifier(raw: str | None) -> str:
    """Strip every character outside ``[A-Za-z0-9_-]`` from ``raw``.

    The result doubles as a filename, so nothing else may survive, and it
    is capped at ``MAX_IDENTIFIER_LENGTH`` so two of them still fit in a
    pair directory name.

    Raises:
        InvalidIdentifierError: If nothing is left after filtering or the
            result is too long
    """
    sanitized = _DISALLOWED.sub("", raw or "")
    if not sanitized:
        raise InvalidIdentifierError()
    if len(sanitized) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifierError(
            f"User ID must be at most {MAX_IDENTIFIER_LENGTH} characters"
        )
    return sanitized


def derive_pair_key(first: str, second: str) -> str:
    """Return the session key shared by both members of a pair."""
    # Not injective: ("a_b", "c") and ("a", "b_c") both map to pair_a_b_c,
    # and such pairs share one message area.
    low, high = sorted((first, second))
    return f"{PAIR_KEY_PREFIX}{low}_{high}"
