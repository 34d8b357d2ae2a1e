# tests/test_identity.py
"""Tests for identifier sanitizing and pairing keys."""

import pytest

from pairdrop.core.errors import InvalidIdentifierError
from pairdrop.utils.identity import (
    MAX_IDENTIFIER_LENGTH,
    derive_pair_key,
    sanitize_identifier,
)


class TestSanitizeIdentifier:
    """Identifier filtering without any storage involved."""

    def test_keeps_allowed_characters(self):
        assert sanitize_identifier("Alice_01-x") == "Alice_01-x"

    def test_strips_disallowed_characters(self):
        assert sanitize_identifier("alice!") == "alice"
        assert sanitize_identifier("../bob/.json") == "bobjson"
        assert sanitize_identifier(" c a r o l ") == "carol"

    @pytest.mark.parametrize("raw", ["", "!!!", "../", "   ", None])
    def test_rejects_empty_results(self, raw):
        with pytest.raises(InvalidIdentifierError, match="Invalid user ID format"):
            sanitize_identifier(raw)

    def test_length_limit(self):
        longest = "a" * MAX_IDENTIFIER_LENGTH
        assert sanitize_identifier(longest) == longest
        with pytest.raises(InvalidIdentifierError, match="at most 64"):
            sanitize_identifier(longest + "b")

    def test_limit_applies_after_filtering(self):
        padded = "!" * 100 + "a" * MAX_IDENTIFIER_LENGTH
        assert sanitize_identifier(padded) == "a" * MAX_IDENTIFIER_LENGTH


class TestDerivePairKey:
    """Order-independent pairing keys."""

    def test_is_commutative(self):
        assert derive_pair_key("alice", "bob") == derive_pair_key("bob", "alice")

    def test_format(self):
        assert derive_pair_key("zed", "amy") == "pair_amy_zed"

    def test_distinct_pairs_get_distinct_keys(self):
        assert derive_pair_key("alice", "bob") != derive_pair_key("alice", "carol")

    def test_underscores_can_collide(self):
        # identifiers may contain the separator, so the mapping is not injective
        assert derive_pair_key("a_b", "c") == derive_pair_key("a", "b_c") == "pair_a_b_c"
