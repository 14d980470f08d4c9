"""
Unit tests for domain name rules.

Tests verify:
- Sanitizing arbitrary usernames into labels
- Format validation messages
- FID and username based generation
- Suggestion ordering and filtering
"""

import pytest

from src.domain.names import (
    full_domain_name,
    generate_domain_from_fid,
    generate_domain_from_username_and_fid,
    generate_domain_suggestions,
    sanitize_domain_name,
    validate_domain_name_format,
)


class TestSanitize:
    """Tests for sanitize_domain_name."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("Alice", "alice"),
            ("alice_bob", "alice-bob"),
            ("alice bob", "alice-bob"),
            ("--alice--", "alice"),
            ("a__b", "a-b"),
            ("dwr.eth", "dwreth"),
            ("émile!", "mile"),
        ],
    )
    def test_sanitize(self, raw: str, expected: str) -> None:
        """Usernames are lowercased and reduced to the label charset."""
        assert sanitize_domain_name(raw) == expected

    def test_truncates_to_max_length(self) -> None:
        """Long names are cut to 63 characters without a trailing hyphen."""
        sanitized = sanitize_domain_name("a" * 62 + "-bcdef")
        assert len(sanitized) <= 63
        assert not sanitized.endswith("-")


class TestValidateFormat:
    """Tests for validate_domain_name_format."""

    @pytest.mark.parametrize("domain", ["abc", "my-name", "a1b2c3", "x" * 63])
    def test_valid(self, domain: str) -> None:
        """Well-formed labels produce no error."""
        assert validate_domain_name_format(domain) is None

    @pytest.mark.parametrize(
        "domain, error",
        [
            ("", "Domain name is required"),
            ("ab", "Domain must be at least 3 characters"),
            ("x" * 64, "Domain must be at most 63 characters"),
            ("ABC", "Domain can only contain lowercase letters, numbers, and hyphens"),
            ("a.b.c", "Domain can only contain lowercase letters, numbers, and hyphens"),
            ("abc-", "Domain cannot start or end with a hyphen"),
            ("a--b", "Domain cannot contain consecutive hyphens"),
        ],
    )
    def test_invalid(self, domain: str, error: str) -> None:
        """Each rule reports its own message."""
        assert validate_domain_name_format(domain) == error


class TestGeneration:
    """Tests for label generation from identity."""

    def test_full_domain_name(self) -> None:
        """The suffix is appended after a dot."""
        assert full_domain_name("alice", "farcaster.celo") == "alice.farcaster.celo"

    def test_from_fid(self) -> None:
        """FID labels are prefixed with fid."""
        assert generate_domain_from_fid(42) == "fid42"

    def test_prefers_username(self) -> None:
        """A usable username wins over the FID."""
        assert generate_domain_from_username_and_fid("Alice_B", 42) == "alice-b"

    @pytest.mark.parametrize("username", [None, "", "   ", "a!", "__"])
    def test_falls_back_to_fid(self, username) -> None:
        """Unusable usernames fall back to the FID label."""
        assert generate_domain_from_username_and_fid(username, 42) == "fid42"


class TestSuggestions:
    """Tests for generate_domain_suggestions."""

    def test_short_username(self) -> None:
        """Short usernames yield base, base-fid and fid labels."""
        assert generate_domain_suggestions("alice", 123) == ["alice", "alice-123", "fid123"]

    def test_long_username_adds_short_variant(self) -> None:
        """Usernames over 10 characters get a shortened variant."""
        assert generate_domain_suggestions("verylongusername", 4567) == [
            "verylongusername",
            "verylongusername-4567",
            "fid4567",
            "verylongus-67",
        ]

    def test_invalid_base_skipped(self) -> None:
        """Candidates that fail validation are dropped."""
        assert generate_domain_suggestions("ab", 9) == ["ab-9", "fid9"]

    def test_limit(self) -> None:
        """No more than limit suggestions are returned."""
        assert generate_domain_suggestions("verylongusername", 4567, limit=2) == [
            "verylongusername",
            "verylongusername-4567",
        ]

    def test_suggestions_are_distinct_and_valid(self) -> None:
        """Every suggestion is unique and passes validation."""
        suggestions = generate_domain_suggestions("Some_Long-User Name", 88, limit=10)
        assert len(suggestions) == len(set(suggestions))
        assert all(validate_domain_name_format(s) is None for s in suggestions)
