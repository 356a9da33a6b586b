"""Tests for PBKDF2 credential hashing and verification."""

import hashlib

import pytest

from weatherdesk.core.passwords import (
    ITERATIONS,
    hash_password,
    hash_password_async,
    verify_password,
    verify_password_async,
)

_PASSWORD = "s3cret-pass"  # nosec B105


class TestHashPassword:
    """hash_password() output format and salting."""

    def test_encoding_has_five_fields(self):
        parts = hash_password(_PASSWORD).split("$")
        assert len(parts) == 5
        algorithm, digest, iterations, salt_hex, hash_hex = parts
        assert algorithm == "pbkdf2"
        assert digest == "sha256"
        assert int(iterations) == ITERATIONS
        assert len(bytes.fromhex(salt_hex)) == 16
        assert len(bytes.fromhex(hash_hex)) == 32

    def test_same_password_hashes_differently(self):
        """Each call draws a fresh salt."""
        first = hash_password(_PASSWORD)
        second = hash_password(_PASSWORD)
        assert first != second
        assert first.split("$")[3] != second.split("$")[3]


class TestVerifyPassword:
    """verify_password() round trip and malformed input."""

    def test_correct_password_verifies(self):
        assert verify_password(_PASSWORD, hash_password(_PASSWORD)) is True

    def test_wrong_password_rejected(self):
        assert verify_password("not-the-password", hash_password(_PASSWORD)) is False

    def test_uses_stored_iteration_count(self):
        """A credential made with older parameters still verifies."""
        encoded = hash_password(_PASSWORD)
        algorithm, digest, _, salt_hex, _ = encoded.split("$")

        derived = hashlib.pbkdf2_hmac(
            digest, _PASSWORD.encode(), salt_hex.encode(), 1000, dklen=32
        )
        legacy = f"{algorithm}${digest}$1000${salt_hex}${derived.hex()}"
        assert verify_password(_PASSWORD, legacy) is True

    @pytest.mark.parametrize(
        "encoded",
        [
            "",
            None,
            "pbkdf2$sha256",
            "pbkdf2$sha256$abc$00ff$00ff",
            "pbkdf2$sha256$0$00ff$00ff",
            "pbkdf2$sha256$-5$00ff$00ff",
            "pbkdf2$sha256$1000$00ff$zz",
            "pbkdf2$sha256$1000$00ff$",
            "pbkdf2$md4-nope$1000$00ff$00ff",
            "bcrypt$sha256$1000$00ff$00ff",
            "pbkdf2$sha256$1000$00ff$00ff$extra",
        ],
    )
    def test_malformed_encoding_returns_false(self, encoded):
        assert verify_password(_PASSWORD, encoded) is False

    @pytest.mark.parametrize("kept_hex_chars", [2, 8, 62])
    def test_truncated_hash_rejected(self, kept_hex_chars):
        prefix, hash_hex = hash_password(_PASSWORD).rsplit("$", 1)
        truncated = f"{prefix}${hash_hex[:kept_hex_chars]}"
        assert verify_password(_PASSWORD, truncated) is False

    def test_over_long_hash_rejected(self):
        encoded = hash_password(_PASSWORD)
        assert verify_password(_PASSWORD, encoded + "00") is False


class TestAsyncWrappers:
    """Thread-pool wrappers behave like the sync functions."""

    async def test_round_trip(self):
        encoded = await hash_password_async(_PASSWORD)
        assert await verify_password_async(_PASSWORD, encoded) is True
        assert await verify_password_async("other", encoded) is False
