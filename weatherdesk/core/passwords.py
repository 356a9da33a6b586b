"""Password hashing with PBKDF2-HMAC.

Credentials are stored as self-describing strings:

    pbkdf2$<digest>$<iterations>$<salt hex>$<hash hex>

so the parameters can be raised later without invalidating existing rows;
verification always re-derives with the parameters stored in the string.

Security considerations:
- Fresh 16-byte random salt per hash
- Constant-time comparison via hmac.compare_digest
- verify_password() never raises; malformed input is simply a mismatch
"""

import hashlib
import hmac
import secrets

from starlette.concurrency import run_in_threadpool

ALGORITHM = "pbkdf2"
DIGEST = "sha256"
ITERATIONS = 120_000
KEY_LENGTH = 32
SALT_BYTES = 16

_SUPPORTED_DIGESTS = frozenset({"sha1", "sha256", "sha512"})
_FIELD_COUNT = 5


def _derive(
    password: str, salt_hex: str, digest: str, iterations: int, length: int
) -> bytes:
    # The salt's hex text is the KDF salt input, not its decoded bytes.
    return hashlib.pbkdf2_hmac(
        digest,
        password.encode("utf-8"),
        salt_hex.encode("ascii"),
        iterations,
        dklen=length,
    )


def hash_password(password: str) -> str:
    """Derive a credential encoding for password.

    Two calls with the same password produce different strings (random salt).

    Args:
        password: Plaintext password.

    Returns:
        Encoded credential in pbkdf2$sha256$120000$<salt>$<hash> form.
    """
    salt_hex = secrets.token_hex(SALT_BYTES)
    derived = _derive(password, salt_hex, DIGEST, ITERATIONS, KEY_LENGTH)
    return f"{ALGORITHM}${DIGEST}${ITERATIONS}${salt_hex}${derived.hex()}"


def verify_password(password: str, encoded: str | None) -> bool:
    """Check password against a stored credential encoding.

    Args:
        password: Plaintext password to check.
        encoded: Stored credential string. Malformed, truncated or empty
            values never match.

    Returns:
        True only if password derives to the stored hash.
    """
    if not encoded:
        return False

    parts = encoded.split("$")
    if len(parts) != _FIELD_COUNT:
        return False

    algorithm, digest, iterations_text, salt_hex, hash_hex = parts
    if algorithm != ALGORITHM or digest not in _SUPPORTED_DIGESTS:
        return False
    if not (iterations_text.isascii() and iterations_text.isdigit()):
        return False
    iterations = int(iterations_text)
    if iterations <= 0 or not salt_hex:
        return False

    try:
        expected = bytes.fromhex(hash_hex)
    except ValueError:
        return False
    if not expected:
        return False

    try:
        bytes.fromhex(salt_hex)
    except ValueError:
        return False

    derived = _derive(password, salt_hex, digest, iterations, KEY_LENGTH)
    if len(derived) != len(expected):
        return False
    return hmac.compare_digest(derived, expected)


async def hash_password_async(password: str) -> str:
    """hash_password() on the thread pool so the event loop keeps serving."""
    return await run_in_threadpool(hash_password, password)


async def verify_password_async(password: str, encoded: str | None) -> bool:
    """verify_password() on the thread pool so the event loop keeps serving."""
    return await run_in_threadpool(verify_password, password, encoded)


# Precomputed credential used when a login names an unknown email, so the
# response time does not reveal whether the account exists.
DUMMY_HASH = hash_password(secrets.token_hex(16))
