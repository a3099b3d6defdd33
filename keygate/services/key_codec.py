"""API key codec.

Pure functions for key generation, hashing, verification and masking.
No state, no I/O.

Key format: wc_{32 alphanumeric chars}
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import string

KEY_PREFIX = "wc_"
KEY_LENGTH = 32  # random chars after the prefix

_ALPHABET = string.ascii_letters + string.digits
_MASK_CHAR = "*"
_MIN_MASKABLE_LEN = 8
_VISIBLE_TAIL = 4


def generate_key() -> str:
    """Generate a new plaintext API key from a CSPRNG."""
    return KEY_PREFIX + "".join(secrets.choice(_ALPHABET) for _ in range(KEY_LENGTH))


def hash_key(plaintext: str) -> str:
    """Hash a plaintext key using SHA-256.

    Returns:
        SHA-256 hex digest
    """
    return hashlib.sha256(plaintext.encode()).hexdigest()


def verify_key(plaintext: str, key_hash: str) -> bool:
    """Verify a plaintext key against a stored hash in constant time."""
    return hmac.compare_digest(hash_key(plaintext), key_hash)


def is_well_formed(plaintext: str) -> bool:
    """Check that a string has the prefix + length + alphabet shape of a key."""
    if not plaintext.startswith(KEY_PREFIX):
        return False
    suffix = plaintext[len(KEY_PREFIX):]
    return len(suffix) == KEY_LENGTH and all(c in _ALPHABET for c in suffix)


def mask_key(value: str | None) -> str:
    """Mask a key (or key-like string) for display.

    Shows only the prefix and the last 4 characters:
    ``wc_****************************abcd``. Strings without the prefix
    show ``****`` plus the last 4 characters; strings shorter than 8
    characters collapse to ``****``.
    """
    if not value or len(value) < _MIN_MASKABLE_LEN:
        return _MASK_CHAR * 4

    tail = value[-_VISIBLE_TAIL:]
    if value.startswith(KEY_PREFIX):
        masked_len = len(value) - len(KEY_PREFIX) - _VISIBLE_TAIL
        return f"{KEY_PREFIX}{_MASK_CHAR * masked_len}{tail}"

    return f"{_MASK_CHAR * 4}{tail}"


def preview_for_hash(key_hash: str) -> str:
    """Display preview derived from the stored hash.

    Has the same shape as ``mask_key(plaintext)`` but its last 4
    characters come from the hash, not from the plaintext. Used both at
    creation and at list time so a key always shows the same preview.
    """
    return mask_key(KEY_PREFIX + key_hash[-KEY_LENGTH:])
