"""Invite code alphabet, normalization, format check and generation.

Codes are 8 symbols drawn from a 32-letter-and-digit alphabet that leaves out
characters easily confused when read aloud or copied by hand (I/1, O/0).
"""

import secrets

CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
CODE_LENGTH = 8

_ALPHABET_SET = frozenset(CODE_ALPHABET)


def normalize_code(code: str) -> str:
    """Return the canonical (trimmed, uppercase) form of a code."""
    return code.strip().upper()


def is_valid_format(code: object) -> bool:
    """Check that a code is CODE_LENGTH symbols of CODE_ALPHABET once normalized."""
    if not isinstance(code, str):
        return False
    normalized = normalize_code(code)
    return len(normalized) == CODE_LENGTH and all(char in _ALPHABET_SET for char in normalized)


def generate_code() -> str:
    """Draw a random candidate code, each position independent and uniform."""
    return "".join(secrets.choice(CODE_ALPHABET) for _ in range(CODE_LENGTH))
