"""
Secret code generation and comparison.

Format: XXX-XXX-XXX (3 groups of 3 characters). Generated codes draw from
a 32-character alphabet without the look-alikes 0/O and 1/I/L, which gives
32^9 (about 3.5e13) combinations.
"""

import hmac
import re
import secrets

CHARSET = "23456789ABCDEFGHJKLMNPQRSTUVWXYZ"
GROUPS = 3
GROUP_LENGTH = 3

# Accepted input shape after normalization: any uppercase alphanumeric, not only CHARSET
_WELL_FORMED = re.compile(r"^[A-Z0-9]{3}-[A-Z0-9]{3}-[A-Z0-9]{3}$")
_WHITESPACE = re.compile(r"\s")


def generate_secret_code() -> str:
    """Generate a random secret code in XXX-XXX-XXX format."""
    groups = [
        "".join(secrets.choice(CHARSET) for _ in range(GROUP_LENGTH))
        for _ in range(GROUPS)
    ]
    return "-".join(groups)


def normalize_secret_code(code: str) -> str:
    """Uppercase and strip all whitespace. Dashes are kept."""
    return _WHITESPACE.sub("", code).upper()


def is_well_formed(code: str) -> bool:
    return bool(_WELL_FORMED.match(normalize_secret_code(code)))


def secret_codes_match(stored: str, supplied: str) -> bool:
    """Compare a stored and a user-supplied code in constant time."""
    return hmac.compare_digest(
        normalize_secret_code(stored).encode("utf-8"),
        normalize_secret_code(supplied).encode("utf-8"),
    )


def generate_door_pin(digits: int = 6) -> str:
    """Generate a random numeric door PIN."""
    return str(secrets.randbelow(10 ** digits)).zfill(digits)
