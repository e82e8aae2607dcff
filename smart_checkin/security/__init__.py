"""Security utilities: secret codes, check-in tokens and access gates."""

from smart_checkin.security.auth import (
    create_checkin_token,
    require_admin,
    require_cron_secret,
    verify_checkin_token,
)
from smart_checkin.security.secret_code import (
    generate_door_pin,
    generate_secret_code,
    is_well_formed,
    normalize_secret_code,
    secret_codes_match,
)

__all__ = [
    # Tokens and gates
    "create_checkin_token",
    "verify_checkin_token",
    "require_admin",
    "require_cron_secret",

    # Secret codes
    "generate_secret_code",
    "generate_door_pin",
    "normalize_secret_code",
    "is_well_formed",
    "secret_codes_match",
]
