"""Database models for the check-in system."""

from smart_checkin.models.passkey_credential import PasskeyCredential
from smart_checkin.models.reservation import Reservation
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.models.webauthn_challenge import CeremonyType, WebAuthnChallenge

__all__ = [
    "Reservation",
    "PasskeyCredential",
    "WebAuthnChallenge",
    "CeremonyType",
    "SecurityLog",
    "SecurityEventType",
]
