"""Service layer for business logic."""

from smart_checkin.services.challenge_store import ChallengeStore
from smart_checkin.services.checkin_service import CheckInService
from smart_checkin.services.credential_repository import CredentialRepository
from smart_checkin.services.reservation_service import ReservationService
from smart_checkin.services.webauthn_service import WebAuthnService
from smart_checkin.services.webauthn_verifier import WebAuthnVerifier

__all__ = [
    "ChallengeStore",
    "CheckInService",
    "CredentialRepository",
    "ReservationService",
    "WebAuthnService",
    "WebAuthnVerifier",
]
