"""Pydantic schemas for API request/response models."""

from smart_checkin.schemas.checkin import *
from smart_checkin.schemas.reservation import *
from smart_checkin.schemas.webauthn import *

__all__ = [
    # Check-in schemas
    "CheckInRequest",
    "CheckInResponse",

    # Reservation schemas
    "ReservationCreate",
    "ReservationResponse",
    "ReservationPublic",
    "GuestInfoUpdate",

    # WebAuthn schemas
    "WebAuthnRegistrationStart",
    "WebAuthnCeremonyOptions",
    "WebAuthnRegistrationComplete",
    "WebAuthnRegistrationResult",
    "WebAuthnAuthenticationComplete",
    "WebAuthnAuthenticationResult",
]
