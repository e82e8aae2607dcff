"""Core building blocks shared by services and endpoints."""

from smart_checkin.core.errors import (
    BiometricRequired,
    ChallengeInvalid,
    CheckInError,
    DuplicateCredential,
    InvalidSecret,
    ReservationLocked,
    ReservationNotFound,
    SecretGenerationFailed,
    UnknownCredential,
    VerificationFailed,
)

__all__ = [
    "CheckInError",
    "ChallengeInvalid",
    "VerificationFailed",
    "UnknownCredential",
    "DuplicateCredential",
    "InvalidSecret",
    "BiometricRequired",
    "ReservationNotFound",
    "ReservationLocked",
    "SecretGenerationFailed",
]
