"""Error taxonomy for the WebAuthn ceremonies and the check-in flow."""

from typing import Optional

from fastapi import status


class CheckInError(Exception):
    """Base class for expected, user-facing failures."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_detail: str = "Request could not be completed"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ChallengeInvalid(CheckInError):
    """Challenge is missing, expired, already consumed or issued for another ceremony."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = "Challenge expired or not found. Please start again."


class VerificationFailed(CheckInError):
    """Signature, origin, RP ID or challenge mismatch, or a non-increasing counter."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Authentication verification failed. Please try again."


class UnknownCredential(CheckInError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Passkey not found. Please register your device first."


class DuplicateCredential(CheckInError):
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Passkey already registered"


class InvalidSecret(CheckInError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Invalid secret code. Please check and try again."


class BiometricRequired(CheckInError):
    """Secret code submitted without a valid biometric check-in token."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = "Biometric authentication is required before entering the secret code"


class ReservationNotFound(CheckInError):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = "Reservation not found"


class ReservationLocked(CheckInError):
    """Guest information can no longer change once the guest has checked in."""

    status_code = status.HTTP_409_CONFLICT
    default_detail = "Reservation is already checked in"


class SecretGenerationFailed(CheckInError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = "Failed to generate unique secret code"
