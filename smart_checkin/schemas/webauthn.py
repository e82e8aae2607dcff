"""WebAuthn-related Pydantic schemas."""

from typing import Any, Dict

from pydantic import BaseModel, Field


class WebAuthnRegistrationStart(BaseModel):
    """Schema for starting passkey registration."""

    reservationId: str = Field(..., min_length=1, description="Reservation to bind the passkey to")


class WebAuthnCeremonyOptions(BaseModel):
    """Schema for the options half of a ceremony."""

    options: Dict[str, Any] = Field(
        ..., description="WebAuthn options JSON for navigator.credentials"
    )
    challengeId: str = Field(..., description="Identifier of the single-use challenge")


class WebAuthnRegistrationComplete(BaseModel):
    """Schema for completing passkey registration."""

    challengeId: str = Field(..., min_length=1, description="Challenge identifier")
    reservationId: str = Field(..., min_length=1, description="Reservation identifier")
    credential: Dict[str, Any] = Field(
        ..., description="WebAuthn credential creation response"
    )


class WebAuthnRegistrationResult(BaseModel):
    verified: bool = Field(..., description="Whether the attestation verified")
    message: str = Field(default="Passkey registered successfully")


class WebAuthnAuthenticationComplete(BaseModel):
    """Schema for completing usernameless authentication. No username is ever sent."""

    challengeId: str = Field(..., min_length=1, description="Challenge identifier")
    credential: Dict[str, Any] = Field(
        ..., description="WebAuthn authentication assertion response"
    )


class WebAuthnAuthenticationResult(BaseModel):
    """Schema for a verified assertion."""

    verified: bool = Field(..., description="Whether the assertion verified")
    reservationId: str = Field(..., description="Reservation owning the presented passkey")
    checkinToken: str = Field(..., description="Token to present with the secret code")
