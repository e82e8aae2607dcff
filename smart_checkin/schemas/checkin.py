"""Check-in Pydantic schemas."""

from typing import Optional

from pydantic import AliasChoices, BaseModel, Field, field_validator

from smart_checkin.security.secret_code import is_well_formed, normalize_secret_code


class CheckInRequest(BaseModel):
    """Schema for submitting the secret code."""

    reservationId: str = Field(..., min_length=1, description="Reservation resolved by the passkey")
    secret: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("secret", "secretCode"),
        description="Secret code in XXX-XXX-XXX format",
    )
    checkinToken: Optional[str] = Field(
        None, description="Token returned by the authentication ceremony"
    )

    @field_validator("secret")
    def validate_secret(cls, v: str) -> str:
        """Reject codes that are not XXX-XXX-XXX after normalization."""
        if not is_well_formed(v):
            raise ValueError("Secret code must be in XXX-XXX-XXX format")
        return normalize_secret_code(v)


class CheckInResponse(BaseModel):
    """Schema for a released door PIN."""

    doorPin: str = Field(..., description="Door unlock code")
    alreadyCheckedIn: bool = Field(..., description="Whether check-in had already happened")
