"""Reservation-related Pydantic schemas."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class ReservationCreate(BaseModel):
    """Schema for creating a reservation (admin)."""

    door_pin: Optional[str] = Field(
        None,
        min_length=1,
        max_length=16,
        description="Door unlock code; generated when omitted"
    )


class ReservationResponse(BaseModel):
    """Admin view of a reservation, including both check-in factors."""

    id: str = Field(..., description="Reservation identifier")
    secret_code: str = Field(..., description="Shared secret for the guest")
    door_pin: str = Field(..., description="Door unlock code")
    is_checked_in: bool = Field(..., description="Whether the guest has checked in")
    is_archived: bool = Field(..., description="Whether the reservation is archived")
    created_at: datetime = Field(..., description="Creation timestamp")

    class Config:
        from_attributes = True


class ReservationPublic(BaseModel):
    """Guest view of a reservation. Never exposes the secret code or door PIN."""

    id: str = Field(..., description="Reservation identifier")
    guest_name: Optional[str] = None
    guest_name_kana: Optional[str] = None
    guest_address: Optional[str] = None
    guest_contact: Optional[str] = None
    guest_occupation: Optional[str] = None
    is_foreign_national: bool = False
    nationality: Optional[str] = None
    has_guest_info: bool = Field(..., description="Whether the required guest fields are filled")
    is_checked_in: bool = Field(..., description="Whether the guest has checked in")

    class Config:
        from_attributes = True


class GuestInfoUpdate(BaseModel):
    """Schema for the guest filling in their profile."""

    guest_name: str = Field(..., min_length=1, max_length=255, description="Guest full name")
    guest_address: str = Field(..., min_length=1, description="Home address")
    guest_contact: str = Field(..., min_length=1, max_length=255, description="Phone or email")
    guest_name_kana: Optional[str] = Field(None, max_length=255)
    guest_occupation: Optional[str] = Field(None, max_length=255)
    is_foreign_national: bool = Field(default=False)
    nationality: Optional[str] = Field(None, max_length=100)
    passport_number: Optional[str] = Field(None, max_length=50)

    @field_validator("guest_name", "guest_address", "guest_contact")
    def validate_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Field cannot be blank")
        return v.strip()

    @model_validator(mode="after")
    def validate_foreign_national(self) -> "GuestInfoUpdate":
        """Foreign nationals must provide nationality and passport number."""
        if self.is_foreign_national and not (self.nationality and self.passport_number):
            raise ValueError("Nationality and passport number are required for foreign nationals")
        return self
