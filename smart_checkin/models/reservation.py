"""Reservation model: the identity anchor for a stay."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, Index, String, Text, false
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smart_checkin.database import Base


class Reservation(Base):
    """
    Reservation created by the host before any guest activity.

    Guest profile fields are opaque to the check-in flow. The secret code
    is distributed out-of-band and, together with a passkey assertion,
    releases the door PIN exactly once.
    """

    __tablename__ = "reservations"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique reservation identifier"
    )

    # Guest profile, filled in by the guest before arrival
    guest_name = Column(String(255), nullable=True, doc="Guest full name")
    guest_name_kana = Column(String(255), nullable=True, doc="Phonetic reading of the name")
    guest_address = Column(Text, nullable=True, doc="Guest home address")
    guest_contact = Column(String(255), nullable=True, doc="Phone number or email")
    guest_occupation = Column(String(255), nullable=True, doc="Guest occupation")
    is_foreign_national = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Whether passport details are required"
    )
    nationality = Column(String(100), nullable=True, doc="Nationality (foreign guests)")
    passport_number = Column(String(50), nullable=True, doc="Passport number (foreign guests)")

    # Check-in factors
    secret_code = Column(
        String(11),
        nullable=False,
        doc="Shared secret in XXX-XXX-XXX format"
    )

    door_pin = Column(
        String(16),
        nullable=False,
        doc="Door unlock code released after check-in"
    )

    # Lifecycle
    is_checked_in = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Flips to true exactly once"
    )

    checked_in_at = Column(
        DateTime,
        nullable=True,
        doc="Timestamp of the check-in transition"
    )

    is_archived = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Archived reservations release their secret code for reuse"
    )

    # Timestamps
    created_at = Column(
        DateTime,
        server_default=func.now(),
        nullable=False,
        doc="Reservation creation timestamp"
    )

    updated_at = Column(
        DateTime,
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
        doc="Last update timestamp"
    )

    # Relationships
    credentials = relationship(
        "PasskeyCredential",
        back_populates="reservation",
        cascade="all, delete-orphan",
        doc="Passkeys registered for this reservation"
    )

    security_logs = relationship(
        "SecurityLog",
        back_populates="reservation",
        doc="Audit events for this reservation"
    )

    __table_args__ = (
        Index(
            "uq_reservations_active_secret_code",
            "secret_code",
            unique=True,
            sqlite_where=is_archived == false(),
            postgresql_where=is_archived == false(),
        ),
    )

    def __repr__(self) -> str:
        """String representation of reservation."""
        return f"<Reservation(id={self.id}, checked_in={self.is_checked_in})>"

    @property
    def has_guest_info(self) -> bool:
        return bool(self.guest_name and self.guest_address and self.guest_contact)

    def webauthn_user_handle(self) -> bytes:
        """WebAuthn user handle: the reservation ID as bytes."""
        return self.id.encode("utf-8")

    def webauthn_user_name(self) -> str:
        return self.guest_name or f"guest-{self.id[:8]}"
