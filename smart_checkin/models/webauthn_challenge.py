"""WebAuthn challenge model for storing registration and authentication challenges."""

import uuid
from datetime import timedelta
from enum import Enum
from typing import Optional

from sqlalchemy import Column, DateTime, String, Text
from sqlalchemy.sql import func

from smart_checkin.database import Base, utcnow


class CeremonyType(str, Enum):
    """Ceremony a challenge was issued for."""

    REGISTRATION = "registration"
    AUTHENTICATION = "authentication"


class WebAuthnChallenge(Base):
    """
    Single-use challenge correlating the two round-trips of a ceremony.

    Rows are deleted when consumed, whatever the verification outcome,
    and abandoned rows are removed by the periodic sweep.
    """

    __tablename__ = "challenges"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique challenge identifier"
    )

    challenge = Column(
        Text,
        nullable=False,
        doc="Base64url encoded challenge bytes"
    )

    ceremony = Column(
        String(20),
        nullable=False,
        doc="Ceremony type (registration or authentication)"
    )

    reservation_id = Column(
        String(36),
        nullable=True,
        doc="Reservation a registration challenge was issued for"
    )

    expires_at = Column(
        DateTime,
        nullable=False,
        index=True,
        doc="Challenge expiration time"
    )

    created_at = Column(
        DateTime,
        server_default=func.now(),
        nullable=False,
        doc="Challenge creation timestamp"
    )

    def __repr__(self) -> str:
        """String representation of challenge."""
        return f"<WebAuthnChallenge(id={self.id}, ceremony='{self.ceremony}')>"

    def is_expired(self) -> bool:
        """Check if challenge has expired."""
        return utcnow() >= self.expires_at

    @classmethod
    def create_challenge(
        cls,
        challenge: str,
        ceremony: CeremonyType,
        reservation_id: Optional[str] = None,
        expires_in_minutes: int = 5
    ) -> "WebAuthnChallenge":
        """
        Create a new WebAuthn challenge.

        Args:
            challenge: Base64url encoded challenge string
            ceremony: Ceremony the challenge belongs to
            reservation_id: Reservation ID (for registration challenges)
            expires_in_minutes: Challenge expiration time in minutes

        Returns:
            WebAuthnChallenge: New challenge instance
        """
        return cls(
            id=str(uuid.uuid4()),
            challenge=challenge,
            ceremony=ceremony.value,
            reservation_id=reservation_id,
            expires_at=utcnow() + timedelta(minutes=expires_in_minutes),
        )
