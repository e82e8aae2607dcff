"""Passkey credential model for storing reservation authenticator bindings."""

from typing import List

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    LargeBinary,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smart_checkin.database import Base


class PasskeyCredential(Base):
    """
    Discoverable WebAuthn credential registered by a guest.

    The credential ID is the lookup key for usernameless authentication:
    the authenticator presents it and the server resolves it back to the
    owning reservation. It is an identifier, never a secret.
    """

    __tablename__ = "passkeys"

    # WebAuthn credential ID, canonical unpadded base64url
    credential_id = Column(
        String(1024),
        primary_key=True,
        doc="WebAuthn credential ID (base64url)"
    )

    reservation_id = Column(
        String(36),
        ForeignKey("reservations.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Reservation that registered this passkey"
    )

    public_key = Column(
        LargeBinary,
        nullable=False,
        doc="COSE-encoded public key for verifying assertions"
    )

    sign_count = Column(
        Integer,
        default=0,
        nullable=False,
        doc="Signature counter for replay and clone detection"
    )

    # Transport methods
    transports = Column(
        String(255),
        nullable=True,
        doc="Supported transport methods (comma-separated)"
    )

    # Authenticator metadata
    aaguid = Column(String(36), nullable=True, doc="Authenticator AAGUID")

    device_type = Column(
        String(50),
        nullable=True,
        doc="single_device or multi_device"
    )

    backed_up = Column(
        Boolean,
        default=False,
        nullable=False,
        doc="Whether the passkey is synced to a cloud keychain"
    )

    # Usage tracking
    last_used_at = Column(
        DateTime,
        nullable=True,
        doc="Timestamp of last successful authentication"
    )

    usage_count = Column(
        Integer,
        default=0,
        nullable=False,
        doc="Number of successful authentications"
    )

    created_at = Column(
        DateTime,
        server_default=func.now(),
        nullable=False,
        doc="Credential registration timestamp"
    )

    # Relationships
    reservation = relationship(
        "Reservation",
        back_populates="credentials",
        doc="Reservation that owns this credential"
    )

    def __repr__(self) -> str:
        """String representation of credential."""
        return f"<PasskeyCredential(id={self.credential_id[:16]}, reservation_id={self.reservation_id})>"

    @property
    def transports_list(self) -> List[str]:
        """Get transports as a list."""
        if not self.transports:
            return []
        return [t.strip() for t in self.transports.split(",") if t.strip()]

    @transports_list.setter
    def transports_list(self, transports: List[str]) -> None:
        """Set transports from a list."""
        self.transports = ",".join(transports) if transports else None

