"""Security log model for the check-in audit trail."""

import uuid
from enum import Enum
from typing import Dict, Optional

from sqlalchemy import JSON, Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from smart_checkin.database import Base


class SecurityEventType(str, Enum):
    """Types of security events to log."""

    # Reservation lifecycle
    RESERVATION_CREATED = "reservation_created"
    GUEST_INFO_UPDATED = "guest_info_updated"

    # Registration ceremony
    REGISTRATION_START = "registration_start"
    REGISTRATION_SUCCESS = "registration_success"
    REGISTRATION_FAILED = "registration_failed"

    # Authentication ceremony
    AUTHENTICATION_SUCCESS = "authentication_success"
    AUTHENTICATION_FAILED = "authentication_failed"
    COUNTER_REGRESSION = "counter_regression"

    # Check-in
    CHECKIN_SUCCESS = "checkin_success"
    CHECKIN_FAILED = "checkin_failed"

    # Housekeeping
    CHALLENGES_SWEPT = "challenges_swept"


class SecurityLog(Base):
    """
    Security log model for storing audit trails.

    Each row is written in the same transaction as the state change it
    describes, so a rolled-back change leaves no audit entry behind.
    """

    __tablename__ = "security_logs"

    id = Column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
        doc="Unique log entry identifier"
    )

    # Reservation reference (nullable for anonymous and system events)
    reservation_id = Column(
        String(36),
        ForeignKey("reservations.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
        doc="Reservation the event relates to (if known)"
    )

    event_type = Column(
        String(50),
        nullable=False,
        index=True,
        doc="Type of security event"
    )

    event_description = Column(
        Text,
        nullable=False,
        doc="Detailed description of the event"
    )

    event_metadata = Column(
        JSON,
        nullable=True,
        doc="Additional event metadata (JSON)"
    )

    risk_level = Column(
        String(20),
        nullable=False,
        default="low",
        doc="Risk level: low, medium, high, critical"
    )

    created_at = Column(
        DateTime,
        server_default=func.now(),
        nullable=False,
        index=True,
        doc="Event timestamp"
    )

    reservation = relationship(
        "Reservation",
        back_populates="security_logs",
        doc="Reservation associated with this event"
    )

    def __repr__(self) -> str:
        """String representation of security log."""
        return f"<SecurityLog(id={self.id}, event_type='{self.event_type}')>"

    @classmethod
    def create_log(
        cls,
        event_type: SecurityEventType,
        description: str,
        reservation_id: Optional[str] = None,
        metadata: Optional[Dict] = None,
        risk_level: str = "low",
    ) -> "SecurityLog":
        """Build an unsaved audit row; the caller adds it to the session and commits."""
        return cls(
            event_type=event_type.value,
            event_description=description,
            reservation_id=reservation_id,
            event_metadata=metadata or {},
            risk_level=risk_level,
        )

    def is_high_risk(self) -> bool:
        """Counter regressions and similar events that warrant a human look."""
        return self.risk_level in ["high", "critical"]
