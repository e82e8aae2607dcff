"""
Check-in state machine.

A check-in session moves AWAITING_BIOMETRIC -> AWAITING_SECRET -> CHECKED_IN.
The passkey assertion proves possession of the registered device. The
secret code, sent out-of-band by the host, proves the guest received the
booking communication. The door PIN is released only when both are in
place, and the reservation flips to checked-in at most once.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.config import settings
from smart_checkin.core.errors import BiometricRequired, InvalidSecret, ReservationNotFound
from smart_checkin.database import utcnow
from smart_checkin.models.reservation import Reservation
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.security.auth import verify_checkin_token
from smart_checkin.security.secret_code import secret_codes_match
from smart_checkin.services.reservation_service import ReservationService

logger = logging.getLogger(__name__)


class CheckInState(str, Enum):
    AWAITING_BIOMETRIC = "awaiting_biometric"
    AWAITING_SECRET = "awaiting_secret"
    CHECKED_IN = "checked_in"


@dataclass
class CheckInResult:
    door_pin: str
    already_checked_in: bool
    state: CheckInState = CheckInState.CHECKED_IN


def resolve_state(reservation: Reservation, biometric_verified: bool) -> CheckInState:
    """Where a check-in session stands for this reservation."""
    if reservation.is_checked_in:
        return CheckInState.CHECKED_IN
    if not biometric_verified:
        return CheckInState.AWAITING_BIOMETRIC
    return CheckInState.AWAITING_SECRET


class CheckInService:
    """Service class for the two-factor check-in."""

    def __init__(self, db: AsyncSession, require_checkin_token: Optional[bool] = None):
        """Initialize check-in service with database session."""
        self.db = db
        self.reservations = ReservationService(db)
        self.require_checkin_token = (
            settings.require_checkin_token
            if require_checkin_token is None
            else require_checkin_token
        )

    async def attempt_check_in(
        self,
        reservation_id: str,
        supplied_secret: str,
        checkin_token: Optional[str] = None,
    ) -> CheckInResult:
        """
        Verify the secret code and release the door PIN.

        An already checked-in reservation returns its PIN without looking
        at the secret, so reloads and resubmissions are harmless.

        Args:
            reservation_id: Reservation resolved by the authentication ceremony
            supplied_secret: Secret code typed by the guest
            checkin_token: Token issued after the passkey assertion

        Returns:
            CheckInResult: Door PIN and whether check-in had already happened

        Raises:
            ReservationNotFound: If the reservation does not exist
            BiometricRequired: If a check-in token is required and not valid
            InvalidSecret: If the secret code does not match
        """
        reservation = await self.reservations.get_reservation(reservation_id)

        if self.require_checkin_token:
            biometric_verified = verify_checkin_token(checkin_token, reservation.id)
            if not biometric_verified:
                raise BiometricRequired()
        else:
            biometric_verified = True

        state = resolve_state(reservation, biometric_verified)

        if state is CheckInState.CHECKED_IN:
            return CheckInResult(door_pin=reservation.door_pin, already_checked_in=True)

        if not secret_codes_match(reservation.secret_code, supplied_secret):
            self.db.add(
                SecurityLog.create_log(
                    event_type=SecurityEventType.CHECKIN_FAILED,
                    description="Secret code mismatch",
                    reservation_id=reservation.id,
                    risk_level="medium",
                )
            )
            await self.db.commit()
            logger.warning(f"Secret code mismatch for reservation {reservation.id}")
            raise InvalidSecret()

        # Conditional update: only one request can move the row out of "not checked in"
        result = await self.db.execute(
            update(Reservation)
            .where(
                Reservation.id == reservation.id,
                Reservation.is_checked_in.is_(False),
            )
            .values(is_checked_in=True, checked_in_at=utcnow())
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            await self.db.rollback()
            current = await self.reservations.find_reservation(reservation.id)
            if current is None:
                raise ReservationNotFound()
            logger.info(f"Reservation {reservation.id} was checked in by a concurrent request")
            return CheckInResult(door_pin=current.door_pin, already_checked_in=True)

        self.db.add(
            SecurityLog.create_log(
                event_type=SecurityEventType.CHECKIN_SUCCESS,
                description="Guest checked in",
                reservation_id=reservation.id,
            )
        )
        await self.db.commit()
        logger.info(f"Reservation {reservation.id} checked in")

        return CheckInResult(door_pin=reservation.door_pin, already_checked_in=False)
