"""Reservation service for creating reservations and managing guest information."""

import logging
from typing import Callable, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.config import settings
from smart_checkin.core.errors import (
    ReservationLocked,
    ReservationNotFound,
    SecretGenerationFailed,
)
from smart_checkin.models.reservation import Reservation
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.schemas.reservation import GuestInfoUpdate
from smart_checkin.security.secret_code import generate_door_pin, generate_secret_code

logger = logging.getLogger(__name__)


class ReservationService:
    """Service class for reservation operations."""

    def __init__(
        self,
        db: AsyncSession,
        secret_generator: Callable[[], str] = generate_secret_code,
        max_attempts: Optional[int] = None,
    ):
        """Initialize reservation service with database session."""
        self.db = db
        self.secret_generator = secret_generator
        self.max_attempts = max_attempts or settings.secret_code_max_attempts

    async def create_reservation(self, door_pin: Optional[str] = None) -> Reservation:
        """
        Create a reservation with a freshly generated, unique secret code.

        A code already held by an active reservation, whether seen by the
        pre-check or by the unique index on insert, is regenerated. After
        `max_attempts` codes the call fails instead of widening the search.

        Args:
            door_pin: Door unlock code; six random digits when omitted

        Returns:
            Reservation: Created reservation

        Raises:
            SecretGenerationFailed: If every attempt collided
        """
        door_pin = door_pin or generate_door_pin()

        for attempt in range(1, self.max_attempts + 1):
            secret_code = self.secret_generator()

            if await self._secret_code_in_use(secret_code):
                logger.warning(f"Secret code collision on attempt {attempt}, regenerating")
                continue

            reservation = Reservation(secret_code=secret_code, door_pin=door_pin)
            self.db.add(reservation)

            try:
                await self.db.flush()  # Flush to get the ID
                self.db.add(
                    SecurityLog.create_log(
                        event_type=SecurityEventType.RESERVATION_CREATED,
                        description="Reservation created",
                        reservation_id=reservation.id,
                    )
                )
                await self.db.commit()
            except IntegrityError:
                await self.db.rollback()
                logger.warning(f"Secret code taken concurrently on attempt {attempt}, regenerating")
                continue

            await self.db.refresh(reservation)
            logger.info(f"Reservation created: {reservation.id}")
            return reservation

        logger.error(f"Could not generate a unique secret code after {self.max_attempts} attempts")
        raise SecretGenerationFailed()

    async def get_reservation(self, reservation_id: str) -> Reservation:
        """
        Get reservation by ID.

        Raises:
            ReservationNotFound: If no reservation has this ID
        """
        reservation = await self.find_reservation(reservation_id)
        if reservation is None:
            raise ReservationNotFound()
        return reservation

    async def find_reservation(self, reservation_id: str) -> Optional[Reservation]:
        """Get reservation by ID, refreshing any copy already in the session."""
        stmt = (
            select(Reservation)
            .where(Reservation.id == reservation_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def update_guest_info(
        self,
        reservation_id: str,
        guest_info: GuestInfoUpdate,
    ) -> Reservation:
        """
        Fill in the guest profile for a reservation.

        Raises:
            ReservationNotFound: If no reservation has this ID
            ReservationLocked: If the guest has already checked in
        """
        reservation = await self.get_reservation(reservation_id)
        if reservation.is_checked_in:
            raise ReservationLocked()

        for field_name, value in guest_info.model_dump(exclude_unset=True).items():
            setattr(reservation, field_name, value)

        self.db.add(
            SecurityLog.create_log(
                event_type=SecurityEventType.GUEST_INFO_UPDATED,
                description="Guest information updated",
                reservation_id=reservation.id,
            )
        )
        await self.db.commit()
        await self.db.refresh(reservation)

        return reservation

    async def _secret_code_in_use(self, secret_code: str) -> bool:
        stmt = select(Reservation.id).where(
            Reservation.secret_code == secret_code,
            Reservation.is_archived.is_(False),
        ).limit(1)
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none() is not None
