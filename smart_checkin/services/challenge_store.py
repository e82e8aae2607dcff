"""Single-use challenge storage for WebAuthn ceremonies."""

import logging
from typing import Optional

from sqlalchemy import delete
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.config import settings
from smart_checkin.database import utcnow
from smart_checkin.models.webauthn_challenge import CeremonyType, WebAuthnChallenge

logger = logging.getLogger(__name__)


class ChallengeStore:
    """Issues, consumes at most once, and sweeps WebAuthn challenges."""

    def __init__(self, db: AsyncSession, expires_in_minutes: Optional[int] = None):
        """Initialize challenge store with database session."""
        self.db = db
        self.expires_in_minutes = (
            expires_in_minutes
            if expires_in_minutes is not None
            else settings.challenge_expire_minutes
        )

    async def issue(
        self,
        challenge: str,
        ceremony: CeremonyType,
        reservation_id: Optional[str] = None,
    ) -> str:
        """
        Persist a fresh challenge.

        Args:
            challenge: Base64url encoded challenge bytes
            ceremony: Ceremony the challenge is issued for
            reservation_id: Reservation a registration challenge is bound to

        Returns:
            str: Challenge identifier handed to the client
        """
        record = WebAuthnChallenge.create_challenge(
            challenge=challenge,
            ceremony=ceremony,
            reservation_id=reservation_id,
            expires_in_minutes=self.expires_in_minutes,
        )
        self.db.add(record)
        await self.db.commit()
        return record.id

    async def consume(
        self,
        challenge_id: str,
        ceremony: Optional[CeremonyType] = None,
        reservation_id: Optional[str] = None,
    ) -> Optional[str]:
        """
        Take a challenge out of the store.

        The row is deleted whenever it exists, including when it has expired
        or belongs to another ceremony. Only the caller whose delete removed
        the row receives the value.

        Args:
            challenge_id: Identifier returned by issue()
            ceremony: Expected ceremony type
            reservation_id: Expected reservation binding

        Returns:
            Optional[str]: The challenge, or None if it cannot be used
        """
        record = await self.db.get(WebAuthnChallenge, challenge_id)
        if record is None:
            return None

        value = record.challenge
        expired = record.is_expired()
        issued_for = (record.ceremony, record.reservation_id)

        result = await self.db.execute(
            delete(WebAuthnChallenge)
            .where(WebAuthnChallenge.id == challenge_id)
            .execution_options(synchronize_session=False)
        )
        self.db.expunge(record)
        await self.db.commit()

        if result.rowcount != 1:
            logger.warning(f"Challenge {challenge_id} was consumed concurrently")
            return None
        if expired:
            logger.info(f"Challenge {challenge_id} expired before use")
            return None
        if ceremony is not None and issued_for[0] != ceremony.value:
            logger.warning(f"Challenge {challenge_id} was issued for a {issued_for[0]} ceremony")
            return None
        if reservation_id is not None and issued_for[1] != reservation_id:
            logger.warning(f"Challenge {challenge_id} was issued for another reservation")
            return None

        return value

    async def sweep_expired(self) -> int:
        """
        Delete every challenge past its expiry.

        Returns:
            int: Number of challenges removed
        """
        result = await self.db.execute(
            delete(WebAuthnChallenge)
            .where(WebAuthnChallenge.expires_at < utcnow())
            .execution_options(synchronize_session=False)
        )
        await self.db.commit()

        removed = result.rowcount or 0
        if removed:
            logger.info(f"Swept {removed} expired challenges")
        return removed
