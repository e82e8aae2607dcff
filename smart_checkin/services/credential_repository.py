"""Persistence of passkey credentials."""

import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.core.errors import DuplicateCredential
from smart_checkin.database import utcnow
from smart_checkin.models.passkey_credential import PasskeyCredential

logger = logging.getLogger(__name__)


class CredentialRepository:
    """Repository for passkey credentials, keyed by credential ID."""

    def __init__(self, db: AsyncSession):
        """Initialize repository with database session."""
        self.db = db

    async def get(self, credential_id: str) -> Optional[PasskeyCredential]:
        """
        Get credential by credential ID.

        Args:
            credential_id: Canonical base64url credential ID

        Returns:
            PasskeyCredential: Credential object or None
        """
        stmt = (
            select(PasskeyCredential)
            .where(PasskeyCredential.credential_id == credential_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_reservation(self, reservation_id: str) -> List[PasskeyCredential]:
        """Get every credential registered for a reservation."""
        stmt = select(PasskeyCredential).where(
            PasskeyCredential.reservation_id == reservation_id
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add(
        self,
        credential_id: str,
        reservation_id: str,
        public_key: bytes,
        sign_count: int,
        transports: Optional[List[str]] = None,
        aaguid: Optional[str] = None,
        device_type: Optional[str] = None,
        backed_up: bool = False,
    ) -> PasskeyCredential:
        """
        Store a newly registered credential. Existing rows are never overwritten.

        Raises:
            DuplicateCredential: If the credential ID is already registered
        """
        if await self.get(credential_id) is not None:
            raise DuplicateCredential()

        credential = PasskeyCredential(
            credential_id=credential_id,
            reservation_id=reservation_id,
            public_key=public_key,
            sign_count=sign_count,
            aaguid=aaguid,
            device_type=device_type,
            backed_up=backed_up,
        )
        credential.transports_list = transports or []
        self.db.add(credential)

        try:
            await self.db.flush()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(f"Concurrent registration of credential {credential_id[:16]}: {e.orig}")
            raise DuplicateCredential() from e

        return credential

    async def advance_sign_count(
        self,
        credential_id: str,
        previous: int,
        new: int,
    ) -> bool:
        """
        Move the signature counter from `previous` to `new` and record the use.

        The update only applies if the stored counter still equals `previous`,
        so two assertions racing on the same counter cannot both succeed.

        Returns:
            bool: False if another authentication moved the counter first
        """
        stmt = (
            update(PasskeyCredential)
            .where(
                PasskeyCredential.credential_id == credential_id,
                PasskeyCredential.sign_count == previous,
            )
            .values(
                sign_count=new,
                usage_count=PasskeyCredential.usage_count + 1,
                last_used_at=utcnow(),
            )
            .execution_options(synchronize_session=False)
        )
        result = await self.db.execute(stmt)
        return result.rowcount == 1
