"""WebAuthn service for the passkey registration and usernameless authentication ceremonies."""

import json
import logging
import secrets
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from webauthn import (
    generate_authentication_options,
    generate_registration_options,
    options_to_json,
)
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url
from webauthn.helpers.cose import COSEAlgorithmIdentifier
from webauthn.helpers.structs import (
    AttestationConveyancePreference,
    AuthenticatorSelectionCriteria,
    PublicKeyCredentialDescriptor,
    ResidentKeyRequirement,
    UserVerificationRequirement,
)

from smart_checkin.config import settings
from smart_checkin.core.errors import (
    ChallengeInvalid,
    CheckInError,
    ReservationNotFound,
    UnknownCredential,
    VerificationFailed,
)
from smart_checkin.models.security_log import SecurityEventType, SecurityLog
from smart_checkin.models.webauthn_challenge import CeremonyType
from smart_checkin.services.challenge_store import ChallengeStore
from smart_checkin.services.credential_repository import CredentialRepository
from smart_checkin.services.reservation_service import ReservationService
from smart_checkin.services.webauthn_verifier import (
    WebAuthnVerifier,
    credential_id_from_response,
    sign_count_advanced,
)

logger = logging.getLogger(__name__)

CLIENT_TIMEOUT_MS = 60000
SUPPORTED_ALGORITHMS = [
    COSEAlgorithmIdentifier.ECDSA_SHA_256,
    COSEAlgorithmIdentifier.RSASSA_PKCS1_v1_5_SHA_256,
]


@dataclass
class RegistrationResult:
    """Outcome of a verified attestation bound to its reservation."""

    credential_id: str
    reservation_id: str


@dataclass
class AuthenticationResult:
    """Outcome of a verified usernameless assertion."""

    reservation_id: str
    credential_id: str
    new_sign_count: int


class WebAuthnService:
    """Service class for WebAuthn ceremonies."""

    def __init__(self, db: AsyncSession, verifier: Optional[WebAuthnVerifier] = None):
        """Initialize WebAuthn service with database session."""
        self.db = db
        self.verifier = verifier or WebAuthnVerifier()
        self.challenges = ChallengeStore(db)
        self.credentials = CredentialRepository(db)
        self.reservations = ReservationService(db)

    async def begin_registration(self, reservation_id: str) -> Tuple[Dict[str, Any], str]:
        """
        Start the passkey registration ceremony for a reservation.

        Args:
            reservation_id: Reservation the new passkey will be bound to

        Returns:
            Tuple[Dict, str]: Registration options (WebAuthn JSON) and challenge ID

        Raises:
            ReservationNotFound: If the reservation does not exist
        """
        reservation = await self.reservations.get_reservation(reservation_id)

        existing_credentials = await self.credentials.list_for_reservation(reservation.id)

        options = generate_registration_options(
            rp_id=settings.rp_id,
            rp_name=settings.rp_name,
            user_id=reservation.webauthn_user_handle(),
            user_name=reservation.webauthn_user_name(),
            user_display_name=reservation.webauthn_user_name(),
            attestation=AttestationConveyancePreference.NONE,
            authenticator_selection=AuthenticatorSelectionCriteria(
                resident_key=ResidentKeyRequirement.REQUIRED,
                user_verification=UserVerificationRequirement.REQUIRED,
            ),
            challenge=secrets.token_bytes(32),
            exclude_credentials=[
                PublicKeyCredentialDescriptor(id=base64url_to_bytes(cred.credential_id))
                for cred in existing_credentials
            ],
            supported_pub_key_algs=SUPPORTED_ALGORITHMS,
            timeout=CLIENT_TIMEOUT_MS,
        )

        challenge_id = await self.challenges.issue(
            challenge=bytes_to_base64url(options.challenge),
            ceremony=CeremonyType.REGISTRATION,
            reservation_id=reservation.id,
        )

        self._audit(
            SecurityEventType.REGISTRATION_START,
            "Passkey registration started",
            reservation_id=reservation.id,
        )
        await self.db.commit()

        return json.loads(options_to_json(options)), challenge_id

    async def complete_registration(
        self,
        challenge_id: str,
        reservation_id: str,
        credential_response: Dict[str, Any],
    ) -> RegistrationResult:
        """
        Verify an attestation and bind the new passkey to the reservation.

        The challenge is consumed before anything else, so it is gone
        whatever the outcome.

        Raises:
            ChallengeInvalid: Challenge missing, expired or issued for something else
            ReservationNotFound: Reservation does not exist
            VerificationFailed: Attestation does not verify
            DuplicateCredential: Credential ID already registered
        """
        challenge = await self.challenges.consume(
            challenge_id,
            ceremony=CeremonyType.REGISTRATION,
            reservation_id=reservation_id,
        )
        if challenge is None:
            raise ChallengeInvalid()

        reservation = await self.reservations.get_reservation(reservation_id)

        try:
            verification = self.verifier.verify_registration(
                credential=credential_response,
                expected_challenge=base64url_to_bytes(challenge),
            )

            await self.credentials.add(
                credential_id=verification.credential_id,
                reservation_id=reservation.id,
                public_key=verification.public_key,
                sign_count=verification.sign_count,
                transports=verification.transports,
                aaguid=verification.aaguid,
                device_type=verification.device_type,
                backed_up=verification.backed_up,
            )
        except CheckInError as e:
            self._audit(
                SecurityEventType.REGISTRATION_FAILED,
                f"Passkey registration failed: {e.detail}",
                reservation_id=reservation.id,
                risk_level="medium",
            )
            await self.db.commit()
            raise

        self._audit(
            SecurityEventType.REGISTRATION_SUCCESS,
            "Passkey registered",
            reservation_id=reservation.id,
            metadata={
                "credential_id": verification.credential_id,
                "attestation_format": verification.attestation_format,
                "device_type": verification.device_type,
                "backed_up": verification.backed_up,
            },
        )
        await self.db.commit()
        logger.info(f"Passkey registered for reservation {reservation.id}")

        return RegistrationResult(
            credential_id=verification.credential_id,
            reservation_id=reservation.id,
        )

    async def begin_authentication(self) -> Tuple[Dict[str, Any], str]:
        """
        Start a usernameless authentication ceremony.

        No allow-list is sent: the authenticator offers every passkey it
        holds for this relying party and the guest picks one.

        Returns:
            Tuple[Dict, str]: Authentication options (WebAuthn JSON) and challenge ID
        """
        options = generate_authentication_options(
            rp_id=settings.rp_id,
            challenge=secrets.token_bytes(32),
            timeout=CLIENT_TIMEOUT_MS,
            user_verification=UserVerificationRequirement.REQUIRED,
        )

        challenge_id = await self.challenges.issue(
            challenge=bytes_to_base64url(options.challenge),
            ceremony=CeremonyType.AUTHENTICATION,
        )

        return json.loads(options_to_json(options)), challenge_id

    async def complete_authentication(
        self,
        challenge_id: str,
        credential_response: Dict[str, Any],
    ) -> AuthenticationResult:
        """
        Verify an assertion and resolve the credential back to its reservation.

        Args:
            challenge_id: Identifier returned by begin_authentication()
            credential_response: Client assertion response

        Returns:
            AuthenticationResult: Owning reservation and the new counter

        Raises:
            ChallengeInvalid: Challenge missing, expired or already used
            UnknownCredential: No passkey with the presented credential ID
            VerificationFailed: Assertion, user handle or counter check failed
        """
        challenge = await self.challenges.consume(
            challenge_id, ceremony=CeremonyType.AUTHENTICATION
        )
        if challenge is None:
            raise ChallengeInvalid()

        credential_id = credential_id_from_response(credential_response)

        credential = await self.credentials.get(credential_id)
        if credential is None:
            logger.info(f"Unknown passkey presented: {credential_id[:16]}")
            raise UnknownCredential()

        reservation_id = credential.reservation_id
        previous_count = credential.sign_count

        try:
            verification = self.verifier.verify_authentication(
                credential=credential_response,
                expected_challenge=base64url_to_bytes(challenge),
                public_key=credential.public_key,
            )
            self._check_user_handle(credential_response, reservation_id)
        except VerificationFailed as e:
            await self._record_authentication_failure(reservation_id, credential_id, e.detail)
            raise

        if not sign_count_advanced(previous_count, verification.new_sign_count):
            logger.error(
                f"Signature counter did not advance for passkey {credential_id[:16]} "
                f"({previous_count} -> {verification.new_sign_count}); possible cloned authenticator"
            )
            self._audit(
                SecurityEventType.COUNTER_REGRESSION,
                "Signature counter did not advance",
                reservation_id=reservation_id,
                metadata={
                    "credential_id": credential_id,
                    "stored_sign_count": previous_count,
                    "presented_sign_count": verification.new_sign_count,
                },
                risk_level="high",
            )
            await self.db.commit()
            raise VerificationFailed()

        advanced = await self.credentials.advance_sign_count(
            credential_id, previous_count, verification.new_sign_count
        )
        if not advanced:
            await self._record_authentication_failure(
                reservation_id, credential_id, "Counter moved by a concurrent authentication"
            )
            raise VerificationFailed()

        self._audit(
            SecurityEventType.AUTHENTICATION_SUCCESS,
            "Passkey authentication succeeded",
            reservation_id=reservation_id,
            metadata={"credential_id": credential_id, "sign_count": verification.new_sign_count},
        )
        await self.db.commit()
        logger.info(f"Passkey authentication succeeded for reservation {reservation_id}")

        return AuthenticationResult(
            reservation_id=reservation_id,
            credential_id=credential_id,
            new_sign_count=verification.new_sign_count,
        )

    def _check_user_handle(self, credential_response: Dict[str, Any], reservation_id: str) -> None:
        """A user handle, when the authenticator returns one, must name the owning reservation."""
        user_handle = (credential_response.get("response") or {}).get("userHandle")
        if not user_handle:
            return
        try:
            handle = base64url_to_bytes(user_handle).decode("utf-8")
        except (ValueError, TypeError) as e:
            raise VerificationFailed("Malformed user handle") from e
        if handle != reservation_id:
            raise VerificationFailed("User handle does not match the passkey owner")

    async def _record_authentication_failure(
        self,
        reservation_id: str,
        credential_id: str,
        reason: str,
    ) -> None:
        self._audit(
            SecurityEventType.AUTHENTICATION_FAILED,
            f"Passkey authentication failed: {reason}",
            reservation_id=reservation_id,
            metadata={"credential_id": credential_id},
            risk_level="medium",
        )
        await self.db.commit()

    def _audit(
        self,
        event_type: SecurityEventType,
        description: str,
        reservation_id: Optional[str] = None,
        metadata: Optional[Dict] = None,
        risk_level: str = "low",
    ) -> None:
        self.db.add(
            SecurityLog.create_log(
                event_type=event_type,
                description=description,
                reservation_id=reservation_id,
                metadata=metadata,
                risk_level=risk_level,
            )
        )
