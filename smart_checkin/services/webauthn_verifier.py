"""Cryptographic verification of WebAuthn ceremony responses."""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from webauthn import verify_authentication_response, verify_registration_response
from webauthn.helpers import base64url_to_bytes, bytes_to_base64url

from smart_checkin.config import settings
from smart_checkin.core.errors import VerificationFailed

logger = logging.getLogger(__name__)


@dataclass
class RegistrationVerification:
    """Fields extracted from a verified attestation."""

    credential_id: str
    public_key: bytes
    sign_count: int
    transports: List[str] = field(default_factory=list)
    aaguid: Optional[str] = None
    device_type: Optional[str] = None
    backed_up: bool = False
    attestation_format: Optional[str] = None


@dataclass
class AuthenticationVerification:
    """Fields extracted from a verified assertion."""

    credential_id: str
    new_sign_count: int


def normalize_credential_id(value: Any) -> str:
    """
    Canonical unpadded base64url form of a credential ID.

    Raises:
        VerificationFailed: If the value is not base64url
    """
    if not isinstance(value, str) or not value:
        raise VerificationFailed("Malformed credential ID")
    try:
        return bytes_to_base64url(base64url_to_bytes(value))
    except (ValueError, TypeError) as e:
        raise VerificationFailed("Malformed credential ID") from e


def credential_id_from_response(credential: Dict[str, Any]) -> str:
    """Credential ID the authenticator selected, preferring rawId."""
    return normalize_credential_id(credential.get("rawId") or credential.get("id"))


def sign_count_advanced(previous: int, current: int) -> bool:
    """
    Clone check on the signature counter.

    A counter must strictly increase. Authenticators that do not implement
    a counter report zero on every use; zero followed by zero is accepted,
    as WebAuthn Level 2 section 6.1.1 allows.
    """
    if previous == 0 and current == 0:
        return True
    return current > previous


class WebAuthnVerifier:
    """Verifies attestations and assertions against the relying party configuration."""

    def __init__(
        self,
        rp_id: Optional[str] = None,
        origin: Optional[str] = None,
        require_user_verification: bool = True,
    ):
        self.rp_id = rp_id or settings.rp_id
        self.origin = origin or settings.origin
        self.require_user_verification = require_user_verification

    def verify_registration(
        self,
        credential: Dict[str, Any],
        expected_challenge: bytes,
    ) -> RegistrationVerification:
        """
        Verify a registration (attestation) response.

        Args:
            credential: Client credential creation response (JSON form)
            expected_challenge: Challenge bytes issued for this ceremony

        Returns:
            RegistrationVerification: Extracted credential fields

        Raises:
            VerificationFailed: On any signature, origin, RP ID or challenge mismatch
        """
        try:
            verification = verify_registration_response(
                credential=credential,
                expected_challenge=expected_challenge,
                expected_origin=self.origin,
                expected_rp_id=self.rp_id,
                require_user_verification=self.require_user_verification,
            )
        except Exception as e:
            logger.warning(f"Registration response rejected: {e}")
            raise VerificationFailed() from e

        response = credential.get("response") or {}
        return RegistrationVerification(
            credential_id=bytes_to_base64url(verification.credential_id),
            public_key=verification.credential_public_key,
            sign_count=verification.sign_count,
            transports=list(response.get("transports") or []),
            aaguid=verification.aaguid or None,
            device_type=getattr(verification.credential_device_type, "value", None),
            backed_up=bool(verification.credential_backed_up),
            attestation_format=getattr(verification.fmt, "value", None),
        )

    def verify_authentication(
        self,
        credential: Dict[str, Any],
        expected_challenge: bytes,
        public_key: bytes,
    ) -> AuthenticationVerification:
        """
        Verify an authentication (assertion) response against a stored credential.

        The counter is only extracted here; sign_count_advanced() decides whether
        it moved forward.

        Args:
            credential: Client assertion response (JSON form)
            expected_challenge: Challenge bytes issued for this ceremony
            public_key: Stored COSE public key

        Returns:
            AuthenticationVerification: Credential ID and new counter

        Raises:
            VerificationFailed: On any signature, origin, RP ID or challenge mismatch
        """
        try:
            verification = verify_authentication_response(
                credential=credential,
                expected_challenge=expected_challenge,
                expected_origin=self.origin,
                expected_rp_id=self.rp_id,
                credential_public_key=public_key,
                credential_current_sign_count=0,
                require_user_verification=self.require_user_verification,
            )
        except Exception as e:
            logger.warning(f"Authentication response rejected: {e}")
            raise VerificationFailed() from e

        return AuthenticationVerification(
            credential_id=bytes_to_base64url(verification.credential_id),
            new_sign_count=verification.new_sign_count,
        )
