"""WebAuthn passkey registration and usernameless authentication endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.core.errors import CheckInError, VerificationFailed
from smart_checkin.database import get_db
from smart_checkin.schemas.webauthn import (
    WebAuthnAuthenticationComplete,
    WebAuthnAuthenticationResult,
    WebAuthnCeremonyOptions,
    WebAuthnRegistrationComplete,
    WebAuthnRegistrationResult,
    WebAuthnRegistrationStart,
)
from smart_checkin.security.auth import create_checkin_token
from smart_checkin.services.webauthn_service import WebAuthnService
from smart_checkin.services.webauthn_verifier import WebAuthnVerifier

router = APIRouter()


def get_webauthn_verifier() -> WebAuthnVerifier:
    """Verifier bound to the configured relying party."""
    return WebAuthnVerifier()


@router.post("/register/begin", response_model=WebAuthnCeremonyOptions)
async def begin_webauthn_registration(
    registration_data: WebAuthnRegistrationStart,
    db: AsyncSession = Depends(get_db),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
) -> Any:
    """
    Begin passkey registration for a reservation.

    The client should call navigator.credentials.create() with the returned
    options and send the result to /register/complete together with the
    challenge ID.
    """
    webauthn_service = WebAuthnService(db, verifier=verifier)

    try:
        options, challenge_id = await webauthn_service.begin_registration(
            registration_data.reservationId
        )
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return WebAuthnCeremonyOptions(options=options, challengeId=challenge_id)


@router.post("/register/complete", response_model=WebAuthnRegistrationResult)
async def complete_webauthn_registration(
    registration_data: WebAuthnRegistrationComplete,
    db: AsyncSession = Depends(get_db),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
) -> Any:
    """
    Complete passkey registration.

    Verifies the attestation and binds the new passkey to the reservation.
    """
    webauthn_service = WebAuthnService(db, verifier=verifier)

    try:
        await webauthn_service.complete_registration(
            challenge_id=registration_data.challengeId,
            reservation_id=registration_data.reservationId,
            credential_response=registration_data.credential,
        )
    except VerificationFailed as e:
        # Attestation failures map to 400
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.detail)
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return WebAuthnRegistrationResult(verified=True)


@router.post("/authenticate/begin", response_model=WebAuthnCeremonyOptions)
async def begin_webauthn_authentication(
    db: AsyncSession = Depends(get_db),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
) -> Any:
    """
    Begin usernameless authentication.

    No username or reservation is sent; the authenticator offers the
    discoverable passkeys it holds for this site.
    """
    webauthn_service = WebAuthnService(db, verifier=verifier)
    options, challenge_id = await webauthn_service.begin_authentication()
    return WebAuthnCeremonyOptions(options=options, challengeId=challenge_id)


@router.post("/authenticate/complete", response_model=WebAuthnAuthenticationResult)
async def complete_webauthn_authentication(
    auth_data: WebAuthnAuthenticationComplete,
    db: AsyncSession = Depends(get_db),
    verifier: WebAuthnVerifier = Depends(get_webauthn_verifier),
) -> Any:
    """
    Complete usernameless authentication.

    Resolves the presented passkey to its reservation and returns a
    short-lived check-in token for the secret code step.
    """
    webauthn_service = WebAuthnService(db, verifier=verifier)

    try:
        result = await webauthn_service.complete_authentication(
            challenge_id=auth_data.challengeId,
            credential_response=auth_data.credential,
        )
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return WebAuthnAuthenticationResult(
        verified=True,
        reservationId=result.reservation_id,
        checkinToken=create_checkin_token(result.reservation_id),
    )
