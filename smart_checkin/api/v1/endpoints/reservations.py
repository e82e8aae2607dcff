"""Reservation endpoints."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.core.errors import CheckInError
from smart_checkin.database import get_db
from smart_checkin.schemas.reservation import (
    GuestInfoUpdate,
    ReservationCreate,
    ReservationPublic,
    ReservationResponse,
)
from smart_checkin.security.auth import require_admin
from smart_checkin.services.reservation_service import ReservationService

router = APIRouter()


@router.post("", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
async def create_reservation(
    reservation_data: ReservationCreate,
    admin: str = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Create a reservation (admin only).

    The response is the only place the generated secret code is shown;
    the host forwards it to the guest out-of-band.
    """
    reservation_service = ReservationService(db)

    try:
        reservation = await reservation_service.create_reservation(
            door_pin=reservation_data.door_pin
        )
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return ReservationResponse.model_validate(reservation).model_dump()


@router.get("/{reservation_id}", response_model=ReservationPublic)
async def get_reservation(
    reservation_id: str,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """Get the guest view of a reservation."""
    reservation_service = ReservationService(db)

    try:
        reservation = await reservation_service.get_reservation(reservation_id)
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return ReservationPublic.model_validate(reservation).model_dump()


@router.patch("/{reservation_id}", response_model=ReservationPublic)
async def update_guest_info(
    reservation_id: str,
    guest_info: GuestInfoUpdate,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Fill in guest information before check-in.

    Rejected once the reservation is checked in.
    """
    reservation_service = ReservationService(db)

    try:
        reservation = await reservation_service.update_guest_info(reservation_id, guest_info)
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return ReservationPublic.model_validate(reservation).model_dump()
