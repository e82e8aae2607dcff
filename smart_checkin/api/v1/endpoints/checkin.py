"""Check-in endpoint: secret code plus passkey releases the door PIN."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from smart_checkin.core.errors import CheckInError
from smart_checkin.database import get_db
from smart_checkin.schemas.checkin import CheckInRequest, CheckInResponse
from smart_checkin.services.checkin_service import CheckInService

router = APIRouter()


@router.post("", response_model=CheckInResponse)
async def check_in(
    checkin_data: CheckInRequest,
    db: AsyncSession = Depends(get_db),
) -> Any:
    """
    Submit the secret code and receive the door PIN.

    Repeating the call after a successful check-in returns the same PIN
    with alreadyCheckedIn set.
    """
    checkin_service = CheckInService(db)

    try:
        result = await checkin_service.attempt_check_in(
            reservation_id=checkin_data.reservationId,
            supplied_secret=checkin_data.secret,
            checkin_token=checkin_data.checkinToken,
        )
    except CheckInError as e:
        raise HTTPException(status_code=e.status_code, detail=e.detail)

    return CheckInResponse(doorPin=result.door_pin, alreadyCheckedIn=result.already_checked_in)
