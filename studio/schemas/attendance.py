from typing import Optional
from datetime import datetime
from pydantic import BaseModel

from studio.models.attendance import CheckInOutcome


class AttendanceLogOut(BaseModel):
    id: int
    outcome: CheckInOutcome
    booking_id: Optional[int] = None
    session_id: Optional[int] = None
    venue_id: Optional[int] = None
    member_id: Optional[int] = None
    staff_id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    distance_m: Optional[float] = None
    created_at: datetime

    model_config = {"from_attributes": True}
