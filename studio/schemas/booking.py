from __future__ import annotations
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

from studio.models.booking import BookingStatus


class ClassSessionRef(BaseModel):
    id: int
    title: str
    start_at: datetime
    end_at: datetime
    venue_id: Optional[int] = None

    model_config = {"from_attributes": True}


class BookingCreate(BaseModel):
    session_id: int


class BookingOut(BaseModel):
    id: int
    member_id: int
    session_id: int
    status: BookingStatus
    booked_at: datetime
    qr_code: Optional[str] = None
    qr_code_url: Optional[str] = None  # data URI PNG, só para CONFIRMED
    session: Optional[ClassSessionRef] = None

    model_config = {"from_attributes": True}


class CancellationOut(BaseModel):
    booking: BookingOut
    late: bool
    refunded: bool
    promoted_booking_id: Optional[int] = None


class _Location(BaseModel):
    lat: Optional[float] = Field(None, ge=-90, le=90)
    lng: Optional[float] = Field(None, ge=-180, le=180)

    @model_validator(mode="after")
    def _both_or_none(self):
        if (self.lat is None) != (self.lng is None):
            raise ValueError("lat and lng must be sent together")
        return self


class CheckInRequest(_Location):
    # qualquer valor chega ao verificador para ficar na trilha de auditoria
    qr_code: str
    override: bool = False


class ManualCheckInRequest(_Location):
    pass
