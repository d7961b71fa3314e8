# studio/api/v1/bookings.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from studio.api.deps import Principal, get_clock, get_current_user, get_db, get_notifier
from studio.core.clock import Clock
from studio.core.rbac import ROLE_INSTRUCTOR, ROLE_STUDIO_ADMIN, require_roles
from studio.crud.booking import booking_crud
from studio.models.booking import BookingStatus
from studio.schemas.booking import (
    BookingCreate,
    BookingOut,
    CancellationOut,
    CheckInRequest,
    ManualCheckInRequest,
)
from studio.services import attendance, reservations
from studio.services.geo import GeoPoint
from studio.services.notifications import NotificationSink
from studio.services.qr import render_qr_png

router = APIRouter()

_staff = require_roles(ROLE_INSTRUCTOR, ROLE_STUDIO_ADMIN)


def _location(body) -> Optional[GeoPoint]:
    if body.lat is None or body.lng is None:
        return None
    return GeoPoint(body.lat, body.lng)


def _staff_view(booking) -> BookingOut:
    # staff não recebe o token do QR
    out = BookingOut.model_validate(booking)
    return out.model_copy(update={"qr_code": None})


@router.post("", response_model=BookingOut, status_code=status.HTTP_201_CREATED)
def create_booking(
    body: BookingCreate,
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    notifier: NotificationSink = Depends(get_notifier),
):
    ticket = reservations.create_booking(db, user.id, body.session_id, clock=clock, notifier=notifier)
    out = BookingOut.model_validate(ticket.booking)
    return out.model_copy(update={"qr_code_url": ticket.qr_code_url})


@router.get("/my-bookings", response_model=List[BookingOut])
def my_bookings(
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
):
    rows = []
    for t in reservations.list_member_bookings(db, user.id):
        out = BookingOut.model_validate(t.booking)
        rows.append(out.model_copy(update={"qr_code_url": t.qr_code_url}))
    return rows


@router.patch("/{booking_id}/cancel", response_model=CancellationOut)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
    clock: Clock = Depends(get_clock),
    notifier: NotificationSink = Depends(get_notifier),
):
    result = reservations.cancel_booking(db, booking_id, user.id, clock=clock, notifier=notifier)
    return CancellationOut(
        booking=BookingOut.model_validate(result.booking),
        late=result.late,
        refunded=result.refunded,
        promoted_booking_id=result.promoted.id if result.promoted else None,
    )


@router.get("/{booking_id}/qr", response_class=Response)
def booking_qr(
    booking_id: int,
    db: Session = Depends(get_db),
    user: Principal = Depends(get_current_user),
):
    booking = booking_crud.get(db, booking_id)
    if not booking or booking.member_id != user.id:
        raise HTTPException(status_code=404, detail="Booking not found")
    return Response(content=render_qr_png(booking.qr_code), media_type="image/png")


@router.post("/check-in", response_model=BookingOut)
def check_in(
    body: CheckInRequest,
    db: Session = Depends(get_db),
    staff: Principal = Depends(_staff),
    clock: Clock = Depends(get_clock),
):
    booking = attendance.check_in(
        db,
        token=body.qr_code,
        location=_location(body),
        staff_id=staff.id,
        override=body.override,
        clock=clock,
    )
    return _staff_view(booking)


@router.post("/{booking_id}/manual-check-in", response_model=BookingOut)
def manual_check_in(
    booking_id: int,
    body: Optional[ManualCheckInRequest] = None,
    db: Session = Depends(get_db),
    staff: Principal = Depends(_staff),
    clock: Clock = Depends(get_clock),
):
    location = _location(body) if body else None
    booking = attendance.manual_check_in(db, booking_id, staff.id, location=location, clock=clock)
    return _staff_view(booking)


@router.get("/class/{session_id}", response_model=List[BookingOut], dependencies=[Depends(_staff)])
def class_roster(
    session_id: int,
    status_: Optional[List[BookingStatus]] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    return [_staff_view(b) for b in reservations.list_session_bookings(db, session_id, status_)]
