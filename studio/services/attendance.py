# studio/services/attendance.py
"""
Check-in em dois fatores: janela de horário + geofence do estúdio.

Toda tentativa gera exatamente um AttendanceLog. Nas falhas o log é
commitado antes do erro subir; no sucesso a mudança para CHECKED_IN e o
log vão no mesmo commit.
"""
from __future__ import annotations

import datetime as dt
import logging
from typing import NoReturn, Optional

from sqlalchemy.orm import Session

from studio.core.clock import Clock, ensure_utc, system_clock
from studio.core.config import settings
from studio.core.errors import InvalidCheckIn, LocationAnomaly, OutsideCheckInWindow
from studio.crud.attendance import attendance_log_crud
from studio.crud.booking import booking_crud
from studio.models.attendance import AttendanceLog, CheckInOutcome
from studio.models.booking import Booking, BookingStatus
from studio.models.class_session import ClassSession
from studio.services.geo import GeoPoint, haversine_m

logger = logging.getLogger(__name__)


def checkin_window(session: ClassSession) -> tuple[dt.datetime, dt.datetime]:
    start = ensure_utc(session.start_at) - dt.timedelta(minutes=settings.CHECKIN_WINDOW_MIN_BEFORE)
    end = ensure_utc(session.end_at) + dt.timedelta(minutes=settings.CHECKIN_WINDOW_MIN_AFTER)
    return start, end


def _log(db: Session, outcome: CheckInOutcome, *, now: dt.datetime, booking: Optional[Booking] = None,
         reference: Optional[str] = None, location: Optional[GeoPoint] = None,
         distance_m: Optional[float] = None, staff_id: Optional[int] = None) -> AttendanceLog:
    session = booking.session if booking is not None else None
    entry = attendance_log_crud.add(db, {
        "outcome": outcome,
        "booking_id": booking.id if booking else None,
        "session_id": booking.session_id if booking else None,
        "venue_id": session.venue_id if session else None,
        "member_id": booking.member_id if booking else None,
        "staff_id": staff_id,
        "reference": reference,
        "latitude": location.lat if location else None,
        "longitude": location.lng if location else None,
        "distance_m": distance_m,
        "created_at": now,
    })
    logger.info(
        "check-in %s booking=%s session=%s distance_m=%s staff=%s",
        outcome.value, entry.booking_id, entry.session_id,
        None if distance_m is None else round(distance_m, 1), staff_id,
    )
    return entry


def _fail(db: Session, exc: Exception) -> NoReturn:
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    raise exc


def check_in(
    db: Session,
    *,
    token: Optional[str] = None,
    booking_id: Optional[int] = None,
    location: Optional[GeoPoint] = None,
    staff_id: Optional[int] = None,
    override: bool = False,
    clock: Clock = system_clock,
) -> Booking:
    now = clock.now()
    reference = token[:64] if token is not None else (str(booking_id) if booking_id is not None else None)

    try:
        booking = booking_crud.get_confirmed(db, token=token, booking_id=booking_id)
        if booking is None:
            _log(db, CheckInOutcome.NOT_FOUND, now=now, reference=reference, location=location, staff_id=staff_id)
            _fail(db, InvalidCheckIn())

        session = booking.session
        start, end = checkin_window(session)
        if now < start or now > end:
            _log(db, CheckInOutcome.INVALID_WINDOW, now=now, booking=booking, reference=reference,
                 location=location, staff_id=staff_id)
            _fail(db, OutsideCheckInWindow(
                f"Check-in is only allowed from {settings.CHECKIN_WINDOW_MIN_BEFORE} minutes before "
                f"the class starts until {settings.CHECKIN_WINDOW_MIN_AFTER} minutes after it ends."
            ))

        distance_m: Optional[float] = None
        venue = session.venue
        if location is not None and venue is not None and venue.has_location:
            distance_m = haversine_m(location, GeoPoint(venue.latitude, venue.longitude))
            if distance_m > settings.GEOFENCE_RADIUS_METERS and not override:
                _log(db, CheckInOutcome.LOCATION_MISMATCH, now=now, booking=booking, reference=reference,
                     location=location, distance_m=distance_m, staff_id=staff_id)
                _fail(db, LocationAnomaly(distance_m, settings.GEOFENCE_RADIUS_METERS))

        booking.transition_to(BookingStatus.CHECKED_IN)
        outcome = CheckInOutcome.STAFF_OVERRIDE if override else CheckInOutcome.SUCCESS
        _log(db, outcome, now=now, booking=booking, reference=reference, location=location,
             distance_m=distance_m, staff_id=staff_id)
        db.commit()
    except (InvalidCheckIn, OutsideCheckInWindow, LocationAnomaly):
        raise
    except Exception:
        db.rollback()
        raise

    return booking


def manual_check_in(
    db: Session,
    booking_id: int,
    staff_id: int,
    *,
    location: Optional[GeoPoint] = None,
    clock: Clock = system_clock,
) -> Booking:
    """Check-in pelo staff, sem QR: sempre override do geofence, nunca da janela."""
    return check_in(db, booking_id=booking_id, location=location, staff_id=staff_id, override=True, clock=clock)
