# studio/services/reservations.py
"""
Máquina de estados da reserva: criação/reativação e cancelamento.

Cada operação roda numa única transação do Session recebido; qualquer erro
antes do commit faz rollback completo. Notificações só saem depois do commit.
"""
from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from studio.core.clock import Clock, ensure_utc, system_clock
from studio.core.config import settings
from studio.core.errors import AlreadyBooked, BookingNotFound, NoCreditsRemaining, SessionNotFound
from studio.crud.booking import booking_crud
from studio.crud.class_session import class_session_crud
from studio.crud.membership import membership_crud
from studio.models.booking import Booking, BookingStatus
from studio.models.notification import NotificationKind
from studio.services import capacity, eligibility, waitlist
from studio.services.notifications import NotificationSink, dispatch
from studio.services.qr import build_checkin_token, render_qr_data_uri

logger = logging.getLogger(__name__)

BOOKING_PAIR_CONSTRAINT = "uq_booking_member_session"


@dataclass
class BookingTicket:
    booking: Booking
    qr_code_url: Optional[str] = None


@dataclass
class CancellationResult:
    booking: Booking
    late: bool
    refunded: bool
    promoted: Optional[Booking] = None


def _is_duplicate_booking(exc: IntegrityError) -> bool:
    diag = getattr(exc.orig, "diag", None)
    name = getattr(diag, "constraint_name", None)
    if name:
        return name == BOOKING_PAIR_CONSTRAINT
    # SQLite não informa o nome da constraint, só as colunas
    msg = str(exc.orig)
    return BOOKING_PAIR_CONSTRAINT in msg or "bookings.member_id, bookings.session_id" in msg


def create_booking(
    db: Session,
    member_id: int,
    session_id: int,
    *,
    clock: Clock = system_clock,
    notifier: Optional[NotificationSink] = None,
) -> BookingTicket:
    now = clock.now()
    try:
        membership = eligibility.ensure_eligible(db, member_id, now=now)

        existing = booking_crud.get_for_member_session(db, member_id=member_id, session_id=session_id)
        if existing is not None and existing.status != BookingStatus.CANCELLED:
            raise AlreadyBooked()

        session = class_session_crud.get_bookable(db, session_id)
        if session is None:
            raise SessionNotFound()

        status = capacity.reserve(db, session_id)
        if status == BookingStatus.CONFIRMED and not eligibility.debit(db, membership):
            # outra requisição levou o último crédito
            raise NoCreditsRemaining()

        token = build_checkin_token(member_id, session_id)
        if existing is None:
            booking = Booking(member_id=member_id, session_id=session_id, status=status, qr_code=token, booked_at=now)
            db.add(booking)
        else:
            booking = existing
            booking.transition_to(status)
            booking.qr_code = token
            booking.booked_at = now
        db.flush()
        title = session.title
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _is_duplicate_booking(exc):
            # corrida na unique (member, session)
            raise AlreadyBooked() from exc
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("booking %s for member %s on session %s: %s", booking.id, member_id, session_id, status.value)

    if status == BookingStatus.CONFIRMED:
        dispatch(notifier, member_id, NotificationKind.BOOKING_CONFIRMATION,
                 f"Your booking for {title} is confirmed!", session_id)
    else:
        dispatch(notifier, member_id, NotificationKind.WAITLIST_NOTIFICATION,
                 f"You have been added to the waitlist for {title}.", session_id)

    return BookingTicket(booking=booking, qr_code_url=render_qr_data_uri(booking.qr_code))


def is_late_cancellation(start_at: dt.datetime, now: dt.datetime) -> bool:
    return ensure_utc(start_at) - now < dt.timedelta(hours=settings.LATE_CANCEL_HOURS)


def cancel_booking(
    db: Session,
    booking_id: int,
    member_id: int,
    *,
    clock: Clock = system_clock,
    notifier: Optional[NotificationSink] = None,
    lenient_promotion: Optional[bool] = None,
) -> CancellationResult:
    now = clock.now()
    try:
        booking = booking_crud.get_cancellable(db, booking_id=booking_id, member_id=member_id)
        if booking is None:
            raise BookingNotFound()

        session = class_session_crud.get(db, booking.session_id, fresh=True)
        late = is_late_cancellation(session.start_at, now)
        was_confirmed = booking.status == BookingStatus.CONFIRMED

        booking.transition_to(BookingStatus.CANCELLED)
        db.flush()

        promoted: Optional[Booking] = None
        refunded = False
        if was_confirmed:
            capacity.release(db, booking.session_id)
            promoted = waitlist.promote(db, booking.session_id, lenient=lenient_promotion)

            membership = membership_crud.get_active(db, member_id)
            if membership is not None and membership.uses_credits:
                refunded = eligibility.refund(db, membership, late=late, backfilled=promoted is not None)

        title = session.title
        promoted_member = promoted.member_id if promoted else None
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "booking %s cancelled by member %s (late=%s, promoted=%s, refunded=%s)",
        booking_id, member_id, late, promoted.id if promoted else None, refunded,
    )

    if promoted_member is not None:
        dispatch(notifier, promoted_member, NotificationKind.PROMOTION,
                 f"Good news! You've been promoted from the waitlist to confirmed for {title}.",
                 booking.session_id)

    return CancellationResult(booking=booking, late=late, refunded=refunded, promoted=promoted)


def list_member_bookings(db: Session, member_id: int) -> List[BookingTicket]:
    tickets = []
    for b in booking_crud.list_for_member(db, member_id):
        url = render_qr_data_uri(b.qr_code) if b.status == BookingStatus.CONFIRMED else None
        tickets.append(BookingTicket(booking=b, qr_code_url=url))
    return tickets


def list_session_bookings(db: Session, session_id: int, statuses: Optional[List[BookingStatus]] = None) -> List[Booking]:
    if class_session_crud.get(db, session_id) is None:
        raise SessionNotFound()
    return booking_crud.list_for_session(db, session_id, statuses)
