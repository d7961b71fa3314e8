from typing import List, Optional, Sequence
from sqlalchemy import select
from sqlalchemy.orm import Session, joinedload
from studio.crud.base import CRUDBase
from studio.models.booking import Booking, BookingStatus, ACTIVE_STATUSES

class CRUDBooking(CRUDBase[Booking]):
    def get_for_member_session(self, db: Session, *, member_id: int, session_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .where(Booking.member_id == member_id, Booking.session_id == session_id)
            .with_for_update()
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_cancellable(self, db: Session, *, booking_id: int, member_id: int) -> Optional[Booking]:
        stmt = (
            select(Booking)
            .where(
                Booking.id == booking_id,
                Booking.member_id == member_id,
                Booking.status.in_(ACTIVE_STATUSES),
            )
            .with_for_update()
        )
        return db.execute(stmt).scalar_one_or_none()

    def get_confirmed(self, db: Session, *, token: Optional[str] = None, booking_id: Optional[int] = None) -> Optional[Booking]:
        stmt = select(Booking).where(Booking.status == BookingStatus.CONFIRMED)
        if token is not None:
            stmt = stmt.where(Booking.qr_code == token)
        elif booking_id is not None:
            stmt = stmt.where(Booking.id == booking_id)
        else:
            return None
        return db.execute(stmt.with_for_update()).scalar_one_or_none()

    def waitlist_queue(self, db: Session, session_id: int) -> Sequence[Booking]:
        # FIFO: booked_at, desempate pela ordem de inserção
        stmt = (
            select(Booking)
            .where(Booking.session_id == session_id, Booking.status == BookingStatus.WAITLISTED)
            .order_by(Booking.booked_at.asc(), Booking.id.asc())
            .with_for_update()
        )
        return db.execute(stmt).scalars().all()

    def list_for_member(self, db: Session, member_id: int) -> List[Booking]:
        stmt = (
            select(Booking)
            .options(joinedload(Booking.session))
            .where(Booking.member_id == member_id)
            .order_by(Booking.booked_at.desc(), Booking.id.desc())
        )
        return list(db.scalars(stmt))

    def list_for_session(self, db: Session, session_id: int, statuses: Optional[Sequence[BookingStatus]] = None) -> List[Booking]:
        stmt = select(Booking).where(Booking.session_id == session_id)
        if statuses:
            stmt = stmt.where(Booking.status.in_(statuses))
        return list(db.scalars(stmt.order_by(Booking.booked_at.asc(), Booking.id.asc())))

booking_crud = CRUDBooking(Booking)
