from __future__ import annotations

from enum import Enum
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint, DateTime
from studio.db.base import Base

class BookingStatus(str, Enum):
    CONFIRMED = "CONFIRMED"
    WAITLISTED = "WAITLISTED"
    CANCELLED = "CANCELLED"
    CHECKED_IN = "CHECKED_IN"

# None = registro novo
TRANSITIONS: dict[Optional[BookingStatus], frozenset[BookingStatus]] = {
    None: frozenset({BookingStatus.CONFIRMED, BookingStatus.WAITLISTED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.CANCELLED, BookingStatus.CHECKED_IN}),
    BookingStatus.WAITLISTED: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset({BookingStatus.CONFIRMED, BookingStatus.WAITLISTED}),
    BookingStatus.CHECKED_IN: frozenset(),
}

ACTIVE_STATUSES = (BookingStatus.CONFIRMED, BookingStatus.WAITLISTED)

class IllegalTransition(ValueError):
    def __init__(self, current: Optional[BookingStatus], target: BookingStatus):
        name = current.value if current else "NEW"
        super().__init__(f"Booking cannot go from {name} to {target.value}")
        self.current = current
        self.target = target

def can_transition(current: Optional[BookingStatus], target: BookingStatus) -> bool:
    return target in TRANSITIONS[current]

class Booking(Base):
    __tablename__ = "bookings"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(Integer, index=True)
    session_id: Mapped[int] = mapped_column(ForeignKey("class_sessions.id"), index=True)
    status: Mapped[BookingStatus]
    booked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    # token de verificação (conteúdo do QR); novo a cada ativação
    qr_code: Mapped[str] = mapped_column(String(64), unique=True, index=True)

    session = relationship("ClassSession")

    __table_args__ = (UniqueConstraint("member_id", "session_id", name="uq_booking_member_session"),)

    def transition_to(self, target: BookingStatus) -> None:
        current = self.status
        if not can_transition(current, target):
            raise IllegalTransition(current, target)
        self.status = target
