from enum import Enum
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import ForeignKey, Integer, String, Float, DateTime
from studio.db.base import Base

class CheckInOutcome(str, Enum):
    SUCCESS = "SUCCESS"
    INVALID_WINDOW = "INVALID_WINDOW"
    LOCATION_MISMATCH = "LOCATION_MISMATCH"
    STAFF_OVERRIDE = "STAFF_OVERRIDE"
    NOT_FOUND = "NOT_FOUND"

class AttendanceLog(Base):
    """Trilha de auditoria de tentativas de check-in. Só inserção."""
    __tablename__ = "attendance_logs"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    outcome: Mapped[CheckInOutcome]
    booking_id: Mapped[Optional[int]] = mapped_column(ForeignKey("bookings.id"), nullable=True, index=True)
    session_id: Mapped[Optional[int]] = mapped_column(ForeignKey("class_sessions.id"), nullable=True, index=True)
    venue_id: Mapped[Optional[int]] = mapped_column(ForeignKey("venues.id"), nullable=True)
    member_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    staff_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    # token ou id informado na tentativa
    reference: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    distance_m: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
