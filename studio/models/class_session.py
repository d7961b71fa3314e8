from typing import Optional
from datetime import datetime
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy import String, Integer, Boolean, ForeignKey, DateTime, CheckConstraint
from studio.db.base import Base

class ClassSession(Base):
    """Ocorrência agendada de uma aula. O motor de reservas só altera enrolled_count."""
    __tablename__ = "class_sessions"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(200))
    venue_id: Mapped[Optional[int]] = mapped_column(ForeignKey("venues.id"), nullable=True)
    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), index=True)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    capacity: Mapped[int] = mapped_column(Integer)
    enrolled_count: Mapped[int] = mapped_column(Integer, default=0, server_default="0")
    is_cancelled: Mapped[bool] = mapped_column(Boolean, default=False, server_default="0")

    venue = relationship("Venue")

    __table_args__ = (
        CheckConstraint("capacity > 0", name="capacity_positive"),
        CheckConstraint("enrolled_count >= 0", name="enrolled_non_negative"),
        CheckConstraint("enrolled_count <= capacity", name="enrolled_within_capacity"),
    )
