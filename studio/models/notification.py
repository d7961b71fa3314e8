from enum import Enum
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import Integer, String, Text, Boolean, DateTime, ForeignKey
from studio.db.base import Base

class NotificationKind(str, Enum):
    BOOKING_CONFIRMATION = "BOOKING_CONFIRMATION"
    WAITLIST_NOTIFICATION = "WAITLIST_NOTIFICATION"
    PROMOTION = "PROMOTION"
    CLASS_REMINDER = "CLASS_REMINDER"

class Notification(Base):
    __tablename__ = "notifications"
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    member_id: Mapped[int] = mapped_column(Integer, index=True)
    kind: Mapped[str] = mapped_column(String(40))
    message: Mapped[str] = mapped_column(Text)
    session_id: Mapped[Optional[int]] = mapped_column(ForeignKey("class_sessions.id"), nullable=True)
    is_read: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
