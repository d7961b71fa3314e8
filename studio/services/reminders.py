# studio/services/reminders.py
from __future__ import annotations

import datetime as dt
import logging
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from studio.core.clock import Clock, ensure_utc, system_clock
from studio.core.config import settings
from studio.crud.booking import booking_crud
from studio.crud.class_session import class_session_crud
from studio.models.booking import BookingStatus
from studio.models.notification import NotificationKind
from studio.services.notifications import NotificationSink, dispatch_bulk

logger = logging.getLogger(__name__)


def send_class_reminders(db: Session, *, clock: Clock = system_clock,
                         notifier: Optional[NotificationSink] = None) -> int:
    """Lembrete para os confirmados das aulas que começam daqui a ~REMINDER_LEAD_HOURS (±1h)."""
    target = clock.now() + dt.timedelta(hours=settings.REMINDER_LEAD_HOURS)
    sessions = class_session_crud.starting_between(db, target - dt.timedelta(hours=1), target + dt.timedelta(hours=1))

    sent = 0
    for s in sessions:
        members = [b.member_id for b in booking_crud.list_for_session(db, s.id, [BookingStatus.CONFIRMED])]
        if not members:
            continue
        start = ensure_utc(s.start_at).astimezone(ZoneInfo(settings.TIMEZONE)).strftime("%H:%M %Z")
        sent += dispatch_bulk(
            notifier, members, NotificationKind.CLASS_REMINDER,
            f'Reminder: your class "{s.title}" starts in {settings.REMINDER_LEAD_HOURS} hours at {start}!',
            s.id,
        )
    logger.info("reminder job finished: %s sessions, %s notifications", len(sessions), sent)
    return sent
