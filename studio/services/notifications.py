# studio/services/notifications.py
from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Protocol, Tuple

from sqlalchemy.orm import Session

from studio.core.clock import Clock, system_clock
from studio.models.notification import Notification, NotificationKind

logger = logging.getLogger(__name__)


class NotificationSink(Protocol):
    def notify(self, member_id: int, kind: NotificationKind, message: str, session_id: Optional[int] = None) -> None: ...


class DbNotificationSink:
    """Grava a notificação; a entrega (push, e-mail) é de outro serviço."""

    def __init__(self, db: Session, clock: Clock = system_clock):
        self.db = db
        self.clock = clock

    def notify(self, member_id: int, kind: NotificationKind, message: str, session_id: Optional[int] = None) -> None:
        self.db.add(Notification(
            member_id=member_id,
            kind=kind.value,
            message=message,
            session_id=session_id,
            created_at=self.clock.now(),
        ))
        try:
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        logger.info("notification %s queued for member %s", kind.value, member_id)


class RecordingNotificationSink:
    """Guarda as chamadas em memória (dev e testes)."""

    def __init__(self):
        self.sent: List[Tuple[int, NotificationKind, str, Optional[int]]] = []

    def notify(self, member_id: int, kind: NotificationKind, message: str, session_id: Optional[int] = None) -> None:
        self.sent.append((member_id, kind, message, session_id))


def dispatch(notifier: Optional[NotificationSink], member_id: int, kind: NotificationKind, message: str,
             session_id: Optional[int] = None) -> bool:
    """Fire-and-forget: falha de notificação nunca desfaz a reserva."""
    if notifier is None:
        return False
    try:
        notifier.notify(member_id, kind, message, session_id)
    except Exception:
        logger.exception("failed to notify member %s (%s)", member_id, kind.value)
        return False
    return True


def dispatch_bulk(notifier: Optional[NotificationSink], member_ids: Iterable[int], kind: NotificationKind,
                  message: str, session_id: Optional[int] = None) -> int:
    return sum(1 for mid in member_ids if dispatch(notifier, mid, kind, message, session_id))
