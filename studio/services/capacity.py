# studio/services/capacity.py
import logging
from sqlalchemy.orm import Session
from studio.crud.class_session import class_session_crud
from studio.models.booking import BookingStatus

logger = logging.getLogger(__name__)

def reserve(db: Session, session_id: int) -> BookingStatus:
    if class_session_crud.try_increment(db, session_id):
        return BookingStatus.CONFIRMED
    return BookingStatus.WAITLISTED

def release(db: Session, session_id: int) -> None:
    if not class_session_crud.decrement(db, session_id):
        # contador já em zero: nada a liberar
        logger.warning("release on session %s with enrolled_count already at 0", session_id)
