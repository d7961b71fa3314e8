# studio/services/waitlist.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from studio.core.config import settings
from studio.crud.booking import booking_crud
from studio.crud.class_session import class_session_crud
from studio.crud.membership import membership_crud
from studio.models.booking import Booking, BookingStatus
from studio.services import eligibility

logger = logging.getLogger(__name__)


def promote(db: Session, session_id: int, *, lenient: Optional[bool] = None) -> Optional[Booking]:
    """
    Promove o WAITLISTED mais antigo da sessão para CONFIRMED.

    Roda dentro da transação do cancelamento (não faz commit). A vaga é
    reservada antes de qualquer débito; se ninguém da fila puder entrar ela é
    devolvida. Com a política leniente (padrão) o membro entra mesmo sem
    créditos; com ela desligada, quem não tem crédito é pulado e a vez passa
    ao próximo da fila.
    """
    if lenient is None:
        lenient = settings.LENIENT_WAITLIST_PROMOTION

    queue = booking_crud.waitlist_queue(db, session_id)
    if not queue:
        return None

    if not class_session_crud.try_increment(db, session_id):
        # sem vaga livre (ou consumida por outra transação)
        logger.info("no free slot on session %s, waitlist untouched", session_id)
        return None

    for candidate in queue:
        membership = membership_crud.get_active(db, candidate.member_id)
        if membership is not None and membership.uses_credits:
            if not eligibility.debit(db, membership):
                if not lenient:
                    logger.info(
                        "skipping waitlisted booking %s: member %s has no credits",
                        candidate.id, candidate.member_id,
                    )
                    continue
                logger.warning(
                    "promoting booking %s although member %s has no credits left (lenient policy)",
                    candidate.id, candidate.member_id,
                )

        candidate.transition_to(BookingStatus.CONFIRMED)
        db.flush()
        logger.info("booking %s promoted from waitlist on session %s", candidate.id, session_id)
        return candidate

    class_session_crud.decrement(db, session_id)
    logger.info("no waitlisted member of session %s could be promoted", session_id)
    return None
