# studio/services/eligibility.py
"""Gate de elegibilidade: plano ativo, validade e créditos."""
from __future__ import annotations

import datetime as dt
import logging

from sqlalchemy.orm import Session

from studio.core.clock import ensure_utc
from studio.core.errors import MembershipExpired, NoActiveMembership, NoCreditsRemaining
from studio.crud.membership import membership_crud
from studio.models.membership import Membership

logger = logging.getLogger(__name__)


def ensure_eligible(db: Session, member_id: int, *, now: dt.datetime) -> Membership:
    membership = membership_crud.get_active(db, member_id)
    if membership is None:
        raise NoActiveMembership()

    if membership.end_date is not None and ensure_utc(membership.end_date) < now:
        # a desativação persiste mesmo com a reserva recusada
        membership.is_active = False
        db.commit()
        logger.info("membership %s of member %s expired and was deactivated", membership.id, member_id)
        raise MembershipExpired()

    if membership.uses_credits and (membership.credits_remaining or 0) <= 0:
        raise NoCreditsRemaining()

    return membership


def debit(db: Session, membership: Membership) -> bool:
    """Consome 1 crédito (só pacotes). False se o saldo acabou no meio do caminho."""
    if not membership.uses_credits:
        return True
    return membership_crud.debit_credit(db, membership.id)


def refund(db: Session, membership: Membership, *, late: bool, backfilled: bool) -> bool:
    if not membership.uses_credits:
        return False
    if late and not backfilled:
        logger.info("late cancellation: credit forfeited for membership %s", membership.id)
        return False
    return membership_crud.credit_back(db, membership.id)
