from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from studio.crud.base import CRUDBase
from studio.models.membership import Membership

class CRUDMembership(CRUDBase[Membership]):
    def get_active(self, db: Session, member_id: int) -> Optional[Membership]:
        stmt = (
            select(Membership)
            .where(Membership.member_id == member_id, Membership.is_active.is_(True))
            .execution_options(populate_existing=True)
        )
        return db.execute(stmt).scalar_one_or_none()

    def debit_credit(self, db: Session, membership_id: int) -> bool:
        res = db.execute(
            update(Membership)
            .where(Membership.id == membership_id, Membership.credits_remaining > 0)
            .values(credits_remaining=Membership.credits_remaining - 1)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def credit_back(self, db: Session, membership_id: int) -> bool:
        res = db.execute(
            update(Membership)
            .where(Membership.id == membership_id, Membership.credits_remaining.is_not(None))
            .values(credits_remaining=Membership.credits_remaining + 1)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

membership_crud = CRUDMembership(Membership)
