from datetime import datetime
from typing import List, Optional
from sqlalchemy import select, update
from sqlalchemy.orm import Session
from studio.crud.base import CRUDBase
from studio.models.class_session import ClassSession

class CRUDClassSession(CRUDBase[ClassSession]):
    def get_bookable(self, db: Session, session_id: int) -> Optional[ClassSession]:
        obj = self.get(db, session_id, fresh=True)
        if not obj or obj.is_cancelled:
            return None
        return obj

    def try_increment(self, db: Session, session_id: int) -> bool:
        """check-and-increment numa única instrução; False se lotada."""
        res = db.execute(
            update(ClassSession)
            .where(ClassSession.id == session_id, ClassSession.enrolled_count < ClassSession.capacity)
            .values(enrolled_count=ClassSession.enrolled_count + 1)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def decrement(self, db: Session, session_id: int) -> bool:
        res = db.execute(
            update(ClassSession)
            .where(ClassSession.id == session_id, ClassSession.enrolled_count > 0)
            .values(enrolled_count=ClassSession.enrolled_count - 1)
            .execution_options(synchronize_session=False)
        )
        return res.rowcount == 1

    def starting_between(self, db: Session, start: datetime, end: datetime) -> List[ClassSession]:
        stmt = (
            select(ClassSession)
            .where(
                ClassSession.start_at >= start,
                ClassSession.start_at <= end,
                ClassSession.is_cancelled.is_(False),
            )
            .order_by(ClassSession.start_at)
        )
        return list(db.scalars(stmt))

class_session_crud = CRUDClassSession(ClassSession)
