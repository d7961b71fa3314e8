from typing import List, Optional
from sqlalchemy import select
from sqlalchemy.orm import Session
from studio.crud.base import CRUDBase
from studio.models.attendance import AttendanceLog, CheckInOutcome

class CRUDAttendanceLog(CRUDBase[AttendanceLog]):
    def list_filtered(
        self,
        db: Session,
        *,
        session_id: Optional[int] = None,
        booking_id: Optional[int] = None,
        outcome: Optional[CheckInOutcome] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> List[AttendanceLog]:
        stmt = select(AttendanceLog)
        if session_id is not None:
            stmt = stmt.where(AttendanceLog.session_id == session_id)
        if booking_id is not None:
            stmt = stmt.where(AttendanceLog.booking_id == booking_id)
        if outcome is not None:
            stmt = stmt.where(AttendanceLog.outcome == outcome)
        stmt = stmt.order_by(AttendanceLog.created_at.desc(), AttendanceLog.id.desc()).offset(skip).limit(limit)
        return list(db.scalars(stmt))

attendance_log_crud = CRUDAttendanceLog(AttendanceLog)
