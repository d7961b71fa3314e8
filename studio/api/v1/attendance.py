# studio/api/v1/attendance.py
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from studio.api.deps import get_db
from studio.core.rbac import ROLE_STUDIO_ADMIN, require_min_role
from studio.crud.attendance import attendance_log_crud
from studio.models.attendance import CheckInOutcome
from studio.schemas.attendance import AttendanceLogOut

router = APIRouter()

# GET /attendance-logs?session_id=..&booking_id=..&outcome=..
@router.get("", response_model=List[AttendanceLogOut],
            dependencies=[Depends(require_min_role(ROLE_STUDIO_ADMIN))])
def list_attendance_logs(
    session_id: Optional[int] = None,
    booking_id: Optional[int] = None,
    outcome: Optional[CheckInOutcome] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    db: Session = Depends(get_db),
):
    rows = attendance_log_crud.list_filtered(
        db, session_id=session_id, booking_id=booking_id, outcome=outcome, skip=skip, limit=limit,
    )
    return [AttendanceLogOut.model_validate(r) for r in rows]
