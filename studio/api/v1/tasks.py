# studio/api/v1/tasks.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studio.api.deps import get_clock, get_db, get_notifier
from studio.core.clock import Clock
from studio.core.rbac import ROLE_STUDIO_ADMIN, require_min_role
from studio.services.notifications import NotificationSink
from studio.services.reminders import send_class_reminders

router = APIRouter()

# Disparado pelo agendador externo (cron) com um token de studio_admin.
@router.post("/class-reminders", dependencies=[Depends(require_min_role(ROLE_STUDIO_ADMIN))])
def run_class_reminders(
    db: Session = Depends(get_db),
    clock: Clock = Depends(get_clock),
    notifier: NotificationSink = Depends(get_notifier),
):
    return {"sent": send_class_reminders(db, clock=clock, notifier=notifier)}
