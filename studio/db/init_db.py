# studio/db/init_db.py
import datetime as dt
from sqlalchemy import select
from sqlalchemy.orm import Session

from studio.crud.class_session import class_session_crud
from studio.crud.base import CRUDBase
from studio.models.class_session import ClassSession
from studio.models.venue import Venue

venue_crud = CRUDBase(Venue)

DEMO_VENUE = {"name": "Studio Demo", "address": "Av. Paulista, 1000", "latitude": -23.5614, "longitude": -46.6559}

def init_db(db: Session) -> None:
    """Seed idempotente para desenvolvimento: um estúdio e uma aula amanhã."""
    venue = db.scalar(select(Venue).where(Venue.name == DEMO_VENUE["name"]))
    if not venue:
        venue = venue_crud.add(db, DEMO_VENUE)

    has_session = db.scalar(select(ClassSession.id).where(ClassSession.venue_id == venue.id).limit(1))
    if not has_session:
        start = (dt.datetime.now(dt.timezone.utc) + dt.timedelta(days=1)).replace(minute=0, second=0, microsecond=0)
        class_session_crud.add(db, {
            "title": "Pilates Reformer",
            "venue_id": venue.id,
            "start_at": start,
            "end_at": start + dt.timedelta(minutes=50),
            "capacity": 12,
            "enrolled_count": 0,
        })

    db.commit()
