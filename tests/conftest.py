"""
Fixtures compartilhadas: banco SQLite em memória, relógio congelado,
notificador em memória e fábricas de venue/aula/plano.
"""
import os

os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import datetime as dt

import pytest
from sqlalchemy import create_engine, select
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import studio.models  # noqa: F401
from studio.db.base import Base
from studio.models.class_session import ClassSession
from studio.models.membership import Membership, PlanType
from studio.models.venue import Venue
from studio.services.notifications import RecordingNotificationSink

NOW = dt.datetime(2026, 3, 2, 12, 0, tzinfo=dt.timezone.utc)
VENUE_LAT, VENUE_LNG = -23.5614, -46.6559


class FrozenClock:
    def __init__(self, at: dt.datetime):
        self.at = at

    def now(self) -> dt.datetime:
        return self.at

    def set(self, at: dt.datetime) -> None:
        self.at = at

    def advance(self, **delta) -> None:
        self.at = self.at + dt.timedelta(**delta)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(bind=engine, autoflush=False)
    session = Session()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def clock():
    return FrozenClock(NOW)


@pytest.fixture
def notifier():
    return RecordingNotificationSink()


@pytest.fixture
def venue(db):
    v = Venue(name="Studio Centro", latitude=VENUE_LAT, longitude=VENUE_LNG)
    db.add(v)
    db.commit()
    return v


@pytest.fixture
def make_session(db, venue, clock):
    def _make(capacity=10, starts_in=dt.timedelta(days=1), minutes=60, cancelled=False, venue_id="default"):
        start = clock.now() + starts_in
        s = ClassSession(
            title="Pilates Reformer",
            venue_id=venue.id if venue_id == "default" else venue_id,
            start_at=start,
            end_at=start + dt.timedelta(minutes=minutes),
            capacity=capacity,
            enrolled_count=0,
            is_cancelled=cancelled,
        )
        db.add(s)
        db.commit()
        return s
    return _make


@pytest.fixture
def make_membership(db, clock):
    def _make(member_id, plan=PlanType.CLASS_PACK_10, credits=10, end_date=None, active=True):
        m = Membership(
            member_id=member_id,
            plan_type=plan,
            is_active=active,
            start_date=clock.now() - dt.timedelta(days=30),
            end_date=end_date,
            credits_remaining=credits if plan in (PlanType.CLASS_PACK_10, PlanType.CORPORATE) else None,
            last_plan_change=clock.now() - dt.timedelta(days=30),
        )
        db.add(m)
        db.commit()
        return m
    return _make


def credits_of(db, member_id):
    return db.scalar(
        select(Membership.credits_remaining).where(Membership.member_id == member_id, Membership.is_active.is_(True))
    )


def enrolled_of(db, session_id):
    return db.scalar(select(ClassSession.enrolled_count).where(ClassSession.id == session_id))
