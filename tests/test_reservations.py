import datetime as dt

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from conftest import credits_of, enrolled_of
from studio.core.errors import (
    AlreadyBooked,
    BookingNotFound,
    MembershipExpired,
    NoActiveMembership,
    NoCreditsRemaining,
    SessionNotFound,
)
from studio.crud.booking import booking_crud
from studio.models.booking import Booking, BookingStatus
from studio.models.membership import Membership, PlanType
from studio.models.notification import NotificationKind
from studio.services import reservations, waitlist


def _count_bookings(db, member_id, session_id):
    return db.scalar(
        select(func.count()).select_from(Booking)
        .where(Booking.member_id == member_id, Booking.session_id == session_id)
    )


class TestCreateBooking:
    def test_confirmed_debits_one_credit(self, db, clock, make_session, make_membership):
        s = make_session(capacity=5)
        make_membership(1, credits=10)
        ticket = reservations.create_booking(db, 1, s.id, clock=clock)
        assert ticket.booking.status == BookingStatus.CONFIRMED
        assert ticket.qr_code_url.startswith("data:image/png;base64,")
        assert credits_of(db, 1) == 9
        assert enrolled_of(db, s.id) == 1

    def test_waitlisted_keeps_credits(self, db, clock, make_session, make_membership):
        s = make_session(capacity=1)
        make_membership(1)
        make_membership(2)
        reservations.create_booking(db, 1, s.id, clock=clock)
        ticket = reservations.create_booking(db, 2, s.id, clock=clock)
        assert ticket.booking.status == BookingStatus.WAITLISTED
        assert credits_of(db, 2) == 10
        assert enrolled_of(db, s.id) == 1

    def test_subscription_books_without_credits(self, db, clock, make_session, make_membership):
        s = make_session()
        make_membership(1, plan=PlanType.MONTHLY, end_date=clock.now() + dt.timedelta(days=10))
        assert reservations.create_booking(db, 1, s.id, clock=clock).booking.status == BookingStatus.CONFIRMED
        assert credits_of(db, 1) is None

    def test_eligibility_errors(self, db, clock, make_session, make_membership):
        s = make_session()
        with pytest.raises(NoActiveMembership):
            reservations.create_booking(db, 1, s.id, clock=clock)

        make_membership(2, credits=0)
        with pytest.raises(NoCreditsRemaining):
            reservations.create_booking(db, 2, s.id, clock=clock)

        make_membership(3, plan=PlanType.MONTHLY, end_date=clock.now() - dt.timedelta(minutes=1))
        with pytest.raises(MembershipExpired):
            reservations.create_booking(db, 3, s.id, clock=clock)
        assert db.scalar(select(Membership.is_active).where(Membership.member_id == 3)) is False
        assert enrolled_of(db, s.id) == 0

    def test_already_booked(self, db, clock, make_session, make_membership):
        s = make_session()
        make_membership(1)
        reservations.create_booking(db, 1, s.id, clock=clock)
        with pytest.raises(AlreadyBooked):
            reservations.create_booking(db, 1, s.id, clock=clock)
        assert credits_of(db, 1) == 9
        assert enrolled_of(db, s.id) == 1

    def test_missing_or_cancelled_session(self, db, clock, make_session, make_membership):
        make_membership(1)
        with pytest.raises(SessionNotFound):
            reservations.create_booking(db, 1, 12345, clock=clock)
        s = make_session(cancelled=True)
        with pytest.raises(SessionNotFound):
            reservations.create_booking(db, 1, s.id, clock=clock)
        assert credits_of(db, 1) == 10

    def test_rebook_reuses_record_with_fresh_token(self, db, clock, make_session, make_membership):
        s = make_session()
        make_membership(1)
        first = reservations.create_booking(db, 1, s.id, clock=clock).booking
        first_id, first_token = first.id, first.qr_code
        reservations.cancel_booking(db, first_id, 1, clock=clock)

        clock.advance(minutes=5)
        again = reservations.create_booking(db, 1, s.id, clock=clock).booking
        assert again.id == first_id
        assert again.qr_code != first_token
        assert again.status == BookingStatus.CONFIRMED
        assert _count_bookings(db, 1, s.id) == 1

    def test_notifications_after_commit(self, db, clock, notifier, make_session, make_membership):
        s = make_session(capacity=1)
        make_membership(1)
        make_membership(2)
        reservations.create_booking(db, 1, s.id, clock=clock, notifier=notifier)
        reservations.create_booking(db, 2, s.id, clock=clock, notifier=notifier)
        kinds = [(m, k) for m, k, _msg, _sid in notifier.sent]
        assert kinds == [(1, NotificationKind.BOOKING_CONFIRMATION), (2, NotificationKind.WAITLIST_NOTIFICATION)]

    def test_notifier_failure_keeps_booking(self, db, clock, make_session, make_membership):
        class Broken:
            def notify(self, *args, **kwargs):
                raise RuntimeError("push provider down")

        s = make_session()
        make_membership(1)
        ticket = reservations.create_booking(db, 1, s.id, clock=clock, notifier=Broken())
        assert ticket.booking.status == BookingStatus.CONFIRMED
        assert _count_bookings(db, 1, s.id) == 1


class TestCancelBooking:
    def test_early_cancel_refunds_and_frees_slot(self, db, clock, make_session, make_membership):
        s = make_session(starts_in=dt.timedelta(hours=5))
        make_membership(1)
        b = reservations.create_booking(db, 1, s.id, clock=clock).booking
        result = reservations.cancel_booking(db, b.id, 1, clock=clock)
        assert result.booking.status == BookingStatus.CANCELLED
        assert result.late is False
        assert result.refunded is True
        assert credits_of(db, 1) == 10
        assert enrolled_of(db, s.id) == 0

    def test_late_cancel_without_backfill_forfeits_credit(self, db, clock, make_session, make_membership):
        s = make_session(starts_in=dt.timedelta(minutes=90))
        make_membership(1, credits=10)
        b = reservations.create_booking(db, 1, s.id, clock=clock).booking
        assert credits_of(db, 1) == 9

        result = reservations.cancel_booking(db, b.id, 1, clock=clock)
        assert result.late is True
        assert result.promoted is None
        assert result.refunded is False
        assert credits_of(db, 1) == 9

    def test_late_cancel_with_backfill_refunds(self, db, clock, notifier, make_session, make_membership):
        s = make_session(capacity=1, starts_in=dt.timedelta(minutes=90))
        make_membership(1, credits=10)
        make_membership(2, credits=10)
        b1 = reservations.create_booking(db, 1, s.id, clock=clock).booking
        b2 = reservations.create_booking(db, 2, s.id, clock=clock).booking
        b2_id = b2.id

        result = reservations.cancel_booking(db, b1.id, 1, clock=clock, notifier=notifier)
        assert result.late is True
        assert result.promoted.id == b2_id
        assert result.refunded is True
        assert credits_of(db, 1) == 10
        assert credits_of(db, 2) == 9
        assert enrolled_of(db, s.id) == 1
        assert db.get(Booking, b2_id).status == BookingStatus.CONFIRMED
        assert notifier.sent[-1][:2] == (2, NotificationKind.PROMOTION)

    def test_cancel_exactly_two_hours_before_is_not_late(self, db, clock, make_session, make_membership):
        s = make_session(starts_in=dt.timedelta(hours=2))
        make_membership(1)
        b = reservations.create_booking(db, 1, s.id, clock=clock).booking
        assert reservations.cancel_booking(db, b.id, 1, clock=clock).late is False

    def test_cancel_waitlisted_leaves_counter(self, db, clock, make_session, make_membership):
        s = make_session(capacity=1)
        make_membership(1)
        make_membership(2)
        reservations.create_booking(db, 1, s.id, clock=clock)
        w = reservations.create_booking(db, 2, s.id, clock=clock).booking
        result = reservations.cancel_booking(db, w.id, 2, clock=clock)
        assert result.promoted is None
        assert result.refunded is False
        assert enrolled_of(db, s.id) == 1
        assert credits_of(db, 2) == 10

    def test_recancel_is_not_found_and_never_double_refunds(self, db, clock, make_session, make_membership):
        s = make_session(starts_in=dt.timedelta(days=2))
        make_membership(1)
        b = reservations.create_booking(db, 1, s.id, clock=clock).booking
        booking_id = b.id
        reservations.cancel_booking(db, booking_id, 1, clock=clock)
        assert credits_of(db, 1) == 10
        with pytest.raises(BookingNotFound):
            reservations.cancel_booking(db, booking_id, 1, clock=clock)
        assert credits_of(db, 1) == 10
        assert enrolled_of(db, s.id) == 0

    def test_cannot_cancel_someone_elses_booking(self, db, clock, make_session, make_membership):
        s = make_session()
        make_membership(1)
        b = reservations.create_booking(db, 1, s.id, clock=clock).booking
        with pytest.raises(BookingNotFound):
            reservations.cancel_booking(db, b.id, 2, clock=clock)
        assert db.get(Booking, b.id).status == BookingStatus.CONFIRMED

    def test_failure_mid_cancel_rolls_back_everything(self, db, clock, make_session, make_membership, monkeypatch):
        s = make_session(capacity=1)
        make_membership(1)
        make_membership(2)
        b1 = reservations.create_booking(db, 1, s.id, clock=clock).booking
        b1_id = b1.id
        reservations.create_booking(db, 2, s.id, clock=clock)

        def boom(*args, **kwargs):
            raise RuntimeError("lock timeout")

        monkeypatch.setattr(waitlist, "promote", boom)
        with pytest.raises(RuntimeError):
            reservations.cancel_booking(db, b1_id, 1, clock=clock)

        assert db.get(Booking, b1_id, populate_existing=True).status == BookingStatus.CONFIRMED
        assert enrolled_of(db, s.id) == 1
        assert credits_of(db, 1) == 9

    def test_uniqueness_across_cycles(self, db, clock, make_session, make_membership):
        s = make_session(starts_in=dt.timedelta(days=3))
        make_membership(1)
        for _ in range(3):
            b = reservations.create_booking(db, 1, s.id, clock=clock).booking
            reservations.cancel_booking(db, b.id, 1, clock=clock)
            clock.advance(minutes=1)
        assert _count_bookings(db, 1, s.id) == 1
        assert credits_of(db, 1) == 10


def test_list_member_bookings_renders_qr_only_for_confirmed(db, clock, make_session, make_membership):
    s1 = make_session(capacity=1)
    s2 = make_session(capacity=1)
    make_membership(1)
    make_membership(2)
    reservations.create_booking(db, 2, s2.id, clock=clock)
    reservations.create_booking(db, 1, s1.id, clock=clock)
    clock.advance(minutes=1)
    reservations.create_booking(db, 1, s2.id, clock=clock)

    tickets = reservations.list_member_bookings(db, 1)
    by_session = {t.booking.session_id: t for t in tickets}
    assert by_session[s1.id].qr_code_url is not None
    assert by_session[s2.id].booking.status == BookingStatus.WAITLISTED
    assert by_session[s2.id].qr_code_url is None
    # mais recente primeiro
    assert tickets[0].booking.session_id == s2.id


def test_list_session_bookings(db, clock, make_session, make_membership):
    s = make_session(capacity=1)
    make_membership(1)
    make_membership(2)
    reservations.create_booking(db, 1, s.id, clock=clock)
    reservations.create_booking(db, 2, s.id, clock=clock)
    assert [b.member_id for b in reservations.list_session_bookings(db, s.id)] == [1, 2]
    waiting = reservations.list_session_bookings(db, s.id, [BookingStatus.WAITLISTED])
    assert [b.member_id for b in waiting] == [2]
    with pytest.raises(SessionNotFound):
        reservations.list_session_bookings(db, 999)


class TestCreateBookingIntegrity:
    def test_concurrent_duplicate_maps_to_already_booked(self, db, clock, make_session, make_membership, monkeypatch):
        s = make_session(capacity=5)
        make_membership(1)
        reservations.create_booking(db, 1, s.id, clock=clock)
        # simula a outra requisição que passou pela checagem antes do insert
        monkeypatch.setattr(booking_crud, "get_for_member_session", lambda db, **kw: None)

        with pytest.raises(AlreadyBooked):
            reservations.create_booking(db, 1, s.id, clock=clock)
        assert credits_of(db, 1) == 9
        assert enrolled_of(db, s.id) == 1

    def test_other_integrity_errors_propagate(self, db, clock, make_session, make_membership, monkeypatch):
        s1 = make_session(capacity=5)
        s2 = make_session(capacity=5)
        make_membership(1)
        make_membership(2)
        taken = reservations.create_booking(db, 1, s1.id, clock=clock).booking.qr_code
        monkeypatch.setattr(reservations, "build_checkin_token", lambda member_id, session_id: taken)

        with pytest.raises(IntegrityError):
            reservations.create_booking(db, 2, s2.id, clock=clock)
        assert credits_of(db, 2) == 10
        assert enrolled_of(db, s2.id) == 0
        assert _count_bookings(db, 2, s2.id) == 0
