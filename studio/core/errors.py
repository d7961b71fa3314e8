# studio/core/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class BookingError(Exception):
    """Base dos erros de negócio; o handler em main.py vira JSON {code, message}."""

    status_code: int = 400
    code: str = "BOOKING_ERROR"
    default_message: str = "Booking request rejected."

    def __init__(self, message: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


# ---- elegibilidade ----

class NoActiveMembership(BookingError):
    status_code = 403
    code = "NO_ACTIVE_MEMBERSHIP"
    default_message = "No active membership found. Please purchase a plan."


class MembershipExpired(BookingError):
    status_code = 403
    code = "MEMBERSHIP_EXPIRED"
    default_message = "Your membership has expired. Please renew your plan to book classes."


class NoCreditsRemaining(BookingError):
    status_code = 403
    code = "NO_CREDITS_REMAINING"
    default_message = "No class credits remaining."


# ---- conflitos ----

class AlreadyBooked(BookingError):
    status_code = 400
    code = "ALREADY_BOOKED"
    default_message = "You are already booked for this class."


class SessionNotFound(BookingError):
    status_code = 404
    code = "SESSION_NOT_FOUND"
    default_message = "Class not found."


class BookingNotFound(BookingError):
    status_code = 404
    code = "BOOKING_NOT_FOUND"
    default_message = "Booking not found or already cancelled."


# ---- check-in ----

class InvalidCheckIn(BookingError):
    status_code = 404
    code = "INVALID_CHECKIN"
    default_message = "Invalid QR code or booking not found."


class OutsideCheckInWindow(BookingError):
    status_code = 400
    code = "OUTSIDE_CHECKIN_WINDOW"
    default_message = "Check-in is only allowed from 15 minutes before the class until 30 minutes after it ends."


class LocationAnomaly(BookingError):
    status_code = 403
    code = "LOCATION_ANOMALY"

    def __init__(self, distance_m: float, radius_m: float):
        self.distance_m = distance_m
        super().__init__(
            f"Member is {round(distance_m)} meters from the studio (limit {round(radius_m)} m). "
            "Staff override required.",
            details={"distance_m": round(distance_m, 1), "radius_m": radius_m},
        )
