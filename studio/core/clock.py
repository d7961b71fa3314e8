# studio/core/clock.py
from __future__ import annotations

import datetime as dt
from typing import Protocol


class Clock(Protocol):
    def now(self) -> dt.datetime: ...


class SystemClock:
    def now(self) -> dt.datetime:
        return dt.datetime.now(dt.timezone.utc)


system_clock = SystemClock()


def ensure_utc(value: dt.datetime) -> dt.datetime:
    """SQLite devolve datetimes sem tzinfo; tudo é gravado em UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)
