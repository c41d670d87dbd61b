"""Calendar — the single definition of "today" for assignments and proofs.

Invariants:
    - Days are UTC calendar dates, never server-local dates
"""

from datetime import date, datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def utc_today() -> date:
    return utc_now().date()
