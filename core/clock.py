"""
core/clock.py -- Time source abstraction.

Every component that stamps or compares a timestamp (access-token iat/exp,
refresh-token created_at/expires_at/revoked_at) takes a Clock at construction
instead of calling datetime.now() inline. Production code uses SystemClock;
tests substitute a clock they can advance.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Protocol


class Clock(Protocol):
    def now(self) -> datetime:
        """Return the current instant as a timezone-aware UTC datetime."""
        ...


class SystemClock:
    """Wall-clock time in UTC."""

    def now(self) -> datetime:
        return datetime.now(timezone.utc)
