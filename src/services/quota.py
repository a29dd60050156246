"""Per-client daily quota tracking.

Usage is kept in memory and shared by every request the process serves.
A restart clears it, as does the end of each quota window. With several
instances, each one enforces its own quota.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

logger = logging.getLogger(__name__)

DEFAULT_WINDOW = timedelta(hours=24)
UNKNOWN_CLIENT = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class UsageRecord:
    """Request counters for one client within the current window."""

    ai_count: int = 0
    web_count: int = 0


class QuotaTracker:
    """Owns the usage table and the quota window.

    The whole table is dropped once the window has elapsed, rather than
    expiring clients one by one.
    """

    def __init__(
        self,
        window: timedelta = DEFAULT_WINDOW,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.window = window
        self._clock = clock
        self._usage: dict[str, UsageRecord] = {}
        self.window_start = clock()

    def reset_if_expired(self) -> bool:
        """Clear all usage if the window has elapsed.

        Returns:
            True if the table was reset
        """
        now = self._clock()
        if now - self.window_start > self.window:
            logger.info(f"Quota window expired, clearing usage for {len(self._usage)} clients")
            self._usage = {}
            self.window_start = now
            return True
        return False

    def get_or_create_record(self, client_id: str) -> UsageRecord:
        """Get the usage record for a client, creating a zeroed one if absent."""
        record = self._usage.get(client_id)
        if record is None:
            record = UsageRecord()
            self._usage[client_id] = record
        return record

    def get_record(self, client_id: str) -> Optional[UsageRecord]:
        """Look up a client's usage without creating it."""
        return self._usage.get(client_id)

    def __contains__(self, client_id: str) -> bool:
        return client_id in self._usage

    def __len__(self) -> int:
        return len(self._usage)


def client_id_from(forwarded_for: str | None, peer_host: str | None) -> str:
    """Derive the quota bucket key for a request.

    Uses the first entry of a forwarded-for header, then the peer address.
    Clients behind a proxy that doesn't set the header share its bucket.
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    return peer_host or UNKNOWN_CLIENT
