"""
Pending profile-update notifications.

When an administrator edits a user's profile, the change is staged here so the
user's next session can show what changed. The cache lives in process memory:

- one instance is created at application start-up and dropped at shutdown
- an entry is created (or replaced) by ``store``
- an entry is removed by ``acknowledge``, or once it is older than the TTL
  (on the next read of that user or the next ``store`` of any user)

Entries are not persisted and not shared, so a restart loses them and a second
service instance never sees the first instance's entries.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional

from restaurant_reviews.core.logger import logger


@dataclass(frozen=True)
class PendingUpdate:
    user_id: int
    data: Dict[str, Any]
    staged_at: datetime


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PendingUpdateCache:
    """Process-local, TTL-bounded store of staged profile updates"""

    def __init__(self, ttl_seconds: int, clock: Callable[[], datetime] = _utc_now):
        self.ttl = timedelta(seconds=ttl_seconds)
        self._clock = clock
        self._entries: Dict[int, PendingUpdate] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def _expired(self, entry: PendingUpdate, now: datetime) -> bool:
        return now - entry.staged_at >= self.ttl

    def store(self, user_id: int, data: Dict[str, Any]) -> PendingUpdate:
        """
        Stage an update, replacing any earlier unacknowledged one.

        Expired entries of every user are dropped first, so the cache never
        holds more than the updates staged within one TTL window.
        """
        self.purge_expired()
        entry = PendingUpdate(user_id=user_id, data=dict(data), staged_at=self._clock())
        self._entries[user_id] = entry
        logger.info(
            f"Staged profile update for user {user_id}",
            user_id=user_id,
            metadata={"event": "pending_update_stored", "fields": sorted(entry.data)}
        )
        return entry

    def get(self, user_id: int) -> Optional[PendingUpdate]:
        entry = self._entries.get(user_id)
        if entry is None:
            return None
        if self._expired(entry, self._clock()):
            del self._entries[user_id]
            return None
        return entry

    def acknowledge(self, user_id: int) -> bool:
        """Remove the user's staged update; False when there was none"""
        return self._entries.pop(user_id, None) is not None

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [uid for uid, entry in self._entries.items() if self._expired(entry, now)]
        for uid in expired:
            del self._entries[uid]
        if expired:
            logger.debug(
                f"Purged {len(expired)} expired pending updates",
                metadata={"event": "pending_update_purged", "count": len(expired)}
            )
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()
