"""
quota.py

Daily YouTube API cost ledger.

The ledger is cooperative accounting, not enforcement: callers ask
can_afford() before spending and charge() after the remote call has already
consumed the units.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone
from typing import Callable, Optional
from zoneinfo import ZoneInfo

import config
from logger import get_logger
from pipeline.state import JobStateStore

logger = get_logger(__name__)

Clock = Callable[[], datetime]


@dataclass(frozen=True)
class QuotaStatus:
    daily_quota: int
    used: int
    remaining: int
    videos_remaining: int
    reset_date: Optional[str]


class QuotaLedger:
    def __init__(
        self,
        store: JobStateStore,
        daily_quota: int = config.DAILY_QUOTA,
        tz: str = config.QUOTA_TIMEZONE,
        clock: Optional[Clock] = None,
    ):
        self._store = store
        self.daily_quota = daily_quota
        self.tz = ZoneInfo(tz)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def now(self) -> datetime:
        return self._clock().astimezone(self.tz)

    def today(self) -> str:
        return self.now().date().isoformat()

    @property
    def used_today(self) -> int:
        return self._store.quota.used_today

    # ------------------------------------------------------------------
    # Ledger operations
    # ------------------------------------------------------------------

    def reset_if_new_day(self) -> bool:
        quota = self._store.quota
        today = self.today()
        if quota.reset_date == today:
            return False

        logger.info(f"Quota reset for new day ({quota.reset_date} -> {today})")
        quota.used_today = 0
        quota.reset_date = today
        self._store.flush()
        return True

    def can_afford(self, cost: int) -> bool:
        return self._store.quota.used_today + cost <= self.daily_quota

    def charge(self, cost: int) -> None:
        quota = self._store.quota
        quota.used_today += cost
        self._store.flush()
        logger.debug(
            f"Quota used: +{cost} (total={quota.used_today}, "
            f"remaining={self.daily_quota - quota.used_today})"
        )

    def can_upload_more(self) -> bool:
        self.reset_if_new_day()
        return self.can_afford(config.VIDEO_TOTAL_COST)

    def time_until_reset(self) -> timedelta:
        now = self.now()
        midnight = datetime.combine(
            now.date() + timedelta(days=1), time(0, 0), tzinfo=self.tz
        )
        # Subtract in UTC: same-tzinfo arithmetic ignores DST offset changes.
        return midnight.astimezone(timezone.utc) - now.astimezone(timezone.utc)

    def status(self) -> QuotaStatus:
        """Current budget as the next ledger operation would see it. Read-only."""
        today = self.today()
        quota = self._store.quota
        used = quota.used_today if quota.reset_date == today else 0
        remaining = self.daily_quota - used
        return QuotaStatus(
            daily_quota=self.daily_quota,
            used=used,
            remaining=remaining,
            videos_remaining=max(0, remaining // config.VIDEO_TOTAL_COST),
            reset_date=today,
        )
