from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Optional


@dataclass
class UploadSummary:
    """
    Outcome of one pipeline run.

    Mutated by the pipeline only; CLI and report treat it as read-only.
    """

    uploaded: int = 0
    failed: int = 0
    pending: int = 0
    quota_waits: int = 0
    quota_used: int = 0
    started_at: float = field(default_factory=time.time)
    finished_at: Optional[float] = None

    def mark_uploaded(self) -> None:
        self.uploaded += 1

    def mark_failed(self) -> None:
        self.failed += 1

    def finish(self, pending: int, quota_used: int) -> None:
        self.pending = pending
        self.quota_used = quota_used
        self.finished_at = time.time()

    @property
    def runtime_seconds(self) -> float:
        end = self.finished_at or time.time()
        return round(end - self.started_at, 2)


@dataclass(frozen=True)
class DryRunEntry:
    item_id: str
    title: str
    status: str
    date: str
    video: Optional[str]
    thumbnail: Optional[str]
    series: Optional[str]
    speaker: Optional[str] = None


@dataclass
class DryRunSummary:
    entries: List[DryRunEntry] = field(default_factory=list)
    pending: int = 0
    completed: int = 0
    failed: int = 0
    videos_per_day: int = 0

    @property
    def estimated_days(self) -> int:
        if not self.videos_per_day:
            return 0
        return -(-self.pending // self.videos_per_day)


@dataclass
class ReconcileSummary:
    existing: int = 0
    adopted: int = 0
    created: int = 0
    thumbnails_set: int = 0
    thumbnails_failed: int = 0
    skipped_quota: int = 0
    planned: List[str] = field(default_factory=list)


@dataclass
class PlaylistRetrySummary:
    attempted: int = 0
    added: int = 0
