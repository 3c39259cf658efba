"""
upload.py

Upload pipeline (the only scheduling loop).

Per-item state machine:
    pending → uploading → uploaded → complete
                 └──────────→ failed (primary upload raised)

Sub-steps after the primary upload (thumbnail, playlist membership) are
best-effort: their failures are logged and recorded as flags, never raised.

Named suspension points:
- quota wait      time_until_reset() + QUOTA_RESET_MARGIN_SEC
- inter-item      INTER_ITEM_DELAY_SEC after every item
- retry backoff   inside pipeline.retry
"""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional, Sequence, Union

import config
from logger import get_logger
from manifest import JobItem, LibraryIndex
from metadata import build_video_metadata, get_thumbnail_filename
from pipeline.playlists import PlaylistReconciler, collections_from_items
from pipeline.quota import QuotaLedger
from pipeline.retry import Sleep, execute_with_retry
from pipeline.run_state import (
    DryRunEntry,
    DryRunSummary,
    PlaylistRetrySummary,
    UploadSummary,
)
from pipeline.state import JobStateStore, JobStatus, utc_now_iso
from providers.base import VideoPlatform

logger = get_logger(__name__)

SELECTABLE = (JobStatus.PENDING, JobStatus.UPLOADING, JobStatus.UPLOADED)


class ItemNotFoundError(LookupError):
    pass


class _ProgressLogger:
    """Logs upload progress once per 10% step."""

    def __init__(self, title: str):
        self.title = title
        self._last_step = -1

    def __call__(self, sent: int, total: int) -> None:
        if total <= 0:
            return
        step = min(10, int(sent * 10 / total))
        if step <= self._last_step:
            return
        self._last_step = step
        logger.info(f"  {self.title}: {step * 10}% ({sent}/{total} bytes)")


class UploadPipeline:
    def __init__(
        self,
        platform: VideoPlatform,
        assets: Any,
        store: JobStateStore,
        ledger: QuotaLedger,
        reconciler: PlaylistReconciler,
        *,
        sleep: Optional[Sleep] = None,
        inter_item_delay: float = config.INTER_ITEM_DELAY_SEC,
        quota_reset_margin: float = config.QUOTA_RESET_MARGIN_SEC,
        footer: str = config.DEFAULT_DESCRIPTION_FOOTER,
        privacy_status: str = config.DEFAULT_PRIVACY_STATUS,
    ):
        self._platform = platform
        self._assets = assets
        self._store = store
        self._ledger = ledger
        self._reconciler = reconciler
        self._sleep = sleep or time.sleep
        self._inter_item_delay = inter_item_delay
        self._quota_reset_margin = quota_reset_margin
        self._footer = footer
        self._privacy_status = privacy_status

    # --------------------------------------------------------
    # Selection
    # --------------------------------------------------------

    def next_pending(self, items: Sequence[JobItem]) -> Optional[JobItem]:
        for item in items:
            if self._store.status(item.id) in SELECTABLE:
                return item
        return None

    def select(self, items: Sequence[JobItem], single_item_id: Optional[str]) -> List[JobItem]:
        if not single_item_id:
            return list(items)
        for item in items:
            if item.id == single_item_id:
                return [item]
        raise ItemNotFoundError(f"Item not found in manifest: {single_item_id}")

    # --------------------------------------------------------
    # Run
    # --------------------------------------------------------

    def run(
        self,
        items: Sequence[JobItem],
        library: LibraryIndex,
        *,
        single_item_id: Optional[str] = None,
        dry_run: bool = False,
    ) -> Union[UploadSummary, DryRunSummary]:
        candidates = self.select(items, single_item_id)

        if single_item_id:
            status = self._store.status(single_item_id)
            if status == JobStatus.COMPLETE:
                logger.info(f"Item {single_item_id} is already complete")
            elif status == JobStatus.FAILED:
                logger.warning(
                    f"Item {single_item_id} previously failed; clear its state entry to retry"
                )

        if dry_run:
            return self.dry_run(candidates, library)

        summary = UploadSummary()

        while True:
            item = self.next_pending(candidates)
            if item is None:
                break

            if not self._ledger.can_upload_more():
                self._wait_for_quota_reset()
                summary.quota_waits += 1
                self._bind_missing_collections(candidates)
                continue

            try:
                self.process_item(item, library.get(item.id))
                summary.mark_uploaded()
            except Exception as e:
                logger.error(f"Failed to upload {item.title!r} ({item.id}): {e}")
                self._store.set(
                    item.id,
                    status=JobStatus.FAILED,
                    error=str(e),
                    failed_at=utc_now_iso(),
                )
                summary.mark_failed()

            self._sleep(self._inter_item_delay)

        pending = sum(1 for i in candidates if self._store.status(i.id) in SELECTABLE)
        summary.finish(pending=pending, quota_used=self._ledger.used_today)

        logger.info(
            f"Upload run complete: uploaded={summary.uploaded} failed={summary.failed} "
            f"pending={summary.pending} quota_used={summary.quota_used}/{self._ledger.daily_quota} "
            f"runtime={summary.runtime_seconds}s"
        )
        return summary

    def _wait_for_quota_reset(self) -> None:
        wait = self._ledger.time_until_reset().total_seconds() + self._quota_reset_margin
        logger.warning(
            f"Daily quota exhausted (used={self._ledger.used_today}/{self._ledger.daily_quota}); "
            f"sleeping {wait / 3600:.1f}h until reset"
        )
        self._sleep(wait)

    def _bind_missing_collections(self, candidates: Sequence[JobItem]) -> None:
        """
        Retry playlists that an earlier quota window could not create, so the
        remaining items of a series still land in it.
        """
        pending = [i for i in candidates if self._store.status(i.id) in SELECTABLE]
        missing = [
            c
            for c in collections_from_items(pending)
            if not (self._store.collection(c.id) or {}).get("remote_playlist_id")
        ]
        if not missing:
            return

        logger.info(f"New quota window: reconciling {len(missing)} unbound playlist(s)")
        try:
            self._reconciler.reconcile(missing)
        except Exception as e:
            logger.error(f"Playlist reconcile after quota reset failed: {e}")

    # --------------------------------------------------------
    # Per item
    # --------------------------------------------------------

    def process_item(self, item: JobItem, library_entry: Optional[Dict[str, Any]]) -> str:
        logger.info(f"Processing: {item.title} ({item.date})")

        job = self._store.get(item.id)
        video_id = job.get("remote_video_id")

        if JobStatus.from_string(job.get("status")) == JobStatus.UPLOADED and video_id:
            logger.info(f"Resuming {item.title}: video already uploaded as {video_id}")
        else:
            video_id = self._upload_primary(item, library_entry)

        thumbnail_ok = self._upload_thumbnail(item, video_id)
        added_ok = self._add_to_collection(item, video_id)

        self._store.set(
            item.id,
            status=JobStatus.COMPLETE,
            thumbnail_uploaded=thumbnail_ok,
            added_to_collection=added_ok,
        )
        logger.info(f"Complete: {item.title} → {self._platform.video_url(video_id)}")
        return video_id

    def _upload_primary(self, item: JobItem, library_entry: Optional[Dict[str, Any]]) -> str:
        self._store.set(item.id, status=JobStatus.UPLOADING, started_at=utc_now_iso())

        filename = item.video_filename
        if not filename:
            raise ValueError(f"Item {item.id} has no original video filename")

        metadata = build_video_metadata(
            item, library_entry, footer=self._footer, privacy_status=self._privacy_status
        )
        asset = self._assets.open_stream(item.folder, filename)
        progress = _ProgressLogger(item.title)

        def _attempt() -> str:
            asset.stream.seek(0)
            return self._platform.upload_video(
                metadata, asset.stream, asset.size, asset.mime_type, on_progress=progress
            )

        try:
            video_id = execute_with_retry(_attempt, f'upload "{item.title}"', sleep=self._sleep)
        finally:
            asset.close()

        self._ledger.charge(config.UPLOAD_COST)
        self._store.set(
            item.id,
            status=JobStatus.UPLOADED,
            remote_video_id=video_id,
            remote_url=self._platform.video_url(video_id),
            uploaded_at=utc_now_iso(),
        )
        logger.info(f"Uploaded {item.title} as {video_id}")
        return video_id

    def _upload_thumbnail(self, item: JobItem, video_id: str) -> bool:
        filename = get_thumbnail_filename(item)
        if not filename:
            logger.info(f"No thumbnail for {item.title}")
            return False

        try:
            if not self._ledger.can_afford(config.THUMBNAIL_COST):
                logger.warning(f"Not enough quota to set thumbnail for {item.title!r}")
                return False

            buf = self._assets.load_buffer(item.folder, filename)
            execute_with_retry(
                lambda: self._platform.set_thumbnail(video_id, buf.data, buf.mime_type),
                f'set thumbnail for "{item.title}"',
                sleep=self._sleep,
            )
            self._ledger.charge(config.THUMBNAIL_COST)
            logger.info(f"Thumbnail set: {filename}")
            return True

        except Exception as e:
            logger.error(f"Thumbnail upload failed for {item.title!r}: {e}")
            return False

    def _add_to_collection(self, item: JobItem, video_id: str) -> bool:
        if item.series is None:
            return False

        # Manifest positions are 1-based; the API is 0-based
        pos = item.series.position
        position = pos - 1 if pos is not None and pos >= 1 else None

        try:
            return self._reconciler.add_video(video_id, item.series.id, position)
        except Exception as e:
            logger.error(f"Failed to add {item.title!r} to playlist: {e}")
            return False

    # --------------------------------------------------------
    # Maintenance
    # --------------------------------------------------------

    def retry_playlist_adds(self, items: Sequence[JobItem]) -> PlaylistRetrySummary:
        summary = PlaylistRetrySummary()
        self._ledger.reset_if_new_day()

        for item in items:
            job = self._store.get(item.id)
            if JobStatus.from_string(job.get("status")) != JobStatus.COMPLETE:
                continue
            if item.series is None or job.get("added_to_collection"):
                continue
            video_id = job.get("remote_video_id")
            if not video_id:
                continue

            summary.attempted += 1
            if self._add_to_collection(item, video_id):
                self._store.set(item.id, added_to_collection=True)
                summary.added += 1

        logger.info(f"Playlist add retry: attempted={summary.attempted} added={summary.added}")
        return summary

    def dry_run(self, candidates: Sequence[JobItem], library: LibraryIndex) -> DryRunSummary:
        summary = DryRunSummary(
            videos_per_day=self._ledger.daily_quota // config.VIDEO_TOTAL_COST
        )

        for item in candidates:
            status = self._store.status(item.id)
            if status == JobStatus.COMPLETE:
                summary.completed += 1
                continue
            if status == JobStatus.FAILED:
                summary.failed += 1
                continue

            summary.pending += 1
            entry = library.get(item.id) or {}
            summary.entries.append(
                DryRunEntry(
                    item_id=item.id,
                    title=item.title,
                    status=status.value,
                    date=item.date,
                    video=item.video_filename,
                    thumbnail=get_thumbnail_filename(item),
                    series=item.series.title if item.series else None,
                    speaker=entry.get("speaker"),
                )
            )

        logger.info(
            f"Dry run: pending={summary.pending} completed={summary.completed} "
            f"failed={summary.failed} est_days={summary.estimated_days}"
        )
        return summary
