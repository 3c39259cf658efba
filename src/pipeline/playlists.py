"""
playlists.py

Series → YouTube playlist reconciliation.

Rules:
1) A series maps to exactly one playlist. Once bound, the binding never changes.
2) Local state wins. Otherwise adopt an existing remote playlist with the same
   title. Only create when neither exists.
3) Cover images are best-effort; a failure is recorded as thumbnail_set=False
   and retried on the next reconcile.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional

import config
import thumbnails
from logger import get_logger
from manifest import JobItem
from pipeline.quota import QuotaLedger
from pipeline.retry import Sleep, execute_with_retry
from pipeline.run_state import ReconcileSummary
from pipeline.state import JobStateStore, utc_now_iso
from providers.base import VideoPlatform

logger = get_logger(__name__)


@dataclass(frozen=True)
class Collection:
    id: str
    title: str
    subtitle: Optional[str] = None
    image_url: Optional[str] = None

    @property
    def description(self) -> str:
        return self.subtitle or f'Videos from the "{self.title}" series'


def collections_from_items(items: Iterable[JobItem]) -> List[Collection]:
    """Unique series referenced by `items`, in first-seen order."""
    seen: Dict[str, Collection] = {}
    for item in items:
        s = item.series
        if s is None or s.id in seen:
            continue
        seen[s.id] = Collection(
            id=s.id, title=s.title, subtitle=s.subtitle, image_url=s.image_url
        )
    return list(seen.values())


class PlaylistReconciler:
    def __init__(
        self,
        platform: VideoPlatform,
        store: JobStateStore,
        ledger: QuotaLedger,
        *,
        privacy_status: str = config.DEFAULT_PRIVACY_STATUS,
        fetch_image: Callable[[str], bytes] = thumbnails.fetch_image,
        sleep: Optional[Sleep] = None,
    ):
        self._platform = platform
        self._store = store
        self._ledger = ledger
        self._privacy_status = privacy_status
        self._fetch_image = fetch_image
        self._sleep = sleep
        self._title_index: Optional[Dict[str, str]] = None

    # --------------------------------------------------------
    # Remote lookup
    # --------------------------------------------------------

    def fetch_title_index(self) -> Dict[str, str]:
        """
        Page through the account's playlists building title → id.
        Stops early (partial index) when a page is no longer affordable.
        """
        index: Dict[str, str] = {}
        token: Optional[str] = None

        while True:
            if not self._ledger.can_afford(config.LIST_COST):
                logger.warning("Not enough quota to list more playlists; index is partial")
                break

            page = execute_with_retry(
                lambda: self._platform.list_playlists(token),
                "list playlists",
                sleep=self._sleep,
            )
            self._ledger.charge(config.LIST_COST)

            for pl in page.playlists:
                # First playlist with a given title wins
                index.setdefault(pl.title, pl.id)

            token = page.next_page_token
            if not token:
                break

        logger.debug(f"Remote playlist index: {len(index)} titles")
        self._title_index = index
        return index

    # --------------------------------------------------------
    # Reconcile
    # --------------------------------------------------------

    def reconcile(
        self, collections: Iterable[Collection], dry_run: bool = False
    ) -> ReconcileSummary:
        summary = ReconcileSummary()

        if dry_run:
            index = dict(self._title_index or {})
        else:
            self._ledger.reset_if_new_day()
            index = self.fetch_title_index()

        bound_ids = {
            c.get("remote_playlist_id")
            for c in self._store.collections().values()
            if c.get("remote_playlist_id")
        }

        for c in collections:
            state = self._store.collection(c.id)

            if state and state.get("remote_playlist_id"):
                summary.existing += 1
                if state.get("thumbnail_set"):
                    logger.debug(f"Playlist already exists: {c.title}")
                    continue
                if dry_run:
                    summary.planned.append(f"retry cover image: {c.title}")
                    continue
                self._apply_and_record(c, state["remote_playlist_id"], summary)
                continue

            found = index.get(c.title)
            if found and found in bound_ids:
                logger.warning(
                    f"Playlist titled {c.title!r} is already bound to another series; "
                    "not adopting"
                )
                found = None

            if found:
                if dry_run:
                    summary.planned.append(f"adopt existing playlist {found}: {c.title}")
                    continue
                logger.info(f"Adopting existing playlist {found} for {c.title}")
                self._store.set_collection(
                    c.id,
                    remote_playlist_id=found,
                    title=c.title,
                    created_at=utc_now_iso(),
                    thumbnail_set=False,
                )
                bound_ids.add(found)
                summary.adopted += 1
                self._apply_and_record(c, found, summary)
                continue

            if dry_run:
                summary.planned.append(f"create playlist: {c.title}")
                continue

            if not self._ledger.can_afford(config.PLAYLIST_INSERT_COST):
                logger.warning(f"Not enough quota to create playlist {c.title!r} today")
                summary.skipped_quota += 1
                continue

            playlist_id = self._create(c)
            bound_ids.add(playlist_id)
            summary.created += 1
            self._apply_and_record(c, playlist_id, summary)

        logger.info(
            f"Playlist sync complete: existing={summary.existing} "
            f"adopted={summary.adopted} created={summary.created} "
            f"covers_set={summary.thumbnails_set} covers_failed={summary.thumbnails_failed}"
        )
        return summary

    def _create(self, c: Collection) -> str:
        logger.info(f"Creating playlist: {c.title}")
        playlist_id = execute_with_retry(
            lambda: self._platform.insert_playlist(
                c.title, c.description, self._privacy_status
            ),
            f'create playlist "{c.title}"',
            sleep=self._sleep,
        )
        self._ledger.charge(config.PLAYLIST_INSERT_COST)

        # Bind before the cover step so a crash cannot orphan the new playlist
        self._store.set_collection(
            c.id,
            remote_playlist_id=playlist_id,
            title=c.title,
            created_at=utc_now_iso(),
            thumbnail_set=False,
        )
        logger.info(f"Playlist created: {playlist_id} ({c.title})")
        return playlist_id

    # --------------------------------------------------------
    # Cover image
    # --------------------------------------------------------

    def _apply_and_record(
        self, c: Collection, playlist_id: str, summary: ReconcileSummary
    ) -> None:
        if not c.image_url:
            return

        ok = self.apply_thumbnail(c, playlist_id)
        self._store.set_collection(c.id, thumbnail_set=ok)
        if ok:
            summary.thumbnails_set += 1
        else:
            summary.thumbnails_failed += 1

    def apply_thumbnail(self, c: Collection, playlist_id: str) -> bool:
        if not c.image_url:
            return False

        try:
            if not self._ledger.can_afford(config.PLAYLIST_IMAGE_COST):
                logger.warning(f"Not enough quota to set cover image for {c.title!r}")
                return False

            raw = self._fetch_image(c.image_url)
            data, mime_type = thumbnails.crop_to_square(raw)

            execute_with_retry(
                lambda: self._platform.set_playlist_image(playlist_id, data, mime_type),
                f'set cover image for "{c.title}"',
                sleep=self._sleep,
            )
            self._ledger.charge(config.PLAYLIST_IMAGE_COST)
            logger.info(f"Playlist cover set: {c.title}")
            return True

        except Exception as e:
            logger.error(f"Failed to set playlist cover for {c.title!r}: {e}")
            return False

    # --------------------------------------------------------
    # Membership
    # --------------------------------------------------------

    def add_video(
        self, video_id: str, collection_id: str, position: Optional[int] = None
    ) -> bool:
        """
        Add an uploaded video to its series playlist.

        Returns False (never raises for bookkeeping reasons) when the series has
        no playlist yet or today's quota cannot cover the insert.
        """
        if not collection_id:
            return False

        state = self._store.collection(collection_id)
        playlist_id = (state or {}).get("remote_playlist_id")
        if not playlist_id:
            logger.warning(f"No playlist found for series {collection_id}, skipping add")
            return False

        if not self._ledger.can_afford(config.PLAYLIST_ITEM_COST):
            logger.warning("Not enough quota to add video to playlist")
            return False

        execute_with_retry(
            lambda: self._platform.insert_playlist_item(playlist_id, video_id, position),
            f"add video {video_id} to playlist {playlist_id}",
            sleep=self._sleep,
        )
        self._ledger.charge(config.PLAYLIST_ITEM_COST)
        logger.info(f"Video {video_id} added to playlist {playlist_id} ({state.get('title')})")
        return True
