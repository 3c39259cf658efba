"""
manifest.py

Job list loading.

Reads manifest.json (uploadable items) and library.json (enrichment such as
speaker, scriptures, summary) from the Shared Drive and turns them into an
ordered, read-only list of JobItem.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import config
from logger import get_logger

logger = get_logger(__name__)

LibraryIndex = Dict[str, Dict[str, Any]]


@dataclass(frozen=True)
class SeriesRef:
    id: str
    title: str
    subtitle: Optional[str] = None
    position: Optional[int] = None
    image_url: Optional[str] = None


@dataclass(frozen=True)
class JobItem:
    id: str
    title: str
    date: str
    folder: str
    files: Dict[str, Any] = field(default_factory=dict)
    series: Optional[SeriesRef] = None
    status: str = ""

    @property
    def video_filename(self) -> Optional[str]:
        return _filename(self.files.get("video_original"))

    def file_named(self, key: str) -> Optional[str]:
        return _filename(self.files.get(key))


def _filename(entry: Any) -> Optional[str]:
    if isinstance(entry, dict):
        name = entry.get("filename")
        return str(name) if name else None
    return None


def _series_image_url(series: Dict[str, Any]) -> Optional[str]:
    direct = series.get("image_url")
    if isinstance(direct, str) and direct.strip():
        return direct.strip()

    images = series.get("images")
    if not isinstance(images, dict):
        return None
    for key in config.SERIES_IMAGE_KEYS:
        v = images.get(key)
        if isinstance(v, dict):
            v = v.get("url")
        if isinstance(v, str) and v.strip():
            return v.strip()
    return None


def parse_series(raw: Any) -> Optional[SeriesRef]:
    if not isinstance(raw, dict):
        return None
    sid = raw.get("id")
    if not sid:
        return None

    position = raw.get("position")
    return SeriesRef(
        id=str(sid),
        title=str(raw.get("title") or sid),
        subtitle=raw.get("subtitle") or None,
        position=position if isinstance(position, int) else None,
        image_url=_series_image_url(raw),
    )


def parse_items(manifest: Dict[str, Any]) -> List[JobItem]:
    """
    Keep items that have an original video and are marked complete,
    ordered by date ascending (oldest first).
    """
    raw_items = manifest.get("items") or {}
    if not isinstance(raw_items, dict):
        raise ValueError("manifest.items must be an object keyed by item id")

    items: List[JobItem] = []
    for item_id, raw in raw_items.items():
        if not isinstance(raw, dict):
            continue
        files = raw.get("files") or {}
        if not files.get("video_original") or raw.get("status") != "complete":
            continue

        items.append(
            JobItem(
                id=str(item_id),
                title=str(raw.get("title") or item_id),
                date=str(raw.get("date") or ""),
                folder=str(raw.get("folder") or ""),
                files=files,
                series=parse_series(raw.get("series")),
                status=str(raw.get("status")),
            )
        )

    items.sort(key=lambda i: i.date)
    return items


def index_library(library: Any) -> LibraryIndex:
    out: LibraryIndex = {}
    for entry in library or []:
        if isinstance(entry, dict) and entry.get("id"):
            out[str(entry["id"])] = entry
    return out


def load_manifests(assets: Any) -> Tuple[List[JobItem], LibraryIndex]:
    logger.info("Loading manifests from Shared Drive...")

    manifest = assets.load_json(config.MANIFEST_FILENAME)
    library = assets.load_json(config.LIBRARY_FILENAME)

    library_by_id = index_library(library)
    items = parse_items(manifest)

    logger.info(
        f"Manifests loaded: total={len(manifest.get('items') or {})} "
        f"videos={len(items)} library={len(library_by_id)}"
    )
    return items, library_by_id
