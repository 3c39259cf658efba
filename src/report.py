"""
report.py

Builds upload-report.json from the durable state.

The report is derived data: it can be regenerated at any time and nothing
reads it back.
"""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, List, Sequence

from logger import get_logger
from manifest import JobItem, LibraryIndex
from pipeline.state import JobStateStore, JobStatus

logger = get_logger(__name__)


def build_report(
    items: Sequence[JobItem],
    library: LibraryIndex,
    store: JobStateStore,
) -> Dict[str, Any]:
    uploaded = failed = pending = 0
    videos: List[Dict[str, Any]] = []
    collections = store.collections()

    for item in items:
        job = store.get(item.id)
        status = JobStatus.from_string(job.get("status"))

        if status == JobStatus.FAILED:
            failed += 1
            videos.append(
                {
                    "item_id": item.id,
                    "title": item.title,
                    "status": status.value,
                    "error": job.get("error"),
                    "failed_at": job.get("failed_at"),
                }
            )
            continue

        if status != JobStatus.COMPLETE:
            pending += 1
            continue

        uploaded += 1
        playlist_id = None
        if item.series is not None:
            playlist_id = (collections.get(item.series.id) or {}).get("remote_playlist_id")

        videos.append(
            {
                "item_id": item.id,
                "title": item.title,
                "status": status.value,
                "speaker": (library.get(item.id) or {}).get("speaker"),
                "video_id": job.get("remote_video_id"),
                "url": job.get("remote_url"),
                "playlist_id": playlist_id,
                "thumbnail_uploaded": bool(job.get("thumbnail_uploaded")),
                "added_to_playlist": bool(job.get("added_to_collection")),
                "uploaded_at": job.get("uploaded_at"),
            }
        )

    return {
        "generated_at": time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime()),
        "summary": {
            "total_videos": len(items),
            "uploaded": uploaded,
            "failed": failed,
            "pending": pending,
            "playlists": len(collections),
        },
        "videos": videos,
    }


def generate_report(
    items: Sequence[JobItem],
    library: LibraryIndex,
    store: JobStateStore,
    path: Path,
) -> Dict[str, Any]:
    report = build_report(items, library, store)

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    tmp.write_text(json.dumps(report, indent=2, ensure_ascii=False), encoding="utf-8")
    tmp.replace(path)

    s = report["summary"]
    logger.info(
        f"Report written to {path} (uploaded={s['uploaded']} failed={s['failed']} "
        f"pending={s['pending']})"
    )
    return report
