"""
metadata.py

Pure mapping from a JobItem (+ library enrichment) to YouTube video metadata.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

import config
from manifest import JobItem

_TAG_RE = re.compile(r"<[^>]*>")


def build_description(
    item: JobItem,
    library_entry: Optional[Dict[str, Any]],
    footer: str = config.DEFAULT_DESCRIPTION_FOOTER,
) -> str:
    entry = library_entry or {}
    parts: List[str] = []

    if item.series and item.series.title:
        parts.append(f'Part of the "{item.series.title}" series')

    if entry.get("speaker"):
        parts.append(f"Speaker: {entry['speaker']}")

    scriptures = entry.get("scriptures") or []
    if scriptures:
        parts.append(f"Scripture: {', '.join(scriptures)}")

    summary = entry.get("summary")
    if summary:
        plain = _TAG_RE.sub("", str(summary)).strip()
        if plain:
            parts.append(f"\n{plain}")

    if footer:
        parts.append(footer)

    return "\n".join(parts)


def build_tags(library_entry: Optional[Dict[str, Any]]) -> List[str]:
    entry = library_entry or {}
    tags = list(config.DEFAULT_TAGS)

    if entry.get("speaker"):
        tags.append(entry["speaker"])

    for tag in entry.get("tags") or []:
        # Library tags look like "speaker:Name"; keep the value only
        value = tag.split(":", 1)[1] if ":" in tag else tag
        if value not in tags:
            tags.append(value)

    for scripture in entry.get("scriptures") or []:
        tags.append(scripture)

    return tags


def build_video_metadata(
    item: JobItem,
    library_entry: Optional[Dict[str, Any]],
    footer: str = config.DEFAULT_DESCRIPTION_FOOTER,
    privacy_status: str = config.DEFAULT_PRIVACY_STATUS,
) -> Dict[str, Any]:
    return {
        "snippet": {
            "title": item.title,
            "description": build_description(item, library_entry, footer),
            "tags": build_tags(library_entry),
            "categoryId": config.VIDEO_CATEGORY_ID,
        },
        "status": {
            "privacyStatus": privacy_status,
            "selfDeclaredMadeForKids": False,
        },
        "recordingDetails": {
            "recordingDate": item.date,
        },
    }


def get_thumbnail_filename(item: JobItem) -> Optional[str]:
    # Priority: image_wide > image_banner > thumbnail_01
    for key in config.THUMBNAIL_FILE_KEYS:
        name = item.file_named(key)
        if name:
            return name
    return None
