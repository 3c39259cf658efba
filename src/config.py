"""
config.py

Central configuration for Uploadarr.

This file intentionally contains ONLY:
- Constants
- Tunables
- Quota costs
- File names

It must NOT contain:
- Business logic
- API calls
- Reading environment variables
- Validation / side effects

Runtime configuration (env vars, directories) belongs in:
- env/
- bootstrap.py (CLI bootstrap)
"""

from __future__ import annotations

from typing import List, Tuple

# ============================================================
# FILE NAMES
# ============================================================

STATE_FILENAME = "upload-state.json"
REPORT_FILENAME = "upload-report.json"

# Manifest documents living at the root of the Shared Drive
MANIFEST_FILENAME = "manifest.json"
LIBRARY_FILENAME = "library.json"

# ============================================================
# GOOGLE API - SCOPES
# ============================================================

GOOGLE_OAUTH_SCOPES = [
    "https://www.googleapis.com/auth/youtube.upload",
    "https://www.googleapis.com/auth/youtube",
    "https://www.googleapis.com/auth/drive.readonly",
]

# ============================================================
# QUOTA (YouTube Data API cost units)
# ============================================================

DAILY_QUOTA = 10_000

UPLOAD_COST = 1600
THUMBNAIL_COST = 50
PLAYLIST_INSERT_COST = 50
PLAYLIST_ITEM_COST = 50
PLAYLIST_IMAGE_COST = 50
LIST_COST = 1

# One fully processed item: upload + thumbnail + playlist membership
VIDEO_TOTAL_COST = UPLOAD_COST + THUMBNAIL_COST + PLAYLIST_ITEM_COST

# The daily quota resets at midnight Pacific
QUOTA_TIMEZONE = "America/Los_Angeles"

# ============================================================
# RETRY / PACING
# ============================================================

MAX_RETRIES = 3
RETRY_DELAYS_SEC: Tuple[float, ...] = (5.0, 30.0, 120.0)

RETRYABLE_STATUS_CODES = (500, 503)
RATE_LIMIT_REASONS = ("rateLimitExceeded",)
QUOTA_REASONS = ("quotaExceeded", "dailyLimitExceeded")

INTER_ITEM_DELAY_SEC = 5.0
QUOTA_RESET_MARGIN_SEC = 60.0

# ============================================================
# TRANSFER
# ============================================================

# Resumable upload chunk size; must be a multiple of 256 KiB
UPLOAD_CHUNK_SIZE = 8 * 1024 * 1024

# playlists.list max page size
YOUTUBE_BATCH_SIZE = 50

IMAGE_FETCH_TIMEOUT_SEC = 30
PLAYLIST_IMAGE_SIZE = 800

# ============================================================
# VIDEO METADATA DEFAULTS
# ============================================================

VIDEO_CATEGORY_ID = "29"  # Nonprofits & Activism
DEFAULT_PRIVACY_STATUS = "private"
DEFAULT_TAGS: List[str] = ["sermon", "church", "Pacific Crossroads Church"]
DEFAULT_DESCRIPTION_FOOTER = (
    "\n---\nPacific Crossroads Church | pacificcrossroads.org"
)

# Preferred thumbnail source files, in priority order
THUMBNAIL_FILE_KEYS = ["image_wide", "image_banner", "thumbnail_01"]

# Preferred series cover image keys, in priority order
SERIES_IMAGE_KEYS = ["image_square", "image_wide", "image_banner"]

# ============================================================
# LOGGING DEFAULTS (logger/ and env/ control actual behavior)
# ============================================================

DEFAULT_LOG_RETENTION = 30
DEFAULT_LOG_LEVEL = "INFO"
