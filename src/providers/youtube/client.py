"""
client.py

YouTube Data API v3 implementation of the VideoPlatform interface.

Responsibilities:
- Resumable chunked video upload with progress reporting
- Thumbnail / playlist / playlist image calls
- HTTP + transport failure → typed platform error translation

Does NOT:
- Retry (see pipeline.retry)
- Track quota (see pipeline.quota)
- Acquire credentials (see auth/)
"""

from __future__ import annotations

import io
import json
import socket
from typing import Any, BinaryIO, Callable, Dict, Optional, TypeVar

import httplib2
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

import config
from logger import get_logger
from providers.base import PlaylistPage, ProgressCallback, RemotePlaylist, VideoPlatform
from providers.errors import (
    HttpStatusError,
    PlatformError,
    QuotaExceeded,
    RateLimited,
    TransportError,
)

logger = get_logger(__name__)
T = TypeVar("T")

# Failures below the HTTP layer: DNS, dropped or refused connections, timeouts.
_TRANSPORT_ERRORS = (
    ConnectionError,
    TimeoutError,
    socket.timeout,
    socket.gaierror,
    httplib2.ServerNotFoundError,
)


# ============================================================
# Error translation
# ============================================================


def _error_payload(e: HttpError) -> Dict[str, Any]:
    try:
        raw = e.content.decode("utf-8", errors="ignore") if e.content else ""
        data = json.loads(raw) if raw else {}
    except (AttributeError, ValueError):
        return {}
    if not isinstance(data, dict):
        return {}
    err = data.get("error")
    return err if isinstance(err, dict) else {}


def _first_reason(payload: Dict[str, Any]) -> Optional[str]:
    """
    YouTube signals the failure class in error.errors[0].reason
    (rateLimitExceeded, quotaExceeded, ...).
    """
    errors = payload.get("errors") or []
    if errors and isinstance(errors[0], dict):
        reason = errors[0].get("reason")
        return str(reason) if reason else None
    return None


def translate_error(exc: BaseException) -> Optional[PlatformError]:
    """
    Map a googleapiclient / socket failure to the platform taxonomy.
    Returns None for anything that is not a remote-call failure.
    """
    if isinstance(exc, PlatformError):
        return exc

    if isinstance(exc, HttpError):
        status = int(getattr(exc.resp, "status", 0) or 0)
        payload = _error_payload(exc)
        reason = _first_reason(payload)
        message = str(payload.get("message") or getattr(exc, "reason", "") or "")

        if status == 403 and reason in config.RATE_LIMIT_REASONS:
            return RateLimited(status, reason, message)
        if status == 403 and reason in config.QUOTA_REASONS:
            return QuotaExceeded(status, reason, message)
        return HttpStatusError(status, reason, message)

    if isinstance(exc, _TRANSPORT_ERRORS):
        return TransportError(f"{type(exc).__name__}: {exc}")

    return None


# ============================================================
# Client
# ============================================================


class YouTubePlatform(VideoPlatform):
    name = "youtube"

    def __init__(self, youtube: Any, chunk_size: int = config.UPLOAD_CHUNK_SIZE):
        # `youtube` is a googleapiclient Resource built by auth/
        self._youtube = youtube
        self._chunk_size = chunk_size

    def _call(self, fn: Callable[[], T]) -> T:
        try:
            return fn()
        except (HttpError, *_TRANSPORT_ERRORS) as e:
            translated = translate_error(e)
            raise translated from e

    # --------------------------------------------------------
    # Videos
    # --------------------------------------------------------

    def upload_video(
        self,
        metadata: Dict[str, Any],
        stream: BinaryIO,
        size: int,
        mime_type: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        def _op() -> Dict[str, Any]:
            media = MediaIoBaseUpload(
                stream,
                mimetype=mime_type or "application/octet-stream",
                chunksize=self._chunk_size,
                resumable=True,
            )
            request = self._youtube.videos().insert(
                part=",".join(metadata.keys()),
                notifySubscribers=False,
                body=metadata,
                media_body=media,
            )

            response = None
            while response is None:
                status, response = request.next_chunk()
                if status and on_progress:
                    on_progress(status.resumable_progress, status.total_size or size)

            if on_progress:
                on_progress(size, size)
            return response

        response = self._call(_op)
        return response["id"]

    def set_thumbnail(self, video_id: str, data: bytes, mime_type: str) -> None:
        self._call(
            lambda: self._youtube.thumbnails()
            .set(
                videoId=video_id,
                media_body=MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type),
            )
            .execute()
        )

    # --------------------------------------------------------
    # Playlists
    # --------------------------------------------------------

    def list_playlists(self, page_token: Optional[str] = None) -> PlaylistPage:
        resp = self._call(
            lambda: self._youtube.playlists()
            .list(
                part="snippet",
                mine=True,
                maxResults=config.YOUTUBE_BATCH_SIZE,
                pageToken=page_token,
            )
            .execute()
        )

        page = PlaylistPage(next_page_token=resp.get("nextPageToken"))
        for it in resp.get("items", []):
            pid = it.get("id")
            title = (it.get("snippet") or {}).get("title")
            if isinstance(pid, str) and isinstance(title, str):
                page.playlists.append(RemotePlaylist(id=pid, title=title))
        return page

    def insert_playlist(self, title: str, description: str, privacy_status: str) -> str:
        resp = self._call(
            lambda: self._youtube.playlists()
            .insert(
                part="snippet,status",
                body={
                    "snippet": {"title": title, "description": description},
                    "status": {"privacyStatus": privacy_status},
                },
            )
            .execute()
        )
        return resp["id"]

    def insert_playlist_item(
        self, playlist_id: str, video_id: str, position: Optional[int] = None
    ) -> str:
        snippet: Dict[str, Any] = {
            "playlistId": playlist_id,
            "resourceId": {"kind": "youtube#video", "videoId": video_id},
        }
        # Only set position if provided (0-indexed)
        if isinstance(position, int):
            snippet["position"] = position

        resp = self._call(
            lambda: self._youtube.playlistItems()
            .insert(part="snippet", body={"snippet": snippet})
            .execute()
        )
        return resp.get("id", "")

    def set_playlist_image(self, playlist_id: str, data: bytes, mime_type: str) -> None:
        self._call(
            lambda: self._youtube.playlistImages()
            .insert(
                part="snippet",
                body={"snippet": {"playlistId": playlist_id, "type": "hqdefault"}},
                media_body=MediaIoBaseUpload(io.BytesIO(data), mimetype=mime_type),
            )
            .execute()
        )
