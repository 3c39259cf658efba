from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, BinaryIO, Callable, Dict, List, Optional

ProgressCallback = Callable[[int, int], None]


@dataclass(frozen=True)
class RemotePlaylist:
    id: str
    title: str


@dataclass
class PlaylistPage:
    playlists: List[RemotePlaylist] = field(default_factory=list)
    next_page_token: Optional[str] = None


class VideoPlatform(ABC):
    """
    Abstract interface for the video-hosting platform.

    Every method raises only `providers.errors` exceptions on failure.
    """

    name: str

    @abstractmethod
    def upload_video(
        self,
        metadata: Dict[str, Any],
        stream: BinaryIO,
        size: int,
        mime_type: str,
        on_progress: Optional[ProgressCallback] = None,
    ) -> str:
        """Upload a video; returns the remote video id."""
        raise NotImplementedError

    @abstractmethod
    def set_thumbnail(self, video_id: str, data: bytes, mime_type: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def list_playlists(self, page_token: Optional[str] = None) -> PlaylistPage:
        """One page of the account's own playlists."""
        raise NotImplementedError

    @abstractmethod
    def insert_playlist(self, title: str, description: str, privacy_status: str) -> str:
        """Create a playlist; returns the remote playlist id."""
        raise NotImplementedError

    @abstractmethod
    def insert_playlist_item(
        self, playlist_id: str, video_id: str, position: Optional[int] = None
    ) -> str:
        """Add a video to a playlist; returns the playlist item id."""
        raise NotImplementedError

    @abstractmethod
    def set_playlist_image(self, playlist_id: str, data: bytes, mime_type: str) -> None:
        raise NotImplementedError

    @staticmethod
    def video_url(video_id: str) -> str:
        return f"https://youtu.be/{video_id}"
