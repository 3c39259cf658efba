"""
state.py

Durable upload state: one JSON document holding quota, per-video job state
and per-series playlist state.

Every mutation rewrites the whole document before returning, so a process
killed at any point resumes from the last flushed status.
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from logger import get_logger

logger = get_logger(__name__)

STATE_VERSION = 1


class StateError(RuntimeError):
    pass


class JobStatus(str, Enum):
    PENDING = "pending"
    UPLOADING = "uploading"
    UPLOADED = "uploaded"
    COMPLETE = "complete"
    FAILED = "failed"

    @classmethod
    def from_string(cls, value: Any) -> JobStatus:
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.PENDING


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


# ----------------------------
# Root document
# ----------------------------


@dataclass
class QuotaState:
    used_today: int = 0
    reset_date: Optional[str] = None


@dataclass
class RootState:
    quota: QuotaState = field(default_factory=QuotaState)
    videos: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    playlists: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    started_at: Optional[str] = None
    updated_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": STATE_VERSION,
            "started_at": self.started_at,
            "updated_at": self.updated_at,
            "quota": {
                "used_today": self.quota.used_today,
                "reset_date": self.quota.reset_date,
            },
            "videos": self.videos,
            "playlists": self.playlists,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RootState:
        if not isinstance(data, dict):
            raise StateError("State document is not a JSON object")

        quota = data.get("quota") or {}
        videos = data.get("videos") or {}
        playlists = data.get("playlists") or {}
        if not isinstance(quota, dict) or not isinstance(videos, dict):
            raise StateError("State document has malformed quota/videos sections")
        if not isinstance(playlists, dict):
            raise StateError("State document has a malformed playlists section")

        return cls(
            quota=QuotaState(
                used_today=max(0, int(quota.get("used_today") or 0)),
                reset_date=quota.get("reset_date"),
            ),
            videos={str(k): dict(v) for k, v in videos.items() if isinstance(v, dict)},
            playlists={
                str(k): dict(v) for k, v in playlists.items() if isinstance(v, dict)
            },
            started_at=data.get("started_at"),
            updated_at=data.get("updated_at"),
        )


# ----------------------------
# Persistence backends
# ----------------------------


class StateStore(ABC):
    @abstractmethod
    def load(self) -> RootState:
        raise NotImplementedError

    @abstractmethod
    def save(self, state: RootState) -> None:
        raise NotImplementedError


class JsonStateStore(StateStore):
    """
    Single local JSON file, written to a temp file then renamed over the
    target so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def load(self) -> RootState:
        if not self.path.exists():
            logger.info("No existing state found, starting fresh")
            return RootState()

        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            # Starting over would re-upload everything; make the operator look.
            raise StateError(f"Cannot read state file {self.path}: {e}") from e

        return RootState.from_dict(data)

    def save(self, state: RootState) -> None:
        state.updated_at = utc_now_iso()
        state.started_at = state.started_at or state.updated_at

        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(state.to_dict(), f, indent=2, ensure_ascii=False, sort_keys=True)
        tmp.replace(self.path)


# ----------------------------
# Job / collection accessors
# ----------------------------


class JobStateStore:
    """
    In-memory view of the root document with write-through persistence.

    This object is the only path by which pipeline code mutates durable state.
    """

    def __init__(self, backend: StateStore, root: Optional[RootState] = None):
        self._backend = backend
        self._root = root if root is not None else backend.load()

    @property
    def root(self) -> RootState:
        return self._root

    @property
    def quota(self) -> QuotaState:
        return self._root.quota

    def flush(self) -> None:
        self._backend.save(self._root)

    # --------------------------------------------------------
    # Jobs
    # --------------------------------------------------------

    def get(self, job_id: str) -> Dict[str, Any]:
        existing = self._root.videos.get(job_id)
        if not existing:
            return {"status": JobStatus.PENDING.value}
        return dict(existing)

    def status(self, job_id: str) -> JobStatus:
        return JobStatus.from_string(self.get(job_id).get("status"))

    def set(self, job_id: str, **partial: Any) -> None:
        if "status" in partial and isinstance(partial["status"], JobStatus):
            partial["status"] = partial["status"].value

        merged = dict(self._root.videos.get(job_id) or {})
        merged.update(partial)
        self._root.videos[job_id] = merged
        self.flush()

    def jobs(self) -> Dict[str, Dict[str, Any]]:
        return {k: dict(v) for k, v in self._root.videos.items()}

    # --------------------------------------------------------
    # Collections (series → playlist)
    # --------------------------------------------------------

    def collection(self, collection_id: str) -> Optional[Dict[str, Any]]:
        existing = self._root.playlists.get(collection_id)
        return dict(existing) if existing else None

    def set_collection(self, collection_id: str, **partial: Any) -> None:
        merged = dict(self._root.playlists.get(collection_id) or {})

        current_id = merged.get("remote_playlist_id")
        new_id = partial.get("remote_playlist_id")
        if current_id and new_id and new_id != current_id:
            raise StateError(
                f"Collection {collection_id} is already bound to playlist "
                f"{current_id}; refusing to rebind to {new_id}"
            )

        merged.update(partial)
        self._root.playlists[collection_id] = merged
        self.flush()

    def collections(self) -> Dict[str, Dict[str, Any]]:
        return {k: dict(v) for k, v in self._root.playlists.items()}
