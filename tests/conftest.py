import io
import logging
import sys
from datetime import datetime, timedelta, timezone

import pytest
from PIL import Image


@pytest.fixture(autouse=True)
def clean_env_and_modules(monkeypatch, tmp_path):
    """
    Ensure tests don't leak env, logger state, or cached env views.
    """

    keys = [
        "UPLOADARR_LOGS_DIR",
        "UPLOADARR_AUTH_DIR",
        "UPLOADARR_DATA_DIR",
        "UPLOADARR_OUT_DIR",
        "UPLOADARR_COMMAND",
        "UPLOADARR_RUN_ID",
        "UPLOADARR_VERBOSE",
        "UPLOADARR_QUIET",
        "UPLOADARR_SHARED_DRIVE_ID",
        "UPLOADARR_STATE_FILE",
        "UPLOADARR_REPORT_FILE",
        "UPLOADARR_INTER_ITEM_DELAY",
        "UPLOADARR_DESCRIPTION_FOOTER",
        "UPLOADARR_PRIVACY_STATUS",
        "LOG_LEVEL",
        "LOG_RETENTION",
    ]
    for k in keys:
        monkeypatch.delenv(k, raising=False)

    # Keep logs and state out of the project tree
    monkeypatch.setenv("UPLOADARR_LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("UPLOADARR_STATE_FILE", str(tmp_path / "data" / "upload-state.json"))
    monkeypatch.setenv("UPLOADARR_REPORT_FILE", str(tmp_path / "out" / "upload-report.json"))

    # Reset logger global state
    import logger.state

    logger.state.INITIALIZED = False
    logger.state.LOG_DIR = None
    logger.state.LOG_FILE_PATH = None

    root = logging.getLogger()
    for h in list(root.handlers):
        root.removeHandler(h)

    # Force re-import of logger modules
    for mod in [
        "logger",
        "logger.state",
        "logger.log_paths",
        "logger.file",
        "logger.console",
        "logger.retention",
    ]:
        sys.modules.pop(mod, None)

    from env import reset_env_caches

    reset_env_caches()


# ------------------------------------------------------------
# Fakes
# ------------------------------------------------------------


class FakeClock:
    """Callable clock; sleep() advances it instead of blocking."""

    def __init__(self, start):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now = self.now + timedelta(seconds=seconds)


def _make_fake_platform():
    from providers.base import PlaylistPage, RemotePlaylist, VideoPlatform

    class FakePlatform(VideoPlatform):
        name = "fake"

        def __init__(self, page_size=50):
            self.calls = []
            self.playlists = []
            self.page_size = page_size
            self.upload_errors = []
            self.thumbnail_error = None
            self.playlist_image_error = None
            self.playlist_item_error = None
            self.uploaded_bytes = []
            self._seq = 0

        def _next_id(self, prefix):
            self._seq += 1
            return f"{prefix}{self._seq}"

        def calls_named(self, name):
            return [c for c in self.calls if c[0] == name]

        def upload_video(self, metadata, stream, size, mime_type, on_progress=None):
            self.calls.append(("upload_video", metadata["snippet"]["title"]))
            data = stream.read()
            if self.upload_errors:
                raise self.upload_errors.pop(0)
            if on_progress:
                on_progress(len(data), size)
            self.uploaded_bytes.append(data)
            return self._next_id("vid")

        def set_thumbnail(self, video_id, data, mime_type):
            self.calls.append(("set_thumbnail", video_id))
            if self.thumbnail_error:
                raise self.thumbnail_error

        def list_playlists(self, page_token=None):
            self.calls.append(("list_playlists", page_token))
            start = int(page_token or 0)
            end = start + self.page_size
            nxt = str(end) if end < len(self.playlists) else None
            return PlaylistPage(list(self.playlists[start:end]), nxt)

        def insert_playlist(self, title, description, privacy_status):
            self.calls.append(("insert_playlist", title))
            pid = self._next_id("PL")
            self.playlists.append(RemotePlaylist(id=pid, title=title))
            return pid

        def insert_playlist_item(self, playlist_id, video_id, position=None):
            self.calls.append(("insert_playlist_item", playlist_id, video_id, position))
            if self.playlist_item_error:
                raise self.playlist_item_error
            return self._next_id("PLI")

        def set_playlist_image(self, playlist_id, data, mime_type):
            self.calls.append(("set_playlist_image", playlist_id))
            if self.playlist_image_error:
                raise self.playlist_image_error

    return FakePlatform


class FakeAssets:
    def __init__(self):
        self.files = {}
        self.json = {}
        self.opened = []

    def add(self, folder, filename, data=b"video-bytes", mime_type="video/mp4"):
        self.files[(folder, filename)] = (data, mime_type)

    def _get(self, folder, filename):
        from providers.drive.client import AssetNotFoundError

        if (folder, filename) not in self.files:
            raise AssetNotFoundError(f'File "{filename}" not found in folder "{folder}"')
        return self.files[(folder, filename)]

    def open_stream(self, folder, filename):
        from providers.drive.client import AssetStream

        data, mime = self._get(folder, filename)
        self.opened.append((folder, filename))
        return AssetStream(io.BytesIO(data), len(data), mime, f"{folder}/{filename}")

    def load_buffer(self, folder, filename):
        from providers.drive.client import AssetBuffer

        data, mime = self._get(folder, filename)
        return AssetBuffer(data, len(data), mime)

    def load_json(self, filename):
        return self.json[filename]


# ------------------------------------------------------------
# Fixtures
# ------------------------------------------------------------


@pytest.fixture
def clock():
    # 10:00 in Los Angeles (PST), well clear of any DST change
    return FakeClock(datetime(2026, 3, 2, 18, 0, tzinfo=timezone.utc))


@pytest.fixture
def platform():
    return _make_fake_platform()()


@pytest.fixture
def assets():
    return FakeAssets()


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / "state" / "upload-state.json"


@pytest.fixture
def store(state_path):
    from pipeline.state import JobStateStore, JsonStateStore

    return JobStateStore(JsonStateStore(state_path))


@pytest.fixture
def ledger(store, clock):
    from pipeline.quota import QuotaLedger

    return QuotaLedger(store, clock=clock)


@pytest.fixture
def png_bytes():
    buf = io.BytesIO()
    Image.new("RGB", (1200, 600), (200, 30, 30)).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def reconciler(platform, store, ledger, clock, png_bytes):
    from pipeline.playlists import PlaylistReconciler

    return PlaylistReconciler(
        platform, store, ledger, fetch_image=lambda url: png_bytes, sleep=clock.sleep
    )


@pytest.fixture
def pipeline(platform, assets, store, ledger, reconciler, clock):
    from pipeline.upload import UploadPipeline

    return UploadPipeline(
        platform, assets, store, ledger, reconciler, sleep=clock.sleep
    )


@pytest.fixture
def make_item(assets):
    """Build a JobItem and register its files with the fake asset source."""
    from manifest import JobItem, SeriesRef

    def _make(
        item_id,
        date="2025-01-05",
        *,
        series_id=None,
        series_title=None,
        position=None,
        image_url=None,
        thumbnail=True,
    ):
        folder = f"{date}-{item_id}"
        files = {"video_original": {"filename": f"{item_id}.mp4"}}
        assets.add(folder, f"{item_id}.mp4", data=f"video:{item_id}".encode())
        if thumbnail:
            files["image_wide"] = {"filename": f"{item_id}-wide.jpg"}
            assets.add(folder, f"{item_id}-wide.jpg", data=b"jpg", mime_type="image/jpeg")

        series = None
        if series_id:
            series = SeriesRef(
                id=series_id,
                title=series_title or series_id.title(),
                position=position,
                image_url=image_url,
            )

        return JobItem(
            id=item_id,
            title=f"Sermon {item_id}",
            date=date,
            folder=folder,
            files=files,
            series=series,
            status="complete",
        )

    return _make
