import pytest

import config
from pipeline.playlists import PlaylistReconciler
from pipeline.run_state import DryRunSummary
from pipeline.state import JobStateStore, JobStatus, JsonStateStore
from pipeline.upload import ItemNotFoundError, UploadPipeline
from providers.errors import HttpStatusError, TransportError


def _complete_all(store, items):
    for item in items:
        store.set(item.id, status=JobStatus.COMPLETE, remote_video_id=f"v-{item.id}")


def test_happy_path_runs_every_step(pipeline, platform, store, ledger, make_item):
    items = [make_item("a", "2025-01-05"), make_item("b", "2025-01-12")]

    summary = pipeline.run(items, {})

    assert summary.uploaded == 2
    assert summary.failed == 0
    assert summary.pending == 0
    for item in items:
        job = store.get(item.id)
        assert job["status"] == "complete"
        assert job["remote_url"] == f"https://youtu.be/{job['remote_video_id']}"
        assert job["thumbnail_uploaded"] is True
        assert job["added_to_collection"] is False
        assert job["started_at"] and job["uploaded_at"]

    assert [c[1] for c in platform.calls_named("upload_video")] == ["Sermon a", "Sermon b"]
    assert ledger.used_today == 2 * (config.UPLOAD_COST + config.THUMBNAIL_COST)


def test_rerun_over_complete_store_is_a_no_op(pipeline, platform, store, clock, state_path, make_item):
    items = [make_item("a"), make_item("b", "2025-02-01")]
    _complete_all(store, items)
    before = state_path.read_bytes()

    summary = pipeline.run(items, {})

    assert platform.calls == []
    assert clock.sleeps == []
    assert summary.uploaded == 0
    assert state_path.read_bytes() == before


def test_crash_after_upload_resumes_without_reupload(
    platform, assets, store, ledger, reconciler, clock, state_path, make_item
):
    item = make_item("a", series_id="s1", position=3)
    store.set_collection("s1", remote_playlist_id="PL-s1", title="S1", thumbnail_set=True)

    crashing = UploadPipeline(platform, assets, store, ledger, reconciler, sleep=clock.sleep)

    def _crash(folder, filename):
        raise SystemExit("killed")

    assets.load_buffer = _crash

    with pytest.raises(SystemExit):
        crashing.run([item], {})

    assert store.status("a") == JobStatus.UPLOADED
    video_id = store.get("a")["remote_video_id"]

    # Fresh process: reload state from disk
    del assets.load_buffer
    store2 = JobStateStore(JsonStateStore(state_path))
    from pipeline.quota import QuotaLedger

    ledger2 = QuotaLedger(store2, clock=clock)
    reconciler2 = PlaylistReconciler(platform, store2, ledger2, sleep=clock.sleep)
    resumed = UploadPipeline(platform, assets, store2, ledger2, reconciler2, sleep=clock.sleep)

    summary = resumed.run([item], {})

    assert summary.uploaded == 1
    assert len(platform.calls_named("upload_video")) == 1
    job = store2.get("a")
    assert job["status"] == "complete"
    assert job["remote_video_id"] == video_id
    assert job["thumbnail_uploaded"] is True
    assert job["added_to_collection"] is True
    assert platform.calls_named("insert_playlist_item") == [
        ("insert_playlist_item", "PL-s1", video_id, 2)
    ]


def test_interrupted_uploading_item_is_retried_from_start(pipeline, platform, store, make_item):
    item = make_item("a")
    store.set("a", status=JobStatus.UPLOADING, started_at="earlier")

    pipeline.run([item], {})

    assert store.status("a") == JobStatus.COMPLETE
    assert len(platform.calls_named("upload_video")) == 1


def test_exhausted_budget_sleeps_until_reset(pipeline, store, ledger, clock, make_item):
    ledger.reset_if_new_day()
    store.quota.used_today = 9999
    store.flush()

    summary = pipeline.run([make_item("a")], {})

    # 10:00 PST → midnight is 14h away, plus the safety margin
    assert clock.sleeps[0] == 14 * 3600 + config.QUOTA_RESET_MARGIN_SEC
    assert summary.quota_waits == 1
    assert store.status("a") == JobStatus.COMPLETE
    assert store.quota.reset_date == "2026-03-03"
    assert store.quota.used_today == config.UPLOAD_COST + config.THUMBNAIL_COST


def test_item_without_thumbnail_still_completes(pipeline, platform, store, make_item):
    item = make_item("a", thumbnail=False)

    pipeline.run([item], {})

    job = store.get("a")
    assert job["status"] == "complete"
    assert job["thumbnail_uploaded"] is False
    assert platform.calls_named("set_thumbnail") == []


def test_thumbnail_failure_is_isolated(pipeline, platform, store, make_item):
    platform.thumbnail_error = HttpStatusError(400, "invalidImage")
    item = make_item("a", series_id="s1", position=1)
    store.set_collection("s1", remote_playlist_id="PL-s1", title="S1")

    pipeline.run([item], {})

    job = store.get("a")
    assert job["status"] == "complete"
    assert job["thumbnail_uploaded"] is False
    assert job["added_to_collection"] is True


def test_playlist_add_failure_is_isolated(pipeline, platform, store, make_item):
    platform.playlist_item_error = HttpStatusError(404, "playlistNotFound")
    item = make_item("a", series_id="s1")
    store.set_collection("s1", remote_playlist_id="PL-s1", title="S1")

    pipeline.run([item], {})

    job = store.get("a")
    assert job["status"] == "complete"
    assert job["added_to_collection"] is False


def test_fatal_upload_error_fails_item_and_continues(pipeline, platform, store, clock, make_item):
    platform.upload_errors = [HttpStatusError(400, "invalidMetadata", "bad title")]
    items = [make_item("a", "2025-01-05"), make_item("b", "2025-01-12")]

    summary = pipeline.run(items, {})

    assert summary.failed == 1
    assert summary.uploaded == 1
    failed = store.get("a")
    assert failed["status"] == "failed"
    assert "400" in failed["error"]
    assert failed["failed_at"]
    assert store.status("b") == JobStatus.COMPLETE
    # no retry backoff, only the inter-item pacing
    assert clock.sleeps == [config.INTER_ITEM_DELAY_SEC, config.INTER_ITEM_DELAY_SEC]


def test_transient_upload_error_retries_with_full_stream(pipeline, platform, clock, store, make_item):
    platform.upload_errors = [TransportError("connection reset")]

    pipeline.run([make_item("a")], {})

    assert store.status("a") == JobStatus.COMPLETE
    assert len(platform.calls_named("upload_video")) == 2
    assert platform.uploaded_bytes == [b"video:a"]
    assert clock.sleeps[0] == config.RETRY_DELAYS_SEC[0]


def test_missing_asset_fails_item(pipeline, assets, store, make_item):
    item = make_item("a")
    assets.files.clear()

    summary = pipeline.run([item], {})

    assert summary.failed == 1
    assert store.status("a") == JobStatus.FAILED


def test_failed_items_are_not_reselected(pipeline, platform, store, make_item):
    store.set("a", status=JobStatus.FAILED, error="earlier")

    summary = pipeline.run([make_item("a")], {})

    assert platform.calls == []
    assert summary.failed == 0


def test_single_item_mode(pipeline, platform, store, make_item):
    items = [make_item("a"), make_item("b", "2025-02-01")]

    pipeline.run(items, {}, single_item_id="b")

    assert store.status("b") == JobStatus.COMPLETE
    assert store.status("a") == JobStatus.PENDING


def test_single_item_unknown_id(pipeline, make_item):
    with pytest.raises(ItemNotFoundError):
        pipeline.run([make_item("a")], {}, single_item_id="zzz")


def test_dry_run_makes_no_calls_and_no_writes(pipeline, platform, store, state_path, make_item):
    items = [make_item("a"), make_item("b", "2025-02-01"), make_item("c", "2025-03-01")]
    store.set("a", status=JobStatus.COMPLETE)
    before = state_path.read_bytes()

    result = pipeline.run(items, {"b": {"speaker": "Jane Doe"}}, dry_run=True)

    assert isinstance(result, DryRunSummary)
    assert platform.calls == []
    assert state_path.read_bytes() == before
    assert result.completed == 1
    assert result.pending == 2
    assert result.videos_per_day == 5
    assert result.estimated_days == 1
    assert [e.item_id for e in result.entries] == ["b", "c"]
    assert result.entries[0].speaker == "Jane Doe"
    assert result.entries[0].thumbnail == "b-wide.jpg"


def test_retry_playlist_adds(pipeline, platform, store, make_item):
    items = [
        make_item("a", series_id="s1", position=2),
        make_item("b", "2025-02-01", series_id="s1"),
        make_item("c", "2025-03-01"),
    ]
    store.set_collection("s1", remote_playlist_id="PL-s1", title="S1")
    store.set("a", status=JobStatus.COMPLETE, remote_video_id="va", added_to_collection=False)
    store.set("b", status=JobStatus.COMPLETE, remote_video_id="vb", added_to_collection=True)
    store.set("c", status=JobStatus.COMPLETE, remote_video_id="vc", added_to_collection=False)

    summary = pipeline.retry_playlist_adds(items)

    assert summary.attempted == 1
    assert summary.added == 1
    assert store.get("a")["added_to_collection"] is True
    assert platform.calls_named("insert_playlist_item") == [
        ("insert_playlist_item", "PL-s1", "va", 1)
    ]


def test_playlist_skipped_for_quota_is_created_after_reset(
    pipeline, reconciler, platform, store, ledger, make_item
):
    from pipeline.playlists import collections_from_items

    items = [make_item("a", series_id="s1", position=1)]
    ledger.reset_if_new_day()
    store.quota.used_today = config.DAILY_QUOTA - config.LIST_COST
    store.flush()

    first = reconciler.reconcile(collections_from_items(items))
    assert first.skipped_quota == 1
    assert store.collection("s1") is None

    summary = pipeline.run(items, {})

    assert summary.quota_waits == 1
    playlist_id = store.collection("s1")["remote_playlist_id"]
    job = store.get("a")
    assert job["status"] == "complete"
    assert job["added_to_collection"] is True
    assert platform.calls_named("insert_playlist_item") == [
        ("insert_playlist_item", playlist_id, job["remote_video_id"], 0)
    ]
