import json

import pytest

from pipeline.state import (
    JobStateStore,
    JobStatus,
    JsonStateStore,
    RootState,
    StateError,
)


def test_missing_file_starts_fresh(tmp_path):
    store = JobStateStore(JsonStateStore(tmp_path / "nope.json"))

    assert store.quota.used_today == 0
    assert store.jobs() == {}
    assert store.collections() == {}


def test_absent_job_reads_as_pending(store):
    assert store.get("unknown") == {"status": "pending"}
    assert store.status("unknown") == JobStatus.PENDING


def test_set_merges_and_flushes(store, state_path):
    store.set("a", status=JobStatus.UPLOADING, started_at="t0")
    store.set("a", status=JobStatus.UPLOADED, remote_video_id="vid1")

    data = json.loads(state_path.read_text(encoding="utf-8"))
    assert data["videos"]["a"] == {
        "status": "uploaded",
        "started_at": "t0",
        "remote_video_id": "vid1",
    }
    assert data["version"] == 1
    assert data["updated_at"]


def test_reload_sees_every_flushed_mutation(store, state_path):
    store.set("a", status=JobStatus.COMPLETE, thumbnail_uploaded=False)
    store.set_collection("s1", remote_playlist_id="PL1", title="Series", thumbnail_set=True)

    reloaded = JobStateStore(JsonStateStore(state_path))
    assert reloaded.status("a") == JobStatus.COMPLETE
    assert reloaded.collection("s1")["remote_playlist_id"] == "PL1"


def test_get_returns_a_copy(store):
    store.set("a", status="pending")
    job = store.get("a")
    job["status"] = "complete"

    assert store.status("a") == JobStatus.PENDING


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "state.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(StateError):
        JobStateStore(JsonStateStore(path))


def test_malformed_sections_raise():
    with pytest.raises(StateError):
        RootState.from_dict({"videos": ["a", "b"]})


def test_unknown_status_reads_as_pending(store):
    store.set("a", status="weird")
    assert store.status("a") == JobStatus.PENDING


def test_collection_binding_never_changes(store):
    store.set_collection("s1", remote_playlist_id="PL1", title="Series")
    store.set_collection("s1", remote_playlist_id="PL1", thumbnail_set=True)

    with pytest.raises(StateError):
        store.set_collection("s1", remote_playlist_id="PL2")

    assert store.collection("s1")["remote_playlist_id"] == "PL1"
    assert store.collection("s1")["thumbnail_set"] is True


def test_save_leaves_no_temp_file(store, state_path):
    store.set("a", status="pending")

    assert state_path.exists()
    assert not state_path.with_suffix(".json.tmp").exists()
