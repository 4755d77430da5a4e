"""
Tests for the JSON file profile store.

Part of HYG-23: Profile persistence

These tests use pytest's tmp_path, so they touch the local file system but
nothing else.
"""
import json

import pytest

from application.exceptions import ProfileNotFoundError, ProfileStoreError
from infrastructure.profile_store import JsonProfileStore
from tests.fakes import create_profile

pytestmark = pytest.mark.unit


@pytest.fixture
def path(tmp_path):
    return tmp_path / "data" / "profiles.json"


@pytest.fixture
def store(path):
    path.parent.mkdir(parents=True)
    path.write_text(json.dumps([create_profile().model_dump(mode="json")]), encoding="utf-8")
    return JsonProfileStore(path)


class TestRead:
    """Tests for loading profiles."""

    def test_load(self, store):
        profile = store.load("athlete-1")
        assert profile.name == "Test Athlete"
        assert profile.active_goal.current_value == 40

    def test_load_unknown(self, store):
        with pytest.raises(ProfileNotFoundError):
            store.load("nobody")

    def test_missing_file_is_empty(self, tmp_path):
        store = JsonProfileStore(tmp_path / "absent.json")
        assert store.load_all() == []

    @pytest.mark.parametrize("content", ["{not json", '{"id": "athlete-1"}'])
    def test_unreadable_file_is_empty(self, tmp_path, content):
        path = tmp_path / "profiles.json"
        path.write_text(content, encoding="utf-8")
        assert JsonProfileStore(path).load_all() == []

    def test_invalid_entries_skipped(self, tmp_path):
        path = tmp_path / "profiles.json"
        path.write_text(json.dumps([{"id": ""}, {"id": "ok", "name": "Ok"}, "junk"]), encoding="utf-8")
        assert [p.id for p in JsonProfileStore(path).load_all()] == ["ok"]


class TestUpsert:
    """Tests for merging and writing profiles."""

    def test_partial_merge_persists(self, store, path):
        profiles = store.upsert({"id": "athlete-1", "last_ai_feedback": "Deload next week"})

        assert profiles[0].last_ai_feedback == "Deload next week"
        saved = json.loads(path.read_text(encoding="utf-8"))
        assert saved[0]["last_ai_feedback"] == "Deload next week"
        assert saved[0]["name"] == "Test Athlete"
        assert saved[0]["injuries"] == ["left shoulder"]

    def test_new_profile_creates_file(self, path):
        store = JsonProfileStore(path)
        profiles = store.upsert({"id": "new", "name": "Newcomer"})
        assert [p.id for p in profiles] == ["new"]
        assert path.exists()

    def test_incomplete_new_profile_raises(self, path):
        store = JsonProfileStore(path)
        with pytest.raises(ProfileStoreError):
            store.upsert({"id": "ghost"})
        assert not path.exists()

    def test_partial_for_removed_profile_raises(self, store, path):
        path.write_text("[]", encoding="utf-8")
        with pytest.raises(ProfileStoreError):
            store.upsert({"id": "athlete-1", "last_ai_feedback": "Deload next week"})
        assert json.loads(path.read_text(encoding="utf-8")) == []

    def test_no_temp_files_left(self, store, path):
        store.upsert({"id": "athlete-1", "body_weight": 79})
        assert [p.name for p in path.parent.iterdir()] == ["profiles.json"]

    def test_invalid_merge_raises(self, store):
        with pytest.raises(ProfileStoreError):
            store.upsert({"id": "athlete-1", "session_records": [{"kind": "unknown"}]})

    def test_missing_id_raises(self, store):
        with pytest.raises(ProfileStoreError):
            store.upsert({"name": "Anonymous"})

    def test_write_failure_raises(self, tmp_path):
        store = JsonProfileStore(tmp_path)
        with pytest.raises(ProfileStoreError):
            store.upsert({"id": "new", "name": "Newcomer"})
