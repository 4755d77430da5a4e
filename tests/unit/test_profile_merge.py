"""
Unit tests for the partial profile merge.

Part of HYG-23: Profile persistence
"""
import pytest

from infrastructure.profile_store.merge import deep_merge, merge_into_profiles
from tests.fakes import create_profile

pytestmark = pytest.mark.unit


class TestDeepMerge:
    """Tests for deep_merge() rules."""

    def test_nested_dicts_merge_recursively(self):
        existing = {"active_goal": {"label": "Squat", "current_value": 10, "history": [{"date": "d1", "value": 10}]}}
        merged = deep_merge(existing, {"active_goal": {"current_value": 20}})
        assert merged["active_goal"] == {
            "label": "Squat",
            "current_value": 20,
            "history": [{"date": "d1", "value": 10}],
        }

    def test_non_empty_list_replaces(self):
        merged = deep_merge({"injuries": ["knee"]}, {"injuries": ["back", "wrist"]})
        assert merged["injuries"] == ["back", "wrist"]

    def test_empty_list_and_none_are_ignored(self):
        merged = deep_merge({"injuries": ["knee"], "name": "Sam"}, {"injuries": [], "name": None})
        assert merged == {"injuries": ["knee"], "name": "Sam"}

    def test_scalar_replaces(self):
        assert deep_merge({"body_weight": 80}, {"body_weight": 78.5}) == {"body_weight": 78.5}

    def test_dict_replaces_non_dict(self):
        assert deep_merge({"active_goal": None}, {"active_goal": {"label": "x"}}) == {"active_goal": {"label": "x"}}

    def test_inputs_not_modified(self):
        existing = {"a": {"b": 1}}
        updates = {"a": {"c": 2}}
        deep_merge(existing, updates)
        assert existing == {"a": {"b": 1}}
        assert updates == {"a": {"c": 2}}


class TestMergeIntoProfiles:
    """Tests for merge_into_profiles()."""

    def test_merges_existing_profile(self):
        stored = [create_profile().model_dump(mode="json")]
        updated, merged = merge_into_profiles(stored, {"id": "athlete-1", "last_ai_feedback": "Nice"})
        assert merged.last_ai_feedback == "Nice"
        assert merged.name == "Test Athlete"
        assert updated[0]["last_ai_feedback"] == "Nice"
        assert stored[0]["last_ai_feedback"] is None

    def test_inserts_complete_new_profile(self):
        updated, merged = merge_into_profiles([], {"id": "new", "name": "New Athlete"})
        assert merged.id == "new"
        assert [p["id"] for p in updated] == ["new"]

    def test_incomplete_new_profile_ignored(self):
        stored = [create_profile().model_dump(mode="json")]
        updated, merged = merge_into_profiles(stored, {"id": "ghost", "last_ai_feedback": "x"})
        assert merged is None
        assert updated is stored

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            merge_into_profiles([], {"name": "No Id"})

    def test_invalid_merge_raises(self):
        stored = [create_profile().model_dump(mode="json")]
        with pytest.raises(ValueError):
            merge_into_profiles(stored, {"id": "athlete-1", "session_records": [{"kind": "unknown"}]})
