import json
import logging

import pytest

from shared.kv_store import InMemoryKeyValueStore
from modules.storage.models import LEGACY_GLOBAL_KEYS, StoreStatus
from modules.storage.service import UserStorage, get_user_storage


class TestDeriveKey:
    def test_derives_namespaced_key(self, storage):
        """Should prefix the logical key with the user id."""
        assert storage.derive_key("savedTrips", "abc") == "user_abc_savedTrips"

    @pytest.mark.parametrize("user_id", [None, ""])
    def test_missing_user_returns_none(self, storage, user_id):
        """Should return None instead of raising when no user id is given."""
        assert storage.derive_key("savedTrips", user_id) is None


class TestSetAndGet:
    def test_round_trip(self, storage):
        """Should return a value equal to the one stored."""
        trip = {"destination": "Goa", "budget": {"food": 1200}, "days": [1, 2, 3]}
        storage.set("savedTrips", [trip], "user-a")
        assert storage.get("savedTrips", "user-a", []) == [trip]

    def test_writes_json_under_derived_key(self, storage, kv):
        """Should store JSON text under user_<id>_<key>."""
        storage.set("userPreferences", {"theme": "dark"}, "user-a")
        assert json.loads(kv.get_item("user_user-a_userPreferences")) == {"theme": "dark"}

    def test_users_are_isolated(self, storage):
        """A value written for one user must not be visible to another."""
        storage.set("savedTrips", ["trip"], "user-a")
        assert storage.get("savedTrips", "user-b", "default") == "default"

    def test_set_without_user_is_noop(self, storage, kv):
        """Should not write anything when the user id is missing."""
        storage.set("savedTrips", ["trip"], None)
        assert len(kv) == 0

    def test_get_without_user_returns_default(self, storage):
        """Should return the default when the user id is missing."""
        assert storage.get("savedTrips", None, []) == []

    def test_get_absent_key_returns_default(self, storage):
        """Should return the default for a key never written."""
        assert storage.get("currentTrip", "user-a", None) is None

    def test_get_corrupt_value_returns_default(self, storage, kv):
        """Should return the default when stored text is not JSON."""
        kv.set_item("user_user-a_savedTrips", "{not json")
        assert storage.get("savedTrips", "user-a", []) == []

    def test_set_unserializable_value_is_noop(self, storage, kv):
        """Should log and skip values JSON cannot represent."""
        storage.set("savedTrips", {"when": object()}, "user-a")
        assert kv.get_item("user_user-a_savedTrips") is None

    def test_set_cyclic_value_is_noop(self, storage, kv):
        """Should skip values containing cycles."""
        cyclic = []
        cyclic.append(cyclic)
        storage.set("savedTrips", cyclic, "user-a")
        assert len(kv) == 0

    def test_set_nan_is_noop(self, storage, kv):
        """Should reject NaN, which has no JSON representation."""
        storage.set("budget", float("nan"), "user-a")
        assert len(kv) == 0

    def test_set_logs_warning_on_failure(self, storage, caplog):
        """Should log a warning instead of raising."""
        with caplog.at_level(logging.WARNING, logger="modules.storage.service"):
            storage.set("savedTrips", ["trip"], None)
        assert "No user ID provided for savedTrips" in caplog.text

    def test_set_overwrites_previous_value(self, storage):
        """Last write wins for the same key."""
        storage.set("currentTrip", {"v": 1}, "user-a")
        storage.set("currentTrip", {"v": 2}, "user-a")
        assert storage.get("currentTrip", "user-a") == {"v": 2}

    def test_quota_exceeded_is_noop(self):
        """Should swallow quota errors and keep the previous value."""
        kv = InMemoryKeyValueStore(max_bytes=64)
        storage = UserStorage(kv)
        storage.set("k", "small", "u")
        storage.set("k", "x" * 200, "u")
        assert storage.get("k", "u") == "small"


class TestOutcomes:
    def test_try_set_ok(self, storage):
        outcome = storage.try_set("savedTrips", [], "user-a")
        assert outcome.ok
        assert outcome.key == "user_user-a_savedTrips"

    def test_try_set_missing_user(self, storage):
        outcome = storage.try_set("savedTrips", [], None)
        assert outcome.status == StoreStatus.MISSING_USER
        assert outcome.key is None
        assert "savedTrips" in outcome.reason

    def test_try_set_serialization_error(self, storage):
        outcome = storage.try_set("savedTrips", {1, 2}, "user-a")
        assert outcome.status == StoreStatus.SERIALIZATION_ERROR

    def test_try_set_storage_error(self):
        storage = UserStorage(InMemoryKeyValueStore(max_bytes=10))
        outcome = storage.try_set("savedTrips", ["a long value"], "user-a")
        assert outcome.status == StoreStatus.STORAGE_ERROR

    def test_try_get_not_found(self, storage):
        assert storage.try_get("savedTrips", "user-a").status == StoreStatus.NOT_FOUND

    def test_try_get_deserialization_error(self, storage, kv):
        kv.set_item("user_user-a_savedTrips", "[1,")
        outcome = storage.try_get("savedTrips", "user-a")
        assert outcome.status == StoreStatus.DESERIALIZATION_ERROR
        assert outcome.value is None

    def test_try_get_stored_null(self, storage, kv):
        """A stored JSON null is a successful read of None."""
        kv.set_item("user_user-a_currentTrip", "null")
        outcome = storage.try_get("currentTrip", "user-a")
        assert outcome.ok
        assert outcome.value is None

    def test_try_remove_reports_not_found(self, storage):
        assert storage.try_remove("savedTrips", "user-a").status == StoreStatus.NOT_FOUND


class TestRemove:
    def test_remove_deletes_key(self, storage, kv):
        storage.set("currentTrip", {"id": "1"}, "user-a")
        storage.remove("currentTrip", "user-a")
        assert kv.get_item("user_user-a_currentTrip") is None

    def test_remove_only_affects_own_user(self, storage):
        storage.set("currentTrip", {"id": "1"}, "user-a")
        storage.set("currentTrip", {"id": "2"}, "user-b")
        storage.remove("currentTrip", "user-a")
        assert storage.get("currentTrip", "user-b") == {"id": "2"}

    def test_remove_without_user_is_noop(self, storage, kv):
        kv.set_item("currentTrip", "{}")
        storage.remove("currentTrip", None)
        assert kv.get_item("currentTrip") == "{}"

    def test_remove_absent_key_is_noop(self, storage):
        storage.remove("currentTrip", "user-a")


class TestClearAllForUser:
    def test_clears_only_matching_prefix(self, storage, kv):
        """Should remove the user's keys and leave everything else."""
        storage.set("savedTrips", [], "a")
        storage.set("currentTrip", {}, "a")
        storage.set("savedTrips", [], "ab")
        kv.set_item("savedTrips", "[]")

        removed = storage.clear_all_for_user("a")

        assert removed == 2
        assert sorted(kv.keys()) == ["savedTrips", "user_ab_savedTrips"]

    def test_zero_matches_returns_zero(self, storage):
        assert storage.clear_all_for_user("nobody") == 0

    def test_missing_user_returns_zero(self, storage, kv):
        storage.set("savedTrips", [], "a")
        assert storage.clear_all_for_user(None) == 0
        assert len(kv) == 1

    def test_list_user_keys(self, storage):
        storage.set("savedTrips", [], "a")
        storage.set("currentTrip", {}, "a")
        storage.set("savedTrips", [], "b")
        assert storage.list_user_keys("a") == ["currentTrip", "savedTrips"]
        assert storage.list_user_keys(None) == []


class TestClearGlobalKeys:
    def test_removes_all_legacy_keys(self, storage, kv):
        for key in LEGACY_GLOBAL_KEYS:
            kv.set_item(key, "[]")
        kv.set_item("unrelated", "1")

        assert storage.clear_global_keys() == 4
        assert kv.keys() == ["unrelated"]

    def test_is_idempotent(self, storage, kv):
        kv.set_item("blogPosts", "[]")
        assert storage.clear_global_keys() == 1
        assert storage.clear_global_keys() == 0

    def test_leaves_user_namespaces_alone(self, storage):
        storage.set("savedTrips", ["mine"], "a")
        storage.clear_global_keys()
        assert storage.get("savedTrips", "a") == ["mine"]


class TestMigrateGlobalToUser:
    def test_moves_global_records_into_namespace(self, storage, kv):
        kv.set_item("savedTrips", json.dumps([{"id": "1"}]))
        kv.set_item("userPreferences", json.dumps({"units": "km"}))

        report = storage.migrate_global_to_user("u")

        assert sorted(report.migrated) == ["savedTrips", "userPreferences"]
        assert storage.get("savedTrips", "u") == [{"id": "1"}]
        assert storage.get("userPreferences", "u") == {"units": "km"}
        assert all(kv.get_item(k) is None for k in LEGACY_GLOBAL_KEYS)

    def test_overwrites_existing_user_value(self, storage, kv):
        """Migration is last-write-wins over per-user data."""
        storage.set("savedTrips", ["P"], "u")
        kv.set_item("savedTrips", json.dumps(["G"]))

        storage.migrate_global_to_user("u")

        assert storage.get("savedTrips", "u") == ["G"]
        assert kv.get_item("savedTrips") is None

    def test_is_idempotent(self, storage, kv):
        kv.set_item("currentTrip", json.dumps({"id": "t"}))

        storage.migrate_global_to_user("u")
        snapshot = dict(kv.items)
        second = storage.migrate_global_to_user("u")

        assert kv.items == snapshot
        assert second.migrated == []
        assert all(kv.get_item(k) is None for k in LEGACY_GLOBAL_KEYS)

    def test_corrupt_key_skipped_siblings_migrate(self, storage, kv):
        kv.set_item("savedTrips", "{broken")
        kv.set_item("blogPosts", json.dumps([{"title": "Hampi"}]))

        report = storage.migrate_global_to_user("u")

        assert report.skipped == ["savedTrips"]
        assert report.migrated == ["blogPosts"]
        assert storage.get("blogPosts", "u") == [{"title": "Hampi"}]
        assert storage.get("savedTrips", "u", "none") == "none"

    def test_migrates_json_null(self, storage, kv):
        """A stored null is still a record and is migrated."""
        kv.set_item("currentTrip", "null")
        report = storage.migrate_global_to_user("u")
        assert report.migrated == ["currentTrip"]
        assert kv.get_item("user_u_currentTrip") == "null"
        assert kv.get_item("currentTrip") is None

    def test_missing_user_is_noop(self, storage, kv):
        kv.set_item("savedTrips", "[]")
        report = storage.migrate_global_to_user(None)
        assert not report.changed
        assert kv.get_item("savedTrips") == "[]"

    def test_failed_write_keeps_global_copy(self, kv):
        storage = UserStorage(InMemoryKeyValueStore(max_bytes=40))
        storage.kv.set_item("savedTrips", json.dumps(["x" * 5]))

        report = storage.migrate_global_to_user("a-rather-long-user-id")

        assert report.skipped == ["savedTrips"]
        assert storage.kv.get_item("savedTrips") is not None


class TestGetUserStorage:
    def test_returns_singleton(self):
        assert get_user_storage() is get_user_storage()
