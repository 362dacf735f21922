import pytest

from modules.storage.models import (
    LEGACY_GLOBAL_KEYS,
    LEGACY_MIGRATION_RULES,
    MigrationReport,
    MigrationRule,
    StoreOutcome,
    StoreStatus,
)


class TestMigrationRules:
    def test_legacy_keys(self):
        """The legacy table covers the four pre-namespacing keys."""
        assert LEGACY_GLOBAL_KEYS == ("savedTrips", "currentTrip", "blogPosts", "userPreferences")

    def test_rules_map_to_same_logical_key(self):
        for rule in LEGACY_MIGRATION_RULES:
            assert rule.global_key == rule.user_key

    def test_rule_is_immutable(self):
        rule = MigrationRule(global_key="a", user_key="b")
        with pytest.raises(Exception):  # Pydantic ValidationError
            rule.global_key = "c"


class TestStoreOutcome:
    def test_ok_property(self):
        assert StoreOutcome(status=StoreStatus.OK).ok
        assert not StoreOutcome(status=StoreStatus.NOT_FOUND).ok

    def test_status_values(self):
        assert StoreStatus.MISSING_USER.value == "missing_user"


class TestMigrationReport:
    def test_changed(self):
        assert not MigrationReport(user_id="u").changed
        assert MigrationReport(user_id="u", migrated=["savedTrips"]).changed
