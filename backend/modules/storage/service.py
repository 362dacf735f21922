"""
User-scoped storage service implementation.

Partitions the durable key-value store by user id. Every operation degrades
to a logged no-op instead of raising, so losing local persistence never stops
trip planning or blogging from working in memory.
"""

import json
import logging
from typing import Any, Optional

from shared.exceptions import StorageUnavailableError
from shared.kv_store import IKeyValueStore, get_kv_store

from .exceptions import DeserializationError, MissingUserIdError, SerializationError
from .interfaces import IUserStorage
from .models import (
    LEGACY_GLOBAL_KEYS,
    LEGACY_MIGRATION_RULES,
    USER_KEY_PREFIX,
    MigrationReport,
    StoreOutcome,
    StoreStatus,
)

logger = logging.getLogger(__name__)

_ABSENT = object()
_CORRUPT = object()


def _user_prefix(user_id: str) -> str:
    return f"{USER_KEY_PREFIX}{user_id}_"


def _serialize(logical_key: str, value: Any) -> str:
    try:
        return json.dumps(value, allow_nan=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(logical_key, str(e)) from e


def _deserialize(physical_key: str, raw: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError as e:
        raise DeserializationError(physical_key, str(e)) from e


class UserStorage:
    """
    Namespaced get/set/remove over a durable key-value store.

    The service holds no identity state: callers pass the active user id on
    every call.
    """

    def __init__(self, kv: Optional[IKeyValueStore] = None):
        """
        Initialize the storage service.

        Args:
            kv: Optional backing store. Defaults to the process-wide store.
        """
        self._kv = kv if kv is not None else get_kv_store()

    @property
    def kv(self) -> IKeyValueStore:
        return self._kv

    def derive_key(self, logical_key: str, user_id: Optional[str]) -> Optional[str]:
        if not user_id:
            return None
        return f"{_user_prefix(user_id)}{logical_key}"

    # Outcome-returning operations

    def try_set(self, logical_key: str, value: Any, user_id: Optional[str]) -> StoreOutcome:
        key = self.derive_key(logical_key, user_id)
        if key is None:
            return self._missing_user(logical_key)

        try:
            raw = _serialize(logical_key, value)
        except SerializationError as e:
            return StoreOutcome(status=StoreStatus.SERIALIZATION_ERROR, key=key, reason=e.message)

        try:
            self._kv.set_item(key, raw)
        except StorageUnavailableError as e:
            return StoreOutcome(status=StoreStatus.STORAGE_ERROR, key=key, reason=e.message)

        return StoreOutcome(status=StoreStatus.OK, key=key, value=value)

    def try_get(self, logical_key: str, user_id: Optional[str]) -> StoreOutcome:
        key = self.derive_key(logical_key, user_id)
        if key is None:
            return self._missing_user(logical_key)

        try:
            raw = self._kv.get_item(key)
        except StorageUnavailableError as e:
            return StoreOutcome(status=StoreStatus.STORAGE_ERROR, key=key, reason=e.message)

        if not raw:
            return StoreOutcome(status=StoreStatus.NOT_FOUND, key=key)

        try:
            value = _deserialize(key, raw)
        except DeserializationError as e:
            return StoreOutcome(status=StoreStatus.DESERIALIZATION_ERROR, key=key, reason=e.message)

        return StoreOutcome(status=StoreStatus.OK, key=key, value=value)

    def try_remove(self, logical_key: str, user_id: Optional[str]) -> StoreOutcome:
        key = self.derive_key(logical_key, user_id)
        if key is None:
            return self._missing_user(logical_key)

        try:
            if self._kv.get_item(key) is None:
                return StoreOutcome(status=StoreStatus.NOT_FOUND, key=key)
            self._kv.remove_item(key)
        except StorageUnavailableError as e:
            return StoreOutcome(status=StoreStatus.STORAGE_ERROR, key=key, reason=e.message)

        return StoreOutcome(status=StoreStatus.OK, key=key)

    # Plain façade for feature code

    def set(self, logical_key: str, value: Any, user_id: Optional[str]) -> None:
        outcome = self.try_set(logical_key, value, user_id)
        if not outcome.ok:
            logger.warning(f"Not saving {logical_key}: {outcome.reason}")

    def get(self, logical_key: str, user_id: Optional[str], default: Any = None) -> Any:
        outcome = self.try_get(logical_key, user_id)
        if outcome.ok:
            return outcome.value
        if outcome.status != StoreStatus.NOT_FOUND:
            logger.warning(f"Not loading {logical_key}: {outcome.reason}")
        return default

    def remove(self, logical_key: str, user_id: Optional[str]) -> None:
        outcome = self.try_remove(logical_key, user_id)
        if outcome.status not in (StoreStatus.OK, StoreStatus.NOT_FOUND):
            logger.warning(f"Not removing {logical_key}: {outcome.reason}")

    # Bulk operations

    def list_user_keys(self, user_id: Optional[str]) -> list[str]:
        """Logical keys currently stored for a user, sorted."""
        if not user_id:
            return []
        prefix = _user_prefix(user_id)
        try:
            keys = self._kv.keys()
        except StorageUnavailableError as e:
            logger.warning(f"Cannot list keys for user {user_id}: {e.message}")
            return []
        return sorted(k[len(prefix):] for k in keys if k.startswith(prefix))

    def clear_all_for_user(self, user_id: Optional[str]) -> int:
        if not user_id:
            logger.warning("No user ID provided for clear_all_for_user")
            return 0

        prefix = _user_prefix(user_id)
        removed = 0
        try:
            # Snapshot first; removal mutates the key set.
            to_remove = [k for k in self._kv.keys() if k.startswith(prefix)]
            for key in to_remove:
                self._kv.remove_item(key)
                removed += 1
        except StorageUnavailableError as e:
            logger.warning(f"Error clearing data for user {user_id}: {e.message}")

        logger.info(f"Cleared {removed} items for user {user_id}")
        return removed

    def clear_global_keys(self) -> int:
        removed = 0
        for key in LEGACY_GLOBAL_KEYS:
            try:
                if self._kv.get_item(key) is None:
                    continue
                self._kv.remove_item(key)
            except StorageUnavailableError as e:
                logger.warning(f"Error removing global key {key}: {e.message}")
                continue
            removed += 1
            logger.debug(f"Removed global key: {key}")
        return removed

    def migrate_global_to_user(self, user_id: Optional[str]) -> MigrationReport:
        report = MigrationReport(user_id=user_id or None)
        if not user_id:
            return report

        for rule in LEGACY_MIGRATION_RULES:
            value = self._read_global(rule.global_key)
            if value is _CORRUPT:
                report.skipped.append(rule.global_key)
                continue
            if value is _ABSENT:
                continue

            outcome = self.try_set(rule.user_key, value, user_id)
            if not outcome.ok:
                # Keep the global copy so the data is not lost.
                logger.warning(f"Could not migrate {rule.global_key}: {outcome.reason}")
                report.skipped.append(rule.global_key)
                continue

            try:
                self._kv.remove_item(rule.global_key)
            except StorageUnavailableError as e:
                logger.warning(f"Migrated {rule.global_key} but could not remove it: {e.message}")
            report.migrated.append(rule.global_key)
            logger.info(f"Migrated {rule.global_key} to user-specific storage")

        return report

    def _read_global(self, global_key: str) -> Any:
        """
        Decode a legacy global record.

        Returns _ABSENT when the key is not stored and _CORRUPT when it cannot
        be read or parsed.
        """
        try:
            raw = self._kv.get_item(global_key)
        except StorageUnavailableError as e:
            logger.warning(f"Cannot read global key {global_key}: {e.message}")
            return _CORRUPT
        if not raw:
            return _ABSENT
        try:
            return _deserialize(global_key, raw)
        except DeserializationError as e:
            logger.warning(f"Skipping corrupt global key: {e.message}")
            return _CORRUPT

    @staticmethod
    def _missing_user(logical_key: str) -> StoreOutcome:
        return StoreOutcome(
            status=StoreStatus.MISSING_USER,
            reason=MissingUserIdError(logical_key).message,
        )


# Verify the implementation satisfies the interface
def _verify_interface():
    """Type check that UserStorage implements IUserStorage."""
    service: IUserStorage = UserStorage()
    return service


# Module-level instance getter
_service_instance: Optional[UserStorage] = None


def get_user_storage() -> UserStorage:
    """Get the user storage singleton."""
    global _service_instance
    if _service_instance is None:
        _service_instance = UserStorage()
    return _service_instance


def reset_user_storage() -> None:
    """Reset the user storage singleton (for testing)."""
    global _service_instance
    _service_instance = None
