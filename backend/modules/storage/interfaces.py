"""
Storage module interface.

Feature modules should depend on IUserStorage, not the concrete implementation.
Every method is safe to call without a user id: it simply does nothing.
"""

from typing import Any, Optional, Protocol, runtime_checkable

from shared.kv_store import IKeyValueStore

from .models import MigrationReport, StoreOutcome


@runtime_checkable
class IUserStorage(Protocol):
    """
    Interface for user-scoped local persistence.

    Implementations partition data by user id and never raise on storage,
    serialization or missing-identity problems.
    """

    @property
    def kv(self) -> IKeyValueStore:
        """The underlying durable store."""
        ...

    def derive_key(self, logical_key: str, user_id: Optional[str]) -> Optional[str]:
        """
        Build the physical key for a logical key in a user's namespace.

        Returns:
            "user_<user_id>_<logical_key>", or None when user_id is empty
        """
        ...

    def set(self, logical_key: str, value: Any, user_id: Optional[str]) -> None:
        """Persist a JSON-serializable value for the user."""
        ...

    def get(self, logical_key: str, user_id: Optional[str], default: Any = None) -> Any:
        """Read a value for the user, or default."""
        ...

    def remove(self, logical_key: str, user_id: Optional[str]) -> None:
        """Delete a value for the user."""
        ...

    def try_set(self, logical_key: str, value: Any, user_id: Optional[str]) -> StoreOutcome:
        ...

    def try_get(self, logical_key: str, user_id: Optional[str]) -> StoreOutcome:
        ...

    def try_remove(self, logical_key: str, user_id: Optional[str]) -> StoreOutcome:
        ...

    def clear_all_for_user(self, user_id: Optional[str]) -> int:
        """
        Remove every key in a user's namespace.

        Returns:
            Number of keys removed
        """
        ...

    def clear_global_keys(self) -> int:
        """
        Remove the legacy unpartitioned keys.

        Returns:
            Number of keys that were present and removed
        """
        ...

    def migrate_global_to_user(self, user_id: Optional[str]) -> MigrationReport:
        """
        Move legacy global records into a user's namespace.

        Existing per-user values are overwritten. Corrupt legacy values are
        skipped without blocking the other keys.
        """
        ...
