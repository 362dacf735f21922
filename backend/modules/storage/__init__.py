"""
User-scoped local storage module.

Partitions the durable key-value store by user id and folds legacy global
records into a user's namespace on sign-in.

Public API:
- IUserStorage: Interface for namespaced persistence
- UserStorage: Default implementation
- StoreOutcome / StoreStatus: Why an operation did or did not apply
- MigrationRule / LEGACY_MIGRATION_RULES: Legacy key table
"""

from .interfaces import IUserStorage
from .models import (
    LEGACY_GLOBAL_KEYS,
    LEGACY_MIGRATION_RULES,
    MigrationReport,
    MigrationRule,
    StoreOutcome,
    StoreStatus,
)
from .exceptions import (
    MissingUserIdError,
    SerializationError,
    DeserializationError,
)
from .service import UserStorage, get_user_storage, reset_user_storage

__all__ = [
    # Interface
    "IUserStorage",
    # Service
    "UserStorage",
    "get_user_storage",
    "reset_user_storage",
    # Models
    "LEGACY_GLOBAL_KEYS",
    "LEGACY_MIGRATION_RULES",
    "MigrationReport",
    "MigrationRule",
    "StoreOutcome",
    "StoreStatus",
    # Exceptions
    "MissingUserIdError",
    "SerializationError",
    "DeserializationError",
]
