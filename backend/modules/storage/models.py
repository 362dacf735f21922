"""
Storage module data models.

These models describe the legacy migration table and the outcome of
individual store operations.
"""

from enum import Enum
from typing import Any, Optional
from pydantic import BaseModel, Field


USER_KEY_PREFIX = "user_"


class MigrationRule(BaseModel):
    """Maps one legacy global key onto a per-user logical key."""

    global_key: str = Field(..., description="Unpartitioned key from older app versions")
    user_key: str = Field(..., description="Logical key in the user's namespace")

    model_config = {"frozen": True}


# Adding a legacy key is a one-line edit here.
LEGACY_MIGRATION_RULES: tuple[MigrationRule, ...] = (
    MigrationRule(global_key="savedTrips", user_key="savedTrips"),
    MigrationRule(global_key="currentTrip", user_key="currentTrip"),
    MigrationRule(global_key="blogPosts", user_key="blogPosts"),
    MigrationRule(global_key="userPreferences", user_key="userPreferences"),
)

LEGACY_GLOBAL_KEYS: tuple[str, ...] = tuple(r.global_key for r in LEGACY_MIGRATION_RULES)


class StoreStatus(str, Enum):
    """Why a store operation did or did not take effect."""

    OK = "ok"
    NOT_FOUND = "not_found"
    MISSING_USER = "missing_user"
    SERIALIZATION_ERROR = "serialization_error"
    DESERIALIZATION_ERROR = "deserialization_error"
    STORAGE_ERROR = "storage_error"


class StoreOutcome(BaseModel):
    """Result of a single namespaced operation."""

    status: StoreStatus
    key: Optional[str] = Field(None, description="Physical key, when one was derived")
    value: Any = Field(None, description="Decoded value for successful reads")
    reason: Optional[str] = Field(None, description="Diagnostic for non-OK outcomes")

    @property
    def ok(self) -> bool:
        return self.status == StoreStatus.OK


class MigrationReport(BaseModel):
    """What migrate_global_to_user did for each legacy key."""

    user_id: Optional[str] = None
    migrated: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.migrated)
