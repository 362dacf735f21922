"""
Shared infrastructure for the Safar backend.

This package contains cross-cutting concerns that are used by multiple modules:
- config: Centralized settings management
- database: Supabase client factory
- exceptions: Base exception classes
- kv_store: Durable key-value store backends
- log: Logging setup for entry points

Note: Business logic should NOT go here. This is for infrastructure only.
"""

from .config import Settings, get_settings
from .database import get_supabase_client, reset_client_cache
from .exceptions import (
    SafarError,
    ValidationError,
    ExternalServiceError,
    StorageUnavailableError,
    QuotaExceededError,
)
from .kv_store import (
    IKeyValueStore,
    InMemoryKeyValueStore,
    FileKeyValueStore,
    get_kv_store,
    reset_kv_store,
)

__all__ = [
    "Settings",
    "get_settings",
    "get_supabase_client",
    "reset_client_cache",
    "SafarError",
    "ValidationError",
    "ExternalServiceError",
    "StorageUnavailableError",
    "QuotaExceededError",
    "IKeyValueStore",
    "InMemoryKeyValueStore",
    "FileKeyValueStore",
    "get_kv_store",
    "reset_kv_store",
]
