"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import pytest

from shared.config import Settings, get_settings
from shared.database import reset_client_cache
from shared.kv_store import InMemoryKeyValueStore, reset_kv_store
from modules.auth.service import SessionReconciler, reset_session_reconciler
from modules.storage.service import UserStorage, reset_user_storage
from tests.helpers import FakeAuthProvider


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons before and after each test."""
    reset_session_reconciler()
    reset_user_storage()
    reset_kv_store()
    reset_client_cache()
    get_settings.cache_clear()
    yield
    reset_session_reconciler()
    reset_user_storage()
    reset_kv_store()
    reset_client_cache()
    get_settings.cache_clear()


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    """Provide an empty in-memory store."""
    return InMemoryKeyValueStore()


@pytest.fixture
def storage(kv: InMemoryKeyValueStore) -> UserStorage:
    """Provide user storage over the in-memory store."""
    return UserStorage(kv)


@pytest.fixture
def settings() -> Settings:
    """Provide settings with fixed demo attributes."""
    return Settings(demo_email="demo@safar.com", demo_display_name="Demo User")


@pytest.fixture
def auth_provider() -> FakeAuthProvider:
    """Provide an auth provider with no session."""
    return FakeAuthProvider()


@pytest.fixture
def clock():
    """A controllable clock returning seconds since the epoch."""
    now = {"t": 1_700_000_000.0}

    def _clock() -> float:
        return now["t"]

    _clock.now = now
    return _clock


@pytest.fixture
def reconciler(auth_provider, storage, settings, clock) -> SessionReconciler:
    """Provide a reconciler wired to the fake provider and in-memory store."""
    return SessionReconciler(auth_provider, storage, settings=settings, clock=clock)
