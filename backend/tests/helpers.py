"""Test doubles shared across test modules."""

from typing import Optional
from unittest.mock import AsyncMock, MagicMock

from modules.auth.models import ProviderSession, SessionUser


class FakeAuthProvider:
    """
    In-memory stand-in for Supabase Auth.

    Tests set `session` or `error` and push events with `emit`.
    """

    def __init__(self, session: Optional[ProviderSession] = None):
        self.session = session
        self.error: Optional[Exception] = None
        self.callbacks = []
        self.subscription = MagicMock()
        self.sign_out = AsyncMock()
        self.get_session_calls = 0

    async def get_session(self) -> Optional[ProviderSession]:
        self.get_session_calls += 1
        if self.error is not None:
            raise self.error
        return self.session

    def on_auth_state_change(self, callback):
        self.callbacks.append(callback)
        return self.subscription

    def emit(self, event: str, session: Optional[ProviderSession]) -> None:
        for callback in list(self.callbacks):
            callback(event, session)


def make_provider_session(user_id: str = "real-user-1", email: str = "traveler@example.com") -> ProviderSession:
    """Build a provider session for a real user."""
    return ProviderSession(
        user=SessionUser(id=user_id, email=email),
        access_token="access-token",
    )
