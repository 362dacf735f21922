"""
Supabase Auth adapter.

Wraps the supabase client's auth API behind IAuthProvider and maps Supabase
users onto SessionUser.
"""

import logging
from typing import Any, Optional

from supabase import AuthError, Client

from shared.database import get_supabase_client

from .exceptions import AuthProviderError
from .interfaces import AuthStateCallback, IAuthProvider, ISubscription
from .models import ProviderSession, SessionUser

logger = logging.getLogger(__name__)


def to_session_user(user: Any) -> Optional[SessionUser]:
    """Map a Supabase User object to a SessionUser."""
    if user is None or not getattr(user, "id", None):
        return None

    metadata = getattr(user, "user_metadata", None) or {}
    return SessionUser(
        id=str(user.id),
        email=getattr(user, "email", None),
        username=metadata.get("username"),
        full_name=metadata.get("full_name"),
        avatar_url=metadata.get("avatar_url"),
        created_at=getattr(user, "created_at", None),
        is_demo=False,
    )


def to_provider_session(session: Any) -> Optional[ProviderSession]:
    """Map a Supabase Session object to a ProviderSession."""
    if session is None:
        return None
    return ProviderSession(
        user=to_session_user(getattr(session, "user", None)),
        access_token=getattr(session, "access_token", None),
    )


class SupabaseAuthProvider(IAuthProvider):
    """
    Auth provider backed by Supabase Auth.

    The supabase client persists and refreshes its own session; this adapter
    only reads it and relays state changes.
    """

    def __init__(self, client: Optional[Client] = None):
        self._client = client if client is not None else get_supabase_client()

    async def get_session(self) -> Optional[ProviderSession]:
        try:
            session = self._client.auth.get_session()
        except AuthError as e:
            raise AuthProviderError(str(e), operation="get_session") from e
        return to_provider_session(session)

    def on_auth_state_change(self, callback: AuthStateCallback) -> ISubscription:
        def _relay(event: Any, session: Any) -> None:
            logger.debug(f"Supabase auth event: {event}")
            callback(str(getattr(event, "value", event)), to_provider_session(session))

        return self._client.auth.on_auth_state_change(_relay)

    async def sign_out(self) -> None:
        try:
            self._client.auth.sign_out()
        except AuthError as e:
            raise AuthProviderError(str(e), operation="sign_out") from e
