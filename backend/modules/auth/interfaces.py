"""
Authentication module interfaces.

The session reconciler depends on IAuthProvider, not on Supabase directly.
This enables testing with mocks and swapping the hosted auth service.
"""

from typing import Callable, Optional, Protocol, runtime_checkable

from .models import ProviderSession, ReconcilerState, Session, SessionUser


AuthStateCallback = Callable[[str, Optional[ProviderSession]], None]
SessionListener = Callable[[Session], None]


@runtime_checkable
class ISubscription(Protocol):
    """Handle returned by an auth state subscription."""

    def unsubscribe(self) -> None:
        ...


@runtime_checkable
class IAuthProvider(Protocol):
    """
    Interface for the hosted auth provider.

    Only the three calls the session layer needs are exposed.
    """

    async def get_session(self) -> Optional[ProviderSession]:
        """
        Get the provider's current session.

        Returns:
            ProviderSession, or None when nobody is signed in

        Raises:
            AuthProviderError: If the provider cannot be queried
        """
        ...

    def on_auth_state_change(self, callback: AuthStateCallback) -> ISubscription:
        """
        Register a callback for auth state changes.

        The callback receives the event name and the new session (or None)
        at arbitrary later times.
        """
        ...

    async def sign_out(self) -> None:
        """
        Sign the current real user out.

        Raises:
            AuthProviderError: If the provider call fails
        """
        ...


@runtime_checkable
class ISessionReconciler(Protocol):
    """
    Interface for deciding which identity is active.

    Feature code reads `user_id` and passes it to the storage module.
    """

    @property
    def state(self) -> ReconcilerState:
        ...

    @property
    def session(self) -> Session:
        ...

    @property
    def loading(self) -> bool:
        ...

    async def check_session(self) -> Session:
        """Determine the active session. Never raises."""
        ...

    def on_auth_provider_event(self, event: str, session: Optional[ProviderSession]) -> None:
        """Handle an auth state change pushed by the provider."""
        ...

    def start_demo_session(self) -> SessionUser:
        """Create and activate a fresh demo identity."""
        ...

    async def sign_out(self) -> None:
        """End the active session and clean up local state."""
        ...

    def refresh_current_session(self) -> Session:
        """Republish the stored demo session, if one is flagged."""
        ...
