"""
Session reconciler implementation.

Decides which identity is active (demo or real), migrates legacy global data
into a newly signed-in user's namespace, and cleans up on sign-out.

The demo flag lives in the durable store and is re-read at every decision
point. Nothing cached in memory is trusted across an await, so the last write
to the flag always wins.
"""

import logging
import time
from datetime import datetime, timezone
from typing import Callable, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.config import Settings, get_settings
from shared.exceptions import StorageUnavailableError
from modules.storage.interfaces import IUserStorage
from modules.storage.service import get_user_storage

from .exceptions import AuthProviderError, InvalidDemoSessionError
from .interfaces import (
    IAuthProvider,
    ISessionReconciler,
    ISubscription,
    SessionListener,
)
from .models import (
    DEMO_FLAG_KEY,
    DEMO_FLAG_VALUE,
    DEMO_SESSION_KEY,
    DEMO_USER_PREFIX,
    AuthEvent,
    ProviderSession,
    ReconcilerState,
    Session,
    SessionKind,
    SessionUser,
)
from .provider import SupabaseAuthProvider

logger = logging.getLogger(__name__)


_STATE_BY_KIND = {
    SessionKind.DEMO: ReconcilerState.DEMO_ACTIVE,
    SessionKind.REAL: ReconcilerState.REAL_ACTIVE,
    SessionKind.NONE: ReconcilerState.UNAUTHENTICATED,
}


class SessionReconciler(ISessionReconciler):
    """
    Owns the single active session for one application context.

    Starts in INITIALIZING with loading=True. check_session() always ends in
    DEMO_ACTIVE, REAL_ACTIVE or UNAUTHENTICATED with loading=False, whatever
    the auth provider does.
    """

    def __init__(
        self,
        auth_provider: IAuthProvider,
        storage: Optional[IUserStorage] = None,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize the reconciler.

        Args:
            auth_provider: Source of real sessions and auth events
            storage: User storage. Defaults to the process-wide instance.
            settings: Application settings (demo identity attributes)
            clock: Returns seconds since the epoch; used for demo user ids
        """
        self._auth = auth_provider
        self._storage = storage if storage is not None else get_user_storage()
        self._settings = settings or get_settings()
        self._clock = clock

        self._session = Session.none()
        self._state = ReconcilerState.INITIALIZING
        self._loading = True
        self._closed = False
        self._migrated_user_id: Optional[str] = None
        self._subscription: Optional[ISubscription] = None
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> ReconcilerState:
        return self._state

    @property
    def session(self) -> Session:
        return self._session

    @property
    def current_user(self) -> Optional[SessionUser]:
        return self._session.user

    @property
    def user_id(self) -> Optional[str]:
        return self._session.user_id

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def subscribed(self) -> bool:
        return self._subscription is not None

    def add_listener(self, listener: SessionListener) -> Callable[[], None]:
        """
        Call listener with every newly published session.

        Returns:
            A function that removes the listener
        """
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    # Lifecycle

    async def mount(self) -> Session:
        """Subscribe to provider events, then run the startup check."""
        self._closed = False
        if self._subscription is None:
            self._subscription = self._auth.on_auth_state_change(self.on_auth_provider_event)
        return await self.check_session()

    def unmount(self) -> None:
        """Release the provider subscription and stop publishing sessions."""
        self._closed = True
        subscription, self._subscription = self._subscription, None
        if subscription is not None:
            subscription.unsubscribe()

    async def __aenter__(self) -> "SessionReconciler":
        try:
            await self.mount()
        except BaseException:
            self.unmount()
            raise
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.unmount()

    # Operations

    async def check_session(self) -> Session:
        try:
            demo_user = self._read_demo_user()
            if demo_user is not None:
                logger.debug(f"Using demo session {demo_user.id}")
                self._publish(Session.demo(demo_user))
                self._storage.clear_global_keys()
                return self._session

            provider_session = await self._auth.get_session()

            # A demo session may have started while we were waiting.
            demo_user = self._read_demo_user()
            if demo_user is not None:
                self._publish(Session.demo(demo_user))
                return self._session

            user = provider_session.user if provider_session else None
            if user is None:
                self._publish(Session.none())
            else:
                self._adopt_real_user(user, migrate=True)
        except AuthProviderError as e:
            logger.warning(f"Error getting session: {e.message}")
            self._publish(Session.none())
        except Exception:
            logger.exception("Unexpected error while checking session")
            self._publish(Session.none())
        finally:
            self._loading = False

        return self._session

    def on_auth_provider_event(self, event: str, session: Optional[ProviderSession]) -> None:
        if self._closed:
            return

        try:
            if self._is_demo_flagged():
                logger.debug(f"Ignoring auth event {event} during demo session")
                if self._state == ReconcilerState.INITIALIZING:
                    self.refresh_current_session()
                    if self._state == ReconcilerState.INITIALIZING:
                        self._publish(Session.none())
                return

            user = session.user if session else None
            if user is None:
                self._migrated_user_id = None
                self._publish(Session.none())
            else:
                self._adopt_real_user(user, migrate=event == AuthEvent.SIGNED_IN)
        finally:
            self._loading = False

    def start_demo_session(self) -> SessionUser:
        timestamp_ms = int(self._clock() * 1000)
        user = SessionUser(
            id=f"{DEMO_USER_PREFIX}{timestamp_ms}",
            email=self._settings.demo_email,
            username=self._settings.demo_display_name,
            full_name=self._settings.demo_display_name,
            avatar_url="",
            created_at=datetime.now(timezone.utc),
            is_demo=True,
        )

        kv = self._storage.kv
        try:
            kv.set_item(DEMO_SESSION_KEY, user.model_dump_json(by_alias=True))
            kv.set_item(DEMO_FLAG_KEY, DEMO_FLAG_VALUE)
        except StorageUnavailableError as e:
            logger.warning(f"Demo session will not survive a reload: {e.message}")

        self._storage.clear_global_keys()
        self._migrated_user_id = None
        self._publish(Session.demo(user))
        self._loading = False
        logger.info(f"Started demo session {user.id}")
        return user

    async def sign_out(self) -> None:
        try:
            # A stale flag without a readable demo record must not hide a real session.
            if self._state == ReconcilerState.REAL_ACTIVE or self._read_demo_user() is None:
                await self._auth.sign_out()
        except AuthProviderError as e:
            logger.warning(f"Remote sign-out failed, clearing local session anyway: {e.message}")
        except Exception:
            logger.exception("Unexpected error during remote sign-out")
        finally:
            self._clear_demo_record()
            self._storage.clear_global_keys()
            self._migrated_user_id = None
            self._publish(Session.none())
            self._loading = False

    def refresh_current_session(self) -> Session:
        demo_user = self._read_demo_user()
        if demo_user is not None:
            self._publish(Session.demo(demo_user))
            self._loading = False
        return self._session

    # Internals

    def _adopt_real_user(self, user: SessionUser, migrate: bool) -> None:
        if self._closed:
            return
        if migrate and user.id != self._migrated_user_id:
            report = self._storage.migrate_global_to_user(user.id)
            self._migrated_user_id = user.id
            if report.changed:
                logger.info(f"Migrated {', '.join(report.migrated)} for user {user.id}")
        self._publish(Session.real(user))

    def _publish(self, session: Session) -> None:
        if self._closed:
            return
        self._session = session
        self._state = _STATE_BY_KIND[session.kind]
        for listener in list(self._listeners):
            try:
                listener(session)
            except Exception:
                logger.exception(f"Session listener {listener!r} failed")

    def _is_demo_flagged(self) -> bool:
        try:
            return self._storage.kv.get_item(DEMO_FLAG_KEY) == DEMO_FLAG_VALUE
        except StorageUnavailableError as e:
            logger.warning(f"Cannot read demo flag: {e.message}")
            return False

    def _read_demo_user(self) -> Optional[SessionUser]:
        """The stored demo user, when the flag is set and the record parses."""
        if not self._is_demo_flagged():
            return None

        try:
            raw = self._storage.kv.get_item(DEMO_SESSION_KEY)
        except StorageUnavailableError as e:
            logger.warning(f"Cannot read demo session: {e.message}")
            return None
        if not raw:
            return None

        try:
            user = SessionUser.model_validate_json(raw)
        except PydanticValidationError as e:
            logger.warning(InvalidDemoSessionError(str(e)).message)
            return None

        if not user.is_demo:
            user = user.model_copy(update={"is_demo": True})
        return user

    def _clear_demo_record(self) -> None:
        kv = self._storage.kv
        for key in (DEMO_SESSION_KEY, DEMO_FLAG_KEY):
            try:
                kv.remove_item(key)
            except StorageUnavailableError as e:
                logger.warning(f"Cannot remove {key}: {e.message}")


# Module-level instance getter
_reconciler_instance: Optional[SessionReconciler] = None


def get_session_reconciler() -> SessionReconciler:
    """Get the session reconciler singleton, backed by Supabase Auth."""
    global _reconciler_instance
    if _reconciler_instance is None:
        _reconciler_instance = SessionReconciler(SupabaseAuthProvider())
    return _reconciler_instance


def reset_session_reconciler() -> None:
    """Reset the session reconciler singleton (for testing)."""
    global _reconciler_instance
    if _reconciler_instance is not None:
        _reconciler_instance.unmount()
    _reconciler_instance = None
