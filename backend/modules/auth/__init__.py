"""
Authentication module.

Reconciles demo and real sessions, migrates legacy global data on sign-in
and cleans up local state on sign-out.

Public API:
- IAuthProvider / ISessionReconciler: Interfaces
- SessionReconciler: Decides the active session
- SupabaseAuthProvider: Supabase Auth adapter
- Session / SessionUser / ReconcilerState: Models
- Auth exceptions: AuthProviderError, InvalidDemoSessionError
"""

from .interfaces import IAuthProvider, ISessionReconciler, ISubscription
from .models import (
    AuthEvent,
    ProviderSession,
    ReconcilerState,
    Session,
    SessionKind,
    SessionUser,
)
from .exceptions import AuthProviderError, InvalidDemoSessionError
from .provider import SupabaseAuthProvider
from .service import (
    SessionReconciler,
    get_session_reconciler,
    reset_session_reconciler,
)

__all__ = [
    # Interfaces
    "IAuthProvider",
    "ISessionReconciler",
    "ISubscription",
    # Implementations
    "SessionReconciler",
    "SupabaseAuthProvider",
    "get_session_reconciler",
    "reset_session_reconciler",
    # Models
    "AuthEvent",
    "ProviderSession",
    "ReconcilerState",
    "Session",
    "SessionKind",
    "SessionUser",
    # Exceptions
    "AuthProviderError",
    "InvalidDemoSessionError",
]
