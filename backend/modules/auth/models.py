"""
Authentication module data models.

These models define the identities the session reconciler works with and
the provider-neutral shape of an auth provider session.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field


DEMO_FLAG_KEY = "isDemoMode"
DEMO_FLAG_VALUE = "true"
DEMO_SESSION_KEY = "demoSession"
DEMO_USER_PREFIX = "demo-user-"


class SessionUser(BaseModel):
    """
    The identity exposed to feature code.

    Real users come from the auth provider. Demo users are synthesized locally
    and persisted under DEMO_SESSION_KEY in this model's JSON form.
    """

    id: str = Field(..., min_length=1, description="User ID (UUID or demo-user-<ms>)")
    email: Optional[str] = Field(None, description="User's email address")
    username: Optional[str] = Field(None, description="Display handle")
    full_name: Optional[str] = Field(None, description="Full display name")
    avatar_url: Optional[str] = Field(None, description="Avatar URL")
    created_at: Optional[datetime] = Field(None, description="Account creation time")
    is_demo: bool = Field(default=False, alias="isDemo", description="Locally synthesized")

    model_config = {
        "frozen": True,  # Make immutable for safety
        "extra": "ignore",
        "populate_by_name": True,
    }


class SessionKind(str, Enum):
    """Which kind of identity is active."""

    DEMO = "demo"
    REAL = "real"
    NONE = "none"


class Session(BaseModel):
    """
    The active session: a demo user, a real user, or nobody.

    Built fresh at every reconciliation step; never mutated in place.
    """

    kind: SessionKind = SessionKind.NONE
    user: Optional[SessionUser] = None

    model_config = {"frozen": True}

    @classmethod
    def demo(cls, user: SessionUser) -> "Session":
        return cls(kind=SessionKind.DEMO, user=user)

    @classmethod
    def real(cls, user: SessionUser) -> "Session":
        return cls(kind=SessionKind.REAL, user=user)

    @classmethod
    def none(cls) -> "Session":
        return cls(kind=SessionKind.NONE, user=None)

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    @property
    def is_demo(self) -> bool:
        return self.kind == SessionKind.DEMO


class ReconcilerState(str, Enum):
    """Lifecycle state of the session reconciler."""

    INITIALIZING = "initializing"
    DEMO_ACTIVE = "demo_active"
    REAL_ACTIVE = "real_active"
    UNAUTHENTICATED = "unauthenticated"


class AuthEvent(str, Enum):
    """Auth state change events emitted by Supabase Auth."""

    INITIAL_SESSION = "INITIAL_SESSION"
    SIGNED_IN = "SIGNED_IN"
    SIGNED_OUT = "SIGNED_OUT"
    TOKEN_REFRESHED = "TOKEN_REFRESHED"
    USER_UPDATED = "USER_UPDATED"
    PASSWORD_RECOVERY = "PASSWORD_RECOVERY"


class ProviderSession(BaseModel):
    """A session as reported by the auth provider."""

    user: Optional[SessionUser] = Field(None, description="Signed-in user, if any")
    access_token: Optional[str] = Field(None, description="Provider access token")
