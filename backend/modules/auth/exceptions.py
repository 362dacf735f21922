"""
Authentication module exceptions.

The session reconciler catches these and falls back to a well-defined
state; they never reach feature code.
"""

from shared.exceptions import ExternalServiceError, ValidationError


class AuthProviderError(ExternalServiceError):
    """Raised when the auth provider cannot be reached or rejects a call."""

    def __init__(self, message: str = "Auth provider request failed", operation: str = ""):
        super().__init__(
            message,
            service="supabase-auth",
            code="AUTH_PROVIDER_ERROR",
            details={"operation": operation} if operation else None,
        )


class InvalidDemoSessionError(ValidationError):
    """Raised when the stored demo session record cannot be parsed."""

    def __init__(self, reason: str):
        super().__init__(
            f"Stored demo session is invalid: {reason}",
            code="INVALID_DEMO_SESSION",
        )
