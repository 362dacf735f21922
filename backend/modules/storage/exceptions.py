"""
Storage module exceptions.

The public storage API never raises these. They describe why an operation
became a no-op and travel inside StoreOutcome.reason / logs.
"""

from shared.exceptions import SafarError, ValidationError


class MissingUserIdError(ValidationError):
    """Raised internally when a namespaced operation has no user id."""

    def __init__(self, logical_key: str):
        super().__init__(
            f"No user ID provided for {logical_key}",
            code="MISSING_USER_ID",
            details={"key": logical_key},
        )


class SerializationError(SafarError):
    """Raised when a value cannot be turned into stored JSON text."""

    def __init__(self, logical_key: str, reason: str):
        super().__init__(
            f"Cannot serialize value for {logical_key}: {reason}",
            code="SERIALIZATION_ERROR",
            details={"key": logical_key},
        )


class DeserializationError(SafarError):
    """Raised when stored text is not valid JSON."""

    def __init__(self, physical_key: str, reason: str):
        super().__init__(
            f"Cannot parse stored value at {physical_key}: {reason}",
            code="DESERIALIZATION_ERROR",
            details={"key": physical_key},
        )
