"""Exceptions raised by typed_entities."""

from __future__ import annotations


class TypedEntitiesError(Exception):
    """Base exception for all typed_entities errors."""

    pass


class ConfigError(TypedEntitiesError):
    """Invalid configuration value."""

    pass


class SerializationError(TypedEntitiesError):
    """Stored properties could not be decoded into the requested type."""

    def __init__(self, message: str, path: str = ""):
        """Initialize exception with a message and the failing path.

        Args:
            message: Description of the failure.
            path: Rendered property path being decoded when it failed.
        """
        self.path = path
        super().__init__(f"{message} (at {path!r})" if path else message)


class DatabaseError(TypedEntitiesError):
    """A store operation failed."""

    def __init__(self, cause: Exception):
        """Initialize exception wrapping the store failure.

        Args:
            cause: The exception raised by the store adapter.
        """
        self.cause = cause
        super().__init__(str(cause) or type(cause).__name__)


class NotSavedError(TypedEntitiesError):
    """Attempted to delete a record that has no persisted identity."""

    def __init__(self, kind: str):
        self.kind = kind
        super().__init__(
            f"Entity of type {kind} cannot be deleted because it has not been saved"
        )
