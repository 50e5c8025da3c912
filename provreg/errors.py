"""Error taxonomy shared by the registry, the persistence layer and the driver."""

from __future__ import annotations


class InvalidArgument(ValueError):
    """A null or empty identifier was passed to a registry mutator.

    This always indicates a programming error in the caller and is never
    converted into a diagnostic.
    """


class ValidationRejected(Exception):
    """A candidate declaration does not satisfy the validation policy."""

    def __init__(self, declaration: str, reason: str):
        super().__init__(f"{declaration} {reason}")
        self.declaration = declaration
        self.reason = reason


class StorageError(OSError):
    """A read, write or delete against a persistence port failed."""


def require(value, name: str):
    """Return ``value`` or raise InvalidArgument if it is None."""
    if value is None:
        raise InvalidArgument(f"{name} must not be None")
    return value
