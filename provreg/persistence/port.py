"""Persistence port contract consumed by the collector and the driver."""

from __future__ import annotations

from typing import Optional, Protocol

LOG_SUFFIX = ".log"


class Initializer(Protocol):
    """Source of the content an entry starts with when first looked up."""

    def read_initial(self, name: str) -> Optional[str]:
        """Return the raw persisted content for ``name``, or None if absent."""
        ...


class PersistencePort(Initializer, Protocol):
    """Durable storage of one resource per registry name.

    ``write`` and ``delete`` raise ``StorageError``; ``read_initial`` treats
    any failure as absence; ``write_log`` never raises.
    """

    def list_existing_names(self) -> list[str]:
        """Names of the resources currently persisted, excluding log files."""
        ...

    def write(self, name: str, content: str) -> None:
        ...

    def delete(self) -> None:
        ...

    def write_log(self, content: str) -> None:
        ...


def is_log_name(name: str) -> bool:
    return name.lower().endswith(LOG_SUFFIX)
