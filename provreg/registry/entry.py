"""Registry entry — one service (or type) name and the classes that provide it."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Optional

from provreg.diagnostics import LogLocation, ProcessorLogger
from provreg.errors import InvalidArgument, require
from provreg.registry.codec import parse_providers, serialize_providers


class Entry:
    """A service name plus its duplicate-free set of provider identifiers.

    Two entries are equal when their names match and they hold the same
    providers, regardless of insertion order.
    """

    def __init__(self, name: str, logger: Optional[ProcessorLogger] = None):
        self.name = require(name, "name")
        self.logger = logger
        self._providers: dict[str, None] = {}  # Insertion-ordered set
        self._note(f"Creating {name}")

    @property
    def providers(self) -> frozenset[str]:
        return frozenset(self._providers)

    def add_provider(self, provider: str) -> None:
        """Add a provider; adding one that is already present is a no-op."""
        if not provider:
            raise InvalidArgument("provider must not be None or empty")
        self._note(f"Adding {provider} to {self.name}")
        self._providers[provider] = None

    def remove_provider(self, provider: str) -> bool:
        """Remove a provider and report whether the entry changed.

        The collector calls this on every entry for every provider removed in
        the session, so a miss is the common case and is not logged.
        """
        require(provider, "provider")
        if provider in self._providers:
            del self._providers[provider]
            self._note(f"Removing {provider} from {self.name}")
            return True
        return False

    def contains(self, provider: str) -> bool:
        return provider in self._providers

    def serialize(self) -> str:
        return serialize_providers(self._providers)

    def deserialize(self, text: str) -> None:
        """Add every provider listed in a provider-list text."""
        require(text, "text")
        for provider in parse_providers(text):
            self.add_provider(provider)

    def copy(self) -> Entry:
        """Detached copy used for snapshots; does not log."""
        clone = Entry.__new__(Entry)
        clone.name = self.name
        clone.logger = None
        clone._providers = dict(self._providers)
        return clone

    def _note(self, message: str) -> None:
        if self.logger is not None:
            self.logger.note(LogLocation.LOG_FILE, message)

    def __contains__(self, provider: str) -> bool:
        return self.contains(provider)

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._providers))

    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Entry):
            return NotImplemented
        return self.name == other.name and self._providers.keys() == other._providers.keys()

    def __hash__(self) -> int:
        return hash(self.name)

    def __repr__(self) -> str:
        return f"{self.name}={sorted(self._providers)}"
