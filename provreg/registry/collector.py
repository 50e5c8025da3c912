"""Collector — the session-scoped registry of entries.

Entries are materialized lazily: the first ``get`` for a name creates the
entry and loads whatever was persisted for it. Providers removed earlier in
the session are remembered and stripped from every entry loaded later, so
the order of ``get`` and ``remove_provider`` calls within a round does not
affect the final state.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from provreg.diagnostics import LogLocation, ProcessorLogger
from provreg.errors import require
from provreg.persistence.port import Initializer
from provreg.registry.entry import Entry


class Registry:
    """Name -> Entry mapping with snapshot-based modification detection."""

    def __init__(self, initializer: Initializer, logger: Optional[ProcessorLogger] = None):
        self.initializer = initializer
        self.logger = logger
        self._entries: dict[str, Entry] = {}
        self._snapshot: Optional[Mapping[str, Entry]] = None
        self._pending_removals: list[str] = []

    def get(self, name: str) -> Entry:
        """Return the entry for ``name``, loading it on first access."""
        require(name, "name")
        entry = self._entries.get(name)
        if entry is None:
            entry = self._materialize(name)
            self._entries[name] = entry
        return entry

    def values(self) -> list[Entry]:
        return list(self._entries.values())

    def names(self) -> list[str]:
        return list(self._entries)

    @property
    def pending_removals(self) -> tuple[str, ...]:
        return tuple(self._pending_removals)

    def remove_provider(self, provider: str) -> None:
        """Strip a provider from every entry, now and on later loads."""
        require(provider, "provider")
        if self.logger is not None:
            self.logger.note(LogLocation.LOG_FILE, f"Removing {provider}")
        self._pending_removals.append(provider)
        for entry in self._entries.values():
            entry.remove_provider(provider)

    def cache(self) -> None:
        """Take the one-time snapshot used by is_modified()."""
        if self._snapshot is not None:
            raise RuntimeError("Registry snapshot already taken")
        self._snapshot = MappingProxyType(
            {name: entry.copy() for name, entry in self._entries.items()}
        )

    @property
    def is_cached(self) -> bool:
        return self._snapshot is not None

    def is_modified(self) -> bool:
        """True if the entries differ from the snapshot taken by cache().

        An entry created after the snapshot counts as a modification even if
        it holds no providers.
        """
        snapshot = self._snapshot if self._snapshot is not None else {}
        if len(snapshot) != len(self._entries):
            return True
        return any(
            name not in self._entries or entry != self._entries[name]
            for name, entry in snapshot.items()
        )

    def _materialize(self, name: str) -> Entry:
        entry = Entry(name, self.logger)
        initial = self.initializer.read_initial(name)
        if initial is not None:
            entry.deserialize(initial)
            for provider in self._pending_removals:
                entry.remove_provider(provider)
        return entry

    def __contains__(self, name: str) -> bool:
        return name in self._entries

    def __repr__(self) -> str:
        return repr(self.values())
