"""In-memory persistence, for embedding the driver and for tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from provreg import TOOL_NAME
from provreg.errors import StorageError
from provreg.persistence.port import is_log_name
from provreg.registry.codec import header


@dataclass
class MemoryPersistence:
    """Keeps resources in a dict keyed by name.

    ``failing_writes`` and ``fail_delete`` inject storage failures.
    """

    resources: dict[str, str] = field(default_factory=dict)
    tool_name: str = TOOL_NAME
    logs: list[str] = field(default_factory=list)
    failing_writes: set[str] = field(default_factory=set)
    fail_delete: bool = False

    # Call history
    written: list[str] = field(default_factory=list)
    delete_calls: int = 0

    def list_existing_names(self) -> list[str]:
        return [name for name in self.resources if not is_log_name(name)]

    def read_initial(self, name: str) -> Optional[str]:
        return self.resources.get(name)

    def write(self, name: str, content: str) -> None:
        if name in self.failing_writes:
            raise StorageError(f"Could not write '{name}'")
        self.resources[name] = header(self.tool_name) + content
        self.written.append(name)

    def delete(self) -> None:
        self.delete_calls += 1
        if self.fail_delete:
            raise StorageError("Could not delete resources")
        for name in self.list_existing_names():
            del self.resources[name]

    def write_log(self, content: str) -> None:
        if content:
            self.logs.append(content)
