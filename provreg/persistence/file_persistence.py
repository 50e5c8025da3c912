"""File-based persistence — one provider-list file per registry name.

Resources live under ``<root>/<options.dir>``; for Python packages the usual
layout is an output root of the package directory and a ``dir`` such as
``providers/``. Log files (``*.log``) share the directory but are never
discovered as resources.
"""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

from provreg import TOOL_NAME
from provreg.config import clean_path
from provreg.diagnostics import LogLocation, ProcessorLogger
from provreg.errors import StorageError
from provreg.persistence.port import is_log_name
from provreg.registry.codec import header

log = logging.getLogger(__name__)


class FilePersistence:
    """Stores provider lists as text files under an output root."""

    def __init__(
        self,
        root: str | Path,
        dir: str = "",
        tool_name: str = TOOL_NAME,
        logger: Optional[ProcessorLogger] = None,
    ):
        self.root = Path(root)
        self.dir = clean_path(dir)
        self.tool_name = tool_name
        self.logger = logger
        self.resource_dir = self.root / self.dir if self.dir else self.root

    def list_existing_names(self) -> list[str]:
        if not self.resource_dir.is_dir():
            return []

        names = []
        for path in sorted(self.resource_dir.iterdir()):
            if path.is_file() and not is_log_name(path.name):
                self._note(LogLocation.LOG_FILE, f"Discovered {path.name}")
                names.append(path.name)
        return names

    def read_initial(self, name: str) -> Optional[str]:
        path = self.resource_dir / name
        if not path.is_file():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            self._note(LogLocation.MESSAGER, f"Could not read '{self.dir}{name}': {e}")
            return None

    def write(self, name: str, content: str) -> None:
        self._note(LogLocation.BOTH, f"Generating file '{self.dir}{name}'")
        self._write_file(name, header(self.tool_name) + content)

    def delete(self) -> None:
        """Remove every persisted resource; log files are left in place."""
        for name in self.list_existing_names():
            try:
                (self.resource_dir / name).unlink()
            except OSError as e:
                raise StorageError(f"Could not delete '{self.dir}{name}': {e}") from e

    def write_log(self, content: str) -> None:
        if not content:
            return
        name = f"log{int(time.time() * 1000)}.log"
        try:
            self._write_file(name, content)
        except StorageError as e:
            log.warning("Could not write log file: %s", e)

    def _write_file(self, name: str, text: str) -> None:
        path = self.resource_dir / name
        try:
            self.resource_dir.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as e:
            raise StorageError(f"Could not write '{self.dir}{name}': {e}") from e

    def _note(self, location: LogLocation, message: str) -> None:
        if self.logger is not None:
            self.logger.note(location, message)
