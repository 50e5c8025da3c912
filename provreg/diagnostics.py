"""Diagnostics — the host-facing message channel and the side-channel log.

Two outputs exist for anything the processor wants to say:
- the *messager*: diagnostics collected by a ``DiagnosticSink`` and shown
  to the user (errors, warnings, and notes when running verbose)
- the *log file*: a buffered text log persisted next to the generated
  resources when the ``log`` option is on

``ProcessorLogger`` routes each message to one or both of them according
to a ``LogLocation`` and the active options.
"""

from __future__ import annotations

import logging
import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from provreg.errors import require

if TYPE_CHECKING:
    from provreg.config import Options

log = logging.getLogger(__name__)


class Severity(Enum):
    ERROR = "error"  # Fails the run
    WARNING = "warning"
    NOTE = "note"  # Informational, only shown when verbose


@dataclass
class Diagnostic:
    """A single message emitted to the host."""

    severity: Severity
    message: str
    declaration: str = ""  # Qualified name of the element the message is about
    source_file: str = ""
    line: int = 0

    @property
    def location(self) -> str:
        if self.source_file and self.line:
            return f"{self.source_file}:{self.line}"
        return self.source_file


@dataclass
class DiagnosticSink:
    """Collects diagnostics emitted during a processing session."""

    diagnostics: list[Diagnostic] = field(default_factory=list)

    def emit(
        self,
        severity: Severity,
        message: str,
        declaration: str = "",
        source_file: str = "",
        line: int = 0,
    ) -> Diagnostic:
        diagnostic = Diagnostic(
            severity=severity,
            message=message,
            declaration=declaration,
            source_file=source_file,
            line=line,
        )
        self.diagnostics.append(diagnostic)
        return diagnostic

    def reset(self) -> None:
        self.diagnostics.clear()

    @property
    def errors(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.ERROR]

    @property
    def warnings(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]

    @property
    def notes(self) -> list[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.NOTE]

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    def summary(self) -> str:
        status = "FAIL" if self.has_errors else "OK"
        return f"[{status}] {len(self.errors)} error(s), {len(self.warnings)} warning(s)"


class LogLocation(Enum):
    MESSAGER = "messager"
    LOG_FILE = "log_file"
    BOTH = "both"

    def to_messager(self) -> bool:
        return self in (LogLocation.MESSAGER, LogLocation.BOTH)

    def to_log_file(self) -> bool:
        return self in (LogLocation.LOG_FILE, LogLocation.BOTH)


class ProcessorLogger:
    """Routes processor notes and warnings to the sink and the log buffer.

    Notes reach the sink only when ``verbose`` is set; warnings always do.
    Either kind reaches the log buffer only when ``log`` is set. Everything
    is also forwarded to the ``logging`` module at DEBUG/WARNING level.
    """

    def __init__(self, sink: DiagnosticSink, options: Options):
        self.sink = require(sink, "sink")
        self.options = require(options, "options")
        self._buffer: list[str] = []

        self.sink.emit(Severity.NOTE, options.report())
        for warning in options.warnings:
            self.warning(LogLocation.BOTH, warning)

    def note(self, location: LogLocation, message: str) -> None:
        require(location, "location")
        require(message, "message")
        log.debug(message)

        if location.to_messager() and self.options.verbose:
            self.sink.emit(Severity.NOTE, message)
        if location.to_log_file() and self.options.log:
            self._buffer.append(message + "\n")

    def warning(self, location: LogLocation, message: str) -> None:
        require(location, "location")
        require(message, "message")
        log.warning(message)

        if location.to_messager():
            self.sink.emit(Severity.WARNING, message)
        if location.to_log_file() and self.options.log:
            self._buffer.append("warning: " + message + "\n")

    def file_content(self) -> str:
        return "".join(self._buffer)

    def reset(self) -> None:
        self._buffer.clear()


def exception_to_string(exc: BaseException) -> str:
    """Render an exception with its traceback, as shown to the host."""
    require(exc, "exc")
    return "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
