"""Reconciliation driver — the round-based registry update protocol.

A session runs as follows:
1. Start: every persisted resource is loaded into a fresh registry, which is
   then snapshotted.
2. Each round: every visible declaration is first stripped from all entries
   (stale removal), then every marked declaration that passes the policy is
   registered again under its target names.
3. Terminal round: if the registry differs from the snapshot, resources are
   rewritten (or deleted when nothing is left) and the side-channel log is
   flushed.

Validation rejections and storage failures become diagnostics; they never
abort a round. ``InvalidArgument`` propagates and ends the session.
"""

from __future__ import annotations

import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Optional

from provreg import TOOL_NAME
from provreg.config import Options
from provreg.diagnostics import (
    Diagnostic,
    DiagnosticSink,
    LogLocation,
    ProcessorLogger,
    Severity,
)
from provreg.errors import StorageError, ValidationRejected
from provreg.persistence.port import PersistencePort
from provreg.processing.models import Declaration
from provreg.processing.policy import ValidationPolicy
from provreg.registry.collector import Registry


@dataclass
class RoundReport:
    """What a single round did to the registry."""

    number: int
    elements: int = 0
    removed: list[str] = field(default_factory=list)
    registered: list[tuple[str, str]] = field(default_factory=list)  # (target, provider)
    rejected: list[Diagnostic] = field(default_factory=list)
    final: bool = False
    modified: bool = False
    written: list[str] = field(default_factory=list)
    deleted: bool = False
    failures: list[Diagnostic] = field(default_factory=list)
    duration_ms: int = 0

    def summary(self) -> str:
        parts = [
            f"round {self.number}: {self.elements} element(s)",
            f"{len(self.registered)} registration(s)",
            f"{len(self.rejected)} rejection(s)",
        ]
        if self.final:
            if not self.modified:
                parts.append("output up to date")
            elif self.deleted:
                parts.append("output deleted")
            else:
                parts.append(f"{len(self.written)} resource(s) written")
        return ", ".join(parts)


class ReconciliationDriver:
    """Drives one processing session for one registry flavor.

    The registry is owned by the driver for the lifetime of the session and
    is never shared.
    """

    def __init__(
        self,
        policy: ValidationPolicy,
        persistence: PersistencePort,
        options: Optional[Options] = None,
        sink: Optional[DiagnosticSink] = None,
        logger: Optional[ProcessorLogger] = None,
    ):
        self.policy = policy
        self.persistence = persistence
        self.options = options or Options(processor_info=TOOL_NAME)
        self.sink = sink if sink is not None else DiagnosticSink()
        self.registry: Optional[Registry] = None
        self.logger: Optional[ProcessorLogger] = None
        self.rounds = 0
        self.finished = False

        if self.options.disabled:
            return

        self.logger = logger or ProcessorLogger(self.sink, self.options)
        self.registry = self._start_session()

    @property
    def disabled(self) -> bool:
        return self.registry is None

    def _start_session(self) -> Registry:
        registry = Registry(self.persistence, self.logger)
        for name in self.persistence.list_existing_names():
            registry.get(name)
        registry.cache()
        return registry

    def process_round(
        self,
        declarations: Iterable[Declaration],
        annotated: Optional[Iterable[Declaration]] = None,
        processing_over: bool = False,
    ) -> RoundReport:
        """Process one round.

        Args:
            declarations: Every top-level declaration visible in this round.
            annotated: Declarations carrying the policy's marker. Defaults to
                the marked declarations among ``declarations``.
            processing_over: True on the terminal round; triggers the flush.
        """
        if self.finished:
            raise RuntimeError("Session already finished; no further rounds accepted")

        self.rounds += 1
        report = RoundReport(number=self.rounds, final=processing_over)
        if self.disabled:
            if processing_over:
                self.finished = True
            return report

        start = time.monotonic()
        declarations = list(declarations)
        if annotated is None:
            annotated = [d for d in declarations if d.has_marker(self.policy.marker)]

        report.elements = len(declarations)
        self.logger.note(
            LogLocation.LOG_FILE, f"Starting round with {len(declarations)} elements"
        )

        self._remove_stale(self.registry, declarations, report)
        for declaration in annotated:
            self._handle(self.registry, declaration, report)

        report.duration_ms = int((time.monotonic() - start) * 1000)
        self.logger.note(
            LogLocation.LOG_FILE, f"Ending round in {report.duration_ms} milliseconds"
        )

        if processing_over:
            self._write(self.registry, report)
            self.finished = True
        return report

    def finish(self) -> RoundReport:
        """Run an empty terminal round."""
        return self.process_round([], [], processing_over=True)

    def _remove_stale(
        self, registry: Registry, declarations: list[Declaration], report: RoundReport
    ) -> None:
        # Over-eager on purpose: anything still valid is re-added by _handle
        for declaration in declarations:
            registry.remove_provider(declaration.name)
            report.removed.append(declaration.name)

    def _handle(
        self, registry: Registry, declaration: Declaration, report: RoundReport
    ) -> None:
        try:
            self.policy.check_candidate(declaration).raise_for_error(declaration)
        except ValidationRejected as e:
            report.rejected.append(self._report_rejection(declaration, e))
            return

        for target in self.policy.extract_target_names(declaration):
            try:
                self.policy.check_target(declaration, target).raise_for_error(declaration)
            except ValidationRejected as e:
                report.rejected.append(self._report_rejection(declaration, e))
                continue
            registry.get(target).add_provider(declaration.name)
            report.registered.append((target, declaration.name))

    def _report_rejection(
        self, declaration: Declaration, error: ValidationRejected
    ) -> Diagnostic:
        return self.sink.emit(
            Severity.ERROR,
            str(error),
            declaration=declaration.name,
            source_file=declaration.source_file,
            line=declaration.line,
        )

    def _write(self, registry: Registry, report: RoundReport) -> None:
        report.modified = registry.is_modified()
        if not report.modified:
            return

        self.logger.note(LogLocation.LOG_FILE, "Writing output")
        entries = registry.values()

        # Nothing left to list anywhere: drop the output instead of writing it
        if not any(entry.providers for entry in entries):
            try:
                self.persistence.delete()
                report.deleted = True
            except StorageError as e:
                self.logger.warning(
                    LogLocation.BOTH, f"An error occurred while deleting data file: {e}"
                )
            return

        for entry in entries:
            if not entry.providers:
                continue
            try:
                self.persistence.write(entry.name, entry.serialize())
                report.written.append(entry.name)
            except StorageError as e:
                report.failures.append(
                    self.sink.emit(Severity.ERROR, str(e), declaration=entry.name)
                )
        self.persistence.write_log(self.logger.file_content())
