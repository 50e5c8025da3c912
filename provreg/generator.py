"""Registry generator — runs a full processing session over a source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from provreg import TOOL_NAME
from provreg.config import Options
from provreg.diagnostics import (
    DiagnosticSink,
    LogLocation,
    ProcessorLogger,
    Severity,
    exception_to_string,
)
from provreg.frontend.source_round import scan_source_tree
from provreg.persistence.file_persistence import FilePersistence
from provreg.processing.driver import ReconciliationDriver, RoundReport
from provreg.processing.policy import STRICT_SERVICE, ValidationPolicy


@dataclass
class GenerateResult:
    """Outcome of one ``generate`` session."""

    flavor: str
    resource_dir: Path
    rounds: list[RoundReport] = field(default_factory=list)
    sink: DiagnosticSink = field(default_factory=DiagnosticSink)
    disabled: bool = False

    @property
    def passed(self) -> bool:
        return not self.sink.has_errors

    @property
    def final(self) -> Optional[RoundReport]:
        return self.rounds[-1] if self.rounds else None


class RegistryGenerator:
    """Generates the provider resources of one registry flavor."""

    def __init__(
        self,
        source_root: str | Path,
        output_root: str | Path | None = None,
        policy: ValidationPolicy = STRICT_SERVICE,
        options: Optional[Options] = None,
    ):
        self.source_root = Path(source_root)
        self.output_root = Path(output_root) if output_root else self.source_root
        self.policy = policy
        self.options = options or Options(processor_info=TOOL_NAME)
        self.dir = self.options.dir or policy.default_dir

    @property
    def resource_dir(self) -> Path:
        return self.output_root / self.dir

    def generate(self, sink: Optional[DiagnosticSink] = None) -> GenerateResult:
        """Scan the source tree and bring the resources up to date.

        The session runs two rounds: one with every declaration found, then
        an empty terminal round that flushes the output.
        """
        sink = sink if sink is not None else DiagnosticSink()
        result = GenerateResult(flavor=self.policy.name, resource_dir=self.resource_dir, sink=sink)
        if self.options.disabled:
            result.disabled = True
            return result

        logger = ProcessorLogger(sink, self.options)
        persistence = FilePersistence(self.output_root, self.dir, logger=logger)
        try:
            driver = ReconciliationDriver(self.policy, persistence, self.options, sink, logger)
        except OSError as e:
            # Existing resources could not be loaded; nothing safe to write
            sink.emit(Severity.ERROR, exception_to_string(e))
            return result

        source = scan_source_tree(self.source_root)
        for error in source.syntax_errors:
            logger.warning(LogLocation.BOTH, f"Skipping unparsable module {error}")

        result.rounds.append(driver.process_round(source.declarations, source.annotated))
        result.rounds.append(driver.finish())
        return result
