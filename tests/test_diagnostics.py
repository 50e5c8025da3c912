"""Tests for log locations, the processor logger and the diagnostic sink."""

import pytest

from provreg.config import Options
from provreg.diagnostics import (
    DiagnosticSink,
    LogLocation,
    ProcessorLogger,
    Severity,
    exception_to_string,
)
from provreg.errors import InvalidArgument

OPTIONS_VERBOSE = Options.from_mapping({"verbose": None})
OPTIONS_LOG = Options.from_mapping({"log": None})
OPTIONS_BOTH = Options.from_mapping({"log": None, "verbose": None})


def _logger(options: Options) -> tuple[ProcessorLogger, DiagnosticSink]:
    sink = DiagnosticSink()
    logger = ProcessorLogger(sink, options)
    sink.reset()
    return logger, sink


# --- LogLocation Tests ---


def test_log_locations():
    assert LogLocation.MESSAGER.to_messager()
    assert not LogLocation.MESSAGER.to_log_file()
    assert not LogLocation.LOG_FILE.to_messager()
    assert LogLocation.LOG_FILE.to_log_file()
    assert LogLocation.BOTH.to_messager()
    assert LogLocation.BOTH.to_log_file()


# --- ProcessorLogger Tests ---


def test_logger_requires_sink_and_options():
    with pytest.raises(InvalidArgument):
        ProcessorLogger(None, OPTIONS_VERBOSE)
    with pytest.raises(InvalidArgument):
        ProcessorLogger(DiagnosticSink(), None)


def test_logger_reports_options_on_creation():
    sink = DiagnosticSink()
    logger = ProcessorLogger(sink, OPTIONS_BOTH)
    assert logger.file_content() == ""
    assert len(sink.diagnostics) == 1
    assert sink.diagnostics[0].severity == Severity.NOTE
    assert sink.diagnostics[0].message == OPTIONS_BOTH.report()


def test_logger_reports_option_warnings():
    options = Options.from_mapping({"log": "true", "verbose": "true", "disabled": "yes"})
    sink = DiagnosticSink()
    logger = ProcessorLogger(sink, options)

    assert len(options.warnings) == 1
    assert sink.diagnostics[0].message == options.report()
    assert [d.message for d in sink.warnings] == options.warnings
    assert logger.file_content() == f"warning: {options.warnings[0]}\n"


def test_note_rejects_missing_arguments():
    logger, _ = _logger(OPTIONS_BOTH)
    with pytest.raises(InvalidArgument):
        logger.note(None, "")
    with pytest.raises(InvalidArgument):
        logger.note(LogLocation.BOTH, None)


def test_note_to_messager_requires_verbose():
    logger, sink = _logger(OPTIONS_LOG)
    logger.note(LogLocation.MESSAGER, "message")
    assert sink.diagnostics == []


def test_note_to_messager_verbose():
    logger, sink = _logger(OPTIONS_VERBOSE)
    logger.note(LogLocation.MESSAGER, "message")
    assert len(sink.diagnostics) == 1
    assert sink.diagnostics[0].message == "message"
    assert sink.diagnostics[0].severity == Severity.NOTE


def test_note_to_file_requires_log():
    logger, _ = _logger(OPTIONS_VERBOSE)
    logger.note(LogLocation.LOG_FILE, "message")
    assert logger.file_content() == ""


def test_note_to_file_logging():
    logger, _ = _logger(OPTIONS_LOG)
    logger.note(LogLocation.LOG_FILE, "message")
    assert logger.file_content() == "message\n"


def test_note_to_both():
    logger, sink = _logger(OPTIONS_BOTH)
    logger.note(LogLocation.BOTH, "message")
    assert logger.file_content() == "message\n"
    assert [d.message for d in sink.notes] == ["message"]


def test_warning_to_messager_always_shown():
    for options in (OPTIONS_LOG, OPTIONS_VERBOSE):
        logger, sink = _logger(options)
        logger.warning(LogLocation.MESSAGER, "message")
        assert len(sink.diagnostics) == 1
        assert sink.diagnostics[0].severity == Severity.WARNING
        assert sink.diagnostics[0].message == "message"


def test_warning_to_file():
    logger, _ = _logger(OPTIONS_VERBOSE)
    logger.warning(LogLocation.LOG_FILE, "message")
    assert logger.file_content() == ""

    logger, _ = _logger(OPTIONS_LOG)
    logger.warning(LogLocation.LOG_FILE, "message")
    assert logger.file_content() == "warning: message\n"


def test_warning_to_both():
    logger, sink = _logger(OPTIONS_BOTH)
    logger.warning(LogLocation.BOTH, "message")
    assert logger.file_content() == "warning: message\n"
    assert [d.message for d in sink.warnings] == ["message"]


# --- Sink Tests ---


def test_sink_summary():
    sink = DiagnosticSink()
    sink.emit(Severity.WARNING, "careful")
    assert not sink.has_errors
    assert sink.summary() == "[OK] 0 error(s), 1 warning(s)"

    diagnostic = sink.emit(Severity.ERROR, "broken", source_file="pkg/mod.py", line=3)
    assert sink.has_errors
    assert diagnostic.location == "pkg/mod.py:3"
    assert sink.summary() == "[FAIL] 1 error(s), 1 warning(s)"


def test_exception_to_string():
    try:
        raise RuntimeError("%%test message%%")
    except RuntimeError as e:
        rendered = exception_to_string(e)
    assert "RuntimeError: %%test message%%" in rendered
    assert "Traceback" in rendered
