"""Test the centralized logging functionality."""

import logging
from io import StringIO

import pytest

from netcalc.analysis import TotalFlowAnalysis
from netcalc.logging import (
    LOG_LEVEL_ENV,
    disable_debug_logging,
    enable_debug_logging,
    get_logger,
    resolve_level,
    reset_logging,
    set_global_log_level,
    setup_root_logger,
)


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    reset_logging()
    setup_root_logger()


def test_centralized_logging():
    """Test that centralized logging works properly."""
    logger = get_logger("netcalc.test")

    log_capture = StringIO()
    handler = logging.StreamHandler(log_capture)
    handler.setLevel(logging.DEBUG)
    logger.handlers.clear()
    logger.addHandler(handler)

    # Info appears by default
    logger.info("Test info message")
    assert "Test info message" in log_capture.getvalue()

    # Debug does not
    log_capture.seek(0)
    log_capture.truncate(0)
    logger.debug("Test debug message")
    assert "Test debug message" not in log_capture.getvalue()

    enable_debug_logging()
    logger.debug("Test debug message after enable")
    assert "Test debug message after enable" in log_capture.getvalue()

    disable_debug_logging()
    logger.handlers.clear()


def test_logger_naming():
    """Test that loggers use consistent naming."""
    logger = get_logger("netcalc.analysis.test")
    assert logger.name == "netcalc.analysis.test"
    assert logger.level == logging.NOTSET


def test_global_level_applies_to_children():
    logger1 = get_logger("netcalc.module1")
    logger2 = get_logger("netcalc.module2")
    assert logger1 is not logger2

    set_global_log_level(logging.WARNING)
    root_logger = logging.getLogger("netcalc")
    assert root_logger.level == logging.WARNING
    assert logger1.getEffectiveLevel() == logging.WARNING
    assert logger2.getEffectiveLevel() == logging.WARNING


def test_single_root_handler():
    setup_root_logger()
    setup_root_logger()
    assert len(logging.getLogger("netcalc").handlers) == 1


def test_reset_logging():
    reset_logging()
    root_logger = logging.getLogger("netcalc")
    assert root_logger.handlers == []
    assert root_logger.level == logging.NOTSET


def test_analysis_logs_result(caplog, sink_tree_double):
    with caplog.at_level(logging.INFO, logger="netcalc"):
        TotalFlowAnalysis(sink_tree_double).analyze("f0")
    assert any("TFA flow f0" in r.getMessage() for r in caplog.records)


def test_analysis_logs_hops_at_debug(caplog, sink_tree_double):
    enable_debug_logging()
    with caplog.at_level(logging.DEBUG, logger="netcalc"):
        TotalFlowAnalysis(sink_tree_double).analyze("f0")
    assert any(r.levelno == logging.DEBUG and "at s5" in r.getMessage() for r in caplog.records)


def test_errors_are_logged(caplog, sink_tree_double):
    with caplog.at_level(logging.ERROR, logger="netcalc"):
        with pytest.raises(ValueError):
            sink_tree_double.add_turn("s0", "s1")
    assert any("Duplicate turn" in r.getMessage() for r in caplog.records)


@pytest.mark.parametrize(
    "level,expected",
    [(logging.WARNING, logging.WARNING), ("debug", logging.DEBUG), (" Error ", logging.ERROR), ("15", 15)],
)
def test_resolve_level(level, expected):
    assert resolve_level(level) == expected


def test_resolve_level_rejects_unknown_name():
    with pytest.raises(ValueError, match="Invalid log level"):
        resolve_level("chatty")


def test_global_level_accepts_names():
    set_global_log_level("warning")
    assert logging.getLogger("netcalc").level == logging.WARNING


@pytest.mark.parametrize("raw,expected", [("debug", logging.DEBUG), ("30", logging.WARNING), ("chatty", logging.INFO)])
def test_level_from_environment(monkeypatch, raw, expected):
    monkeypatch.setenv(LOG_LEVEL_ENV, raw)
    reset_logging()
    setup_root_logger()
    assert logging.getLogger("netcalc").level == expected


def test_explicit_level_wins_over_environment(monkeypatch):
    monkeypatch.setenv(LOG_LEVEL_ENV, "debug")
    reset_logging()
    setup_root_logger(level="error")
    assert logging.getLogger("netcalc").level == logging.ERROR


def test_component_debug_logging(caplog, sink_tree_double):
    """Only the analysis loggers emit per-hop records."""
    set_global_log_level(logging.INFO)
    enable_debug_logging("analysis")
    other = get_logger("netcalc.model.test")

    TotalFlowAnalysis(sink_tree_double).analyze("f0")
    other.debug("model detail")

    debug = [r for r in caplog.records if r.levelno == logging.DEBUG]
    assert any(r.name == "netcalc.analysis.tfa" and "at s5" in r.getMessage() for r in debug)
    assert all(r.name.startswith("netcalc.analysis") for r in debug)
    assert logging.getLogger("netcalc").level == logging.INFO

    disable_debug_logging()
    assert logging.getLogger("netcalc.analysis").level == logging.NOTSET
    assert not logging.getLogger("netcalc.analysis.tfa").isEnabledFor(logging.DEBUG)
