from __future__ import annotations

import logging
from io import StringIO

import shipment_recon.logging.init as log_init
from shipment_recon.logging.init import (
    LabeledFormatter,
    SUMMARY_LEVEL,
    enable_debug,
    get_logger,
    log_summary,
    reset_logging,
    setup_logging,
)


def _capture(logger: logging.Logger) -> StringIO:
    out = StringIO()
    for h in logger.handlers[:]:
        logger.removeHandler(h)
    handler = logging.StreamHandler(out)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)
    return out


def test_setup_logging_creates_logger_with_labeled_formatter():
    reset_logging()
    logger = setup_logging()
    assert logger.name == "shipment_recon"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0].formatter, LabeledFormatter)
    assert logger.propagate is False


def test_setup_logging_idempotent():
    reset_logging()
    logger1 = setup_logging()
    logger2 = setup_logging()
    assert logger1 is logger2
    assert len(logger1.handlers) == 1
    assert get_logger() is logger1


def test_logging_labeled_prefixes():
    reset_logging()
    logger = setup_logging()
    out = _capture(logger)
    logger.info("Test info message")
    logger.warning("Test warning message")
    logger.error("Test error message")
    logger.log(SUMMARY_LEVEL, "Test summary message")
    lines = out.getvalue().strip().split("\n")
    assert lines == [
        "INFO Test info message",
        "WARN Test warning message",
        "ERROR Test error message",
        "SUMMARY Test summary message",
    ]
    reset_logging()


def test_module_loggers_propagate_to_app_logger():
    reset_logging()
    logger = setup_logging()
    out = _capture(logger)
    logging.getLogger("shipment_recon.services.engine").info("keys: primary=1 reference=0")
    assert out.getvalue().strip() == "INFO keys: primary=1 reference=0"
    reset_logging()


def test_enable_debug_lowers_levels():
    reset_logging()
    logger = setup_logging()
    out = _capture(logger)
    enable_debug(logger)
    assert logger.level == logging.DEBUG
    assert all(h.level == logging.DEBUG for h in logger.handlers)
    assert "DEBUG debug mode enabled" in out.getvalue()
    reset_logging()


def test_log_summary_convenience_function():
    reset_logging()
    logger = setup_logging()
    out = _capture(logger)
    log_summary("primary_keys=3 matched=1")
    assert out.getvalue().strip() == "SUMMARY primary_keys=3 matched=1"
    assert log_init._logger is logger
    reset_logging()
