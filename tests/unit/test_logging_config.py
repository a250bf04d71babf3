"""Structured logging setup."""

import logging

import structlog

from feedback_insights.logging_config import QUIET_LOGGERS, app_context, configure_logging


def test_app_context_adds_service_and_version():
    processor = app_context("feedback-insights", "1.2.3")

    event = processor(None, "info", {"event": "hello"})

    assert event["app"] == "feedback-insights"
    assert event["version"] == "1.2.3"


def test_app_context_keeps_existing_app_field():
    processor = app_context("feedback-insights")

    event = processor(None, "info", {"event": "hello", "app": "worker"})

    assert event == {"event": "hello", "app": "worker"}


def test_configure_logging_replaces_root_handler():
    configure_logging("WARNING", "production")
    configure_logging("DEBUG", "development")

    root = logging.getLogger()
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, structlog.stdlib.ProcessorFormatter)
    assert root.level == logging.DEBUG


def test_noisy_libraries_stay_quiet():
    configure_logging("DEBUG", "development")

    for name, level in QUIET_LOGGERS.items():
        assert logging.getLogger(name).level == level


def test_unknown_level_falls_back_to_info():
    configure_logging("chatty", "development")

    assert logging.getLogger().level == logging.INFO
