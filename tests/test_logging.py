"""
Tests for timetable.logging

Test Coverage:
- Session context binding and unbinding
- Composer binds school and section
"""
import logging

import pytest
import structlog

from src.timetable.logging import bind_session_context, get_logger, setup_logging


@pytest.fixture(autouse=True)
def clean_context():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root.handlers, root.level = handlers, level


def test_bind_and_unbind_session_fields():
    bind_session_context(school="Test School", section="Primary")
    assert structlog.contextvars.get_contextvars() == {
        "school": "Test School",
        "section": "Primary",
    }

    bind_session_context(section=None)
    assert structlog.contextvars.get_contextvars() == {"school": "Test School"}


def test_composer_binds_section(composer):
    composer.select_section("Secondary")

    context = structlog.contextvars.get_contextvars()
    assert context["section"] == "Secondary"


def test_json_events_go_to_stderr(capsys):
    setup_logging(json_output=True, log_level="INFO")
    bind_session_context(section="Primary")

    get_logger("tests").info("cell_assigned", class_id="p1")

    captured = capsys.readouterr()
    assert captured.out == ""
    assert '"event": "cell_assigned"' in captured.err
    assert '"section": "Primary"' in captured.err
