"""
Tests for scripts/compose_timetable.py

Test Coverage:
- Argument validation (--update only together with --execute)
- Dry-run replays the sample plan and prints the payload on stdout
"""
import argparse
import importlib.util
import json
import logging
from pathlib import Path

import pytest
import structlog

from src.timetable.config import ComposerConfig

ROOT = Path(__file__).resolve().parent.parent


@pytest.fixture
def script():
    spec = importlib.util.spec_from_file_location(
        "compose_timetable", ROOT / "scripts" / "compose_timetable.py"
    )
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.contextvars.clear_contextvars()
    structlog.reset_defaults()
    root.handlers, root.level = handlers, level


def test_update_without_execute_is_rejected(script, monkeypatch, capsys):
    monkeypatch.setattr(
        "sys.argv",
        ["compose_timetable.py", "--plan", "plan.json", "--update", "tt-1"],
    )

    with pytest.raises(SystemExit) as exc:
        script._parse_args()

    assert exc.value.code == 2
    assert "--update requires --execute" in capsys.readouterr().err


def test_dry_run_prints_payload(script, monkeypatch, capsys):
    config = ComposerConfig(_env_file=None, school_name="Test School")
    monkeypatch.setattr(script, "get_config", lambda: config)
    args = argparse.Namespace(
        plan=ROOT / "data" / "sample_plan.json",
        execute=False,
        update=None,
        no_grid=True,
    )

    assert script.main(args) == 0

    captured = capsys.readouterr()
    payload = json.loads(captured.out)
    assert len(payload["entries"]) == 8
    assert {e["section"] for e in payload["entries"]} == {"Primary"}
    assert payload["name"].startswith("Test School | Section: Primary | Classes: P.1, P.2, P.3")
    assert "DRY RUN" in captured.err
