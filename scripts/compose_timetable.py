"""
Compose a weekly class timetable from a JSON plan and save it to the backend.

Replays the plan's assignments and clears through the grid composer, prints
the merged grid, then either prints the save payload (dry-run) or posts it.

Usage:
    python scripts/compose_timetable.py --plan data/sample_plan.json            # dry-run (default)
    python scripts/compose_timetable.py --plan data/sample_plan.json --execute  # POST /timetable/create
    python scripts/compose_timetable.py --plan plan.json --execute --update <timetable-id>

Plan format:
    {
      "section": "Primary",
      "classes":    [{"id": "p1", "name": "P.1", "section": "Primary"}, ...],
      "subjects":   [{"id": "math", "name": "Mathematics"}, ...],
      "activities": [{"id": "swim", "name": "Swimming"}, ...],
      "display":    ["p1", "p2"],
      "assign": [{"day": "MON", "timeSlot": "8:00am-9:00am", "classId": "p1", "content": "math"}],
      "clear":  [{"day": "MON", "timeSlot": "8:00am-9:00am", "classId": "p1"}]
    }

With --execute, classes/subjects/activities and the active academic year and
term are fetched from the API instead of the plan.

Exit codes:
  0 = success
  1 = validation, API or save failure (message on stderr)
"""

import argparse
import json
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add project root to path for src imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from src.timetable.catalog import Catalog  # noqa: E402
from src.timetable.client import TimetableApiClient  # noqa: E402
from src.timetable.composer import TimetableComposer  # noqa: E402
from src.timetable.config import get_config  # noqa: E402
from src.timetable.errors import ComposerError  # noqa: E402
from src.timetable.logging import setup_logging  # noqa: E402
from src.timetable.models import CatalogItem, ClassRef  # noqa: E402
from src.timetable.view import render_text  # noqa: E402


def _log(msg: str) -> None:
    """Write diagnostic messages to stderr so stdout stays clean for JSON."""
    print(msg, file=sys.stderr)


def _parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Compose a weekly class timetable and save it to the backend.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--plan",
        type=Path,
        required=True,
        help="JSON plan with section, displayed classes, assignments and clears.",
    )
    parser.add_argument(
        "--execute",
        action="store_true",
        help="Fetch the catalog from the API and save the timetable (default: dry-run).",
    )
    parser.add_argument(
        "--update",
        metavar="TIMETABLE_ID",
        default=None,
        help="Replace the entries of an existing timetable instead of creating one.",
    )
    parser.add_argument(
        "--no-grid",
        action="store_true",
        help="Do not print the composed grid.",
    )
    args = parser.parse_args()
    if args.update and not args.execute:
        parser.error("--update requires --execute")
    return args


def _catalog_from_plan(plan: dict) -> Catalog:
    return Catalog(
        classes=[ClassRef.model_validate(c) for c in plan.get("classes", [])],
        subjects=[CatalogItem.model_validate(s) for s in plan.get("subjects", [])],
        activities=[CatalogItem.model_validate(a) for a in plan.get("activities", [])],
    )


def _apply_plan(composer: TimetableComposer, plan: dict) -> None:
    """Replay the plan in order: section, displayed classes, assignments, clears."""
    if plan.get("section"):
        composer.select_section(plan["section"])
    composer.select_classes(plan.get("display", []))

    for step in plan.get("assign", []):
        composer.assign(step["day"], step["timeSlot"], step["classId"], step["content"])
    for step in plan.get("clear", []):
        composer.clear(step["day"], step["timeSlot"], step["classId"])


def main(args: argparse.Namespace) -> int:
    config = get_config()
    setup_logging(json_output=config.log_json, log_level=config.log_level)

    with open(args.plan, encoding="utf-8") as f:
        plan = json.load(f)

    client = None
    academic_year = term = None
    if args.execute:
        client = TimetableApiClient.from_config(config)
        catalog = client.fetch_catalog()
        academic_year = client.fetch_active_academic_year()
        term = client.fetch_active_term()
    else:
        catalog = _catalog_from_plan(plan)

    composer = TimetableComposer(catalog, school_name=config.school_name)
    _apply_plan(composer, plan)

    if not args.no_grid:
        _log(render_text(composer.grid_view()))
        _log("")

    payload = composer.build_payload(academic_year, term)

    if not args.execute:
        print(json.dumps(payload.to_wire(), indent=2, ensure_ascii=False))
        _log(f"--- DRY RUN -- {len(payload.entries)} entries, no API calls ---")
        _log("Run with --execute to save the timetable.")
        return 0

    result = composer.save(client, academic_year, term, timetable_id=args.update)
    if not result.success:
        _log(f"Save failed: {result.message}")
        return 1
    _log(result.message)
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main(_parse_args()))
    except ComposerError as e:
        _log(f"Error: {e}")
        sys.exit(1)
