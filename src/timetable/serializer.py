"""Serializer - flattens the Cell Store into persistence entries at save time.

Reads the Cell Store only. Merging is a rendering concept: a block of N
merged cells yields N entries, one per physical cell.
"""

from collections.abc import Iterable

from src.timetable.errors import EmptyTimetableError
from src.timetable.grid import CellStore
from src.timetable.logging import get_logger
from src.timetable.models import ClassRef, PersistEntry, SpecialPeriod

log = get_logger(__name__)


def serialize(
    store: CellStore,
    selected_classes: Iterable[ClassRef],
    special_periods: Iterable[SpecialPeriod],
    *,
    section: str | None = None,
) -> list[PersistEntry]:
    """Build one PersistEntry per stored cell that is worth persisting.

    Skips cells in special-period slots and cells of classes that are no
    longer selected (left over from a class deselected mid-session).

    Args:
        store: Cell Store to read.
        selected_classes: Currently displayed classes.
        special_periods: Reserved slots to leave out.
        section: Section stamped on every entry.

    Returns:
        Entries in Cell Store order.

    Raises:
        EmptyTimetableError: If no entry survives the filters.
    """
    class_ids = {c.id for c in selected_classes}
    special_slots = {p.time_slot for p in special_periods}

    entries: list[PersistEntry] = []
    skipped_special = 0
    skipped_stale = 0
    for cell, content in store.items():
        if cell.time_slot in special_slots:
            skipped_special += 1
            continue
        if cell.class_id not in class_ids:
            skipped_stale += 1
            continue
        entries.append(
            PersistEntry(
                day=cell.day,
                time_slot=cell.time_slot,
                subject_activity_id=content.id,
                class_id=cell.class_id,
                section=section,
            )
        )

    log.info(
        "entries_serialized",
        entries=len(entries),
        skipped_special=skipped_special,
        skipped_stale=skipped_stale,
    )

    if not entries:
        raise EmptyTimetableError(
            "No timetable data to save. Please add at least one subject to the timetable."
        )
    return entries
