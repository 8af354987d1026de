"""TimetableComposer - one weekly timetable editing session.

Owns the Cell Store and Merge Index exclusively and routes every user action
through the Merge and Clear engines. All mutations are synchronous and run to
completion; the only I/O is the save hand-off, which never rolls anything
back, so a failed save can simply be retried.
"""

from collections.abc import Iterable

from src.timetable.axes import AxisCatalog
from src.timetable.catalog import Catalog
from src.timetable.clear import ClearEngine
from src.timetable.client import TimetableApiClient
from src.timetable.errors import (
    InvalidCellError,
    MissingSectionError,
    UnknownContentError,
)
from src.timetable.grid import Axis, CellId, CellStore, MergeIndex, MergeState, Root
from src.timetable.logging import bind_session_context, get_logger
from src.timetable.merge import MergeEngine
from src.timetable.models import (
    AcademicYear,
    ClassRef,
    ContentRef,
    PersistEntry,
    SaveResult,
    Term,
    TimetablePayload,
)
from src.timetable.serializer import serialize
from src.timetable.view import GridRow, build_grid_view

log = get_logger(__name__)


class TimetableComposer:
    """Weekly timetable builder: assign, merge, clear, serialize, save."""

    def __init__(
        self,
        catalog: Catalog,
        axes: AxisCatalog | None = None,
        *,
        school_name: str = "",
    ) -> None:
        self.catalog = catalog
        self.axes = axes or AxisCatalog()
        self.school_name = school_name
        bind_session_context(school=school_name or None)
        self.section: str | None = None

        self.store = CellStore()
        self.index = MergeIndex()
        self.merger = MergeEngine(self.store, self.index, self.axes)
        self.clearer = ClearEngine(self.store, self.index, self.merger)

    # -- class selection -------------------------------------------------

    def select_section(self, section: str) -> None:
        """Choose the section; its classes become available, none displayed."""
        self.section = section
        bind_session_context(section=section)
        self.axes.select_classes([])
        self._rebuild_class_groups()
        log.info(
            "section_selected",
            section=section,
            available=[c.id for c in self.available_classes()],
        )

    def available_classes(self) -> list[ClassRef]:
        if self.section is None:
            return list(self.catalog.classes)
        return self.catalog.classes_in_section(self.section)

    def toggle_class(self, class_id: str) -> bool:
        """Show or hide a class row. Cell data of hidden classes is kept."""
        cls = self.catalog.class_by_id(class_id)
        if cls is None:
            raise InvalidCellError(f"Unknown class {class_id!r}")
        displayed = self.axes.toggle_class(cls)
        self._rebuild_class_groups()
        return displayed

    def select_classes(self, class_ids: Iterable[str]) -> None:
        classes = []
        for class_id in class_ids:
            cls = self.catalog.class_by_id(class_id)
            if cls is None:
                raise InvalidCellError(f"Unknown class {class_id!r}")
            classes.append(cls)
        self.axes.select_classes(classes)
        self._rebuild_class_groups()

    def _rebuild_class_groups(self) -> None:
        """Re-form class-axis groups after the displayed row order changed.

        Every stored cell of a displayed class that is not held by a time-axis
        group is rescanned, so classes that just became adjacent can merge.
        """
        released: list[CellId] = []
        for cell in self.index:
            if self.index.group_axis(cell) is Axis.CLASS:
                released.append(cell)
        for cell in released:
            self.index.discard(cell)

        candidates = set(released)
        for cell, _ in self.store.items():
            if (
                self.axes.is_displayed(cell.class_id)
                and not self.axes.is_special(cell.time_slot)
                and self.index.group_axis(cell) is None
            ):
                candidates.add(cell)

        self.merger.regroup(sorted(candidates, key=self.axes.sort_key), Axis.CLASS)
        log.debug("class_groups_rebuilt", released=len(released), scanned=len(candidates))

    # -- editing ---------------------------------------------------------

    def assign(self, day: str, time_slot: str, class_id: str, content_id: str) -> ContentRef:
        """Put a subject or activity into a cell and merge it with its neighbours.

        Raises:
            SpecialPeriodError: If the slot is a special period.
            InvalidCellError: If the cell is outside the displayed grid.
            UnknownContentError: If the id is neither a subject nor an activity.
        """
        cell = CellId(day, time_slot, class_id)
        self.axes.check_editable(cell)
        content = self.catalog.resolve(content_id)

        self._put(cell, content)

        log.info(
            "cell_assigned",
            day=day,
            time_slot=time_slot,
            class_id=class_id,
            content=content.id,
            kind=content.kind.value,
        )
        return content

    def _put(self, cell: CellId, content: ContentRef) -> None:
        """Store content and merge it, leaving the old group first if it changed."""
        previous = self.store.get(cell)
        self.store.set(cell, content)
        if previous is not None and previous != content:
            self.clearer.detach(cell)
        self.merger.merge(cell, content)

    def clear(self, day: str, time_slot: str, class_id: str) -> list[CellId]:
        """Clear a cell (its whole group if it is a merge root).

        Returns:
            The cells that were emptied; empty when the cell already was.
        """
        cell = CellId(day, time_slot, class_id)
        self.axes.check_editable(cell)
        return self.clearer.clear(cell)

    def load_entries(self, entries: Iterable[PersistEntry]) -> int:
        """Replay persisted entries into this session, recomputing merges.

        Entries for special periods or classes that are not displayed are
        skipped, as are unknown content ids.

        Returns:
            Number of entries loaded.
        """
        loaded = 0
        for entry in entries:
            cell = CellId(entry.day, entry.time_slot, entry.class_id)
            try:
                self.axes.check_editable(cell)
                content = self.catalog.resolve(entry.subject_activity_id)
            except (InvalidCellError, UnknownContentError) as e:
                log.warning("entry_skipped", entry=entry.model_dump(), reason=str(e))
                continue
            self._put(cell, content)
            loaded += 1
        log.info("entries_loaded", loaded=loaded)
        return loaded

    # -- queries ---------------------------------------------------------

    def content_at(self, day: str, time_slot: str, class_id: str) -> ContentRef | None:
        return self.store.get(CellId(day, time_slot, class_id))

    def display_name_at(self, day: str, time_slot: str, class_id: str) -> str:
        content = self.content_at(day, time_slot, class_id)
        return self.catalog.display_name(content) if content is not None else ""

    def merge_state(self, day: str, time_slot: str, class_id: str) -> MergeState | None:
        return self.index.get(CellId(day, time_slot, class_id))

    def is_merge_root(self, day: str, time_slot: str, class_id: str) -> bool:
        return self.index.is_root(CellId(day, time_slot, class_id))

    def spans(self, day: str, time_slot: str, class_id: str) -> tuple[int, int]:
        """(col_span, row_span) to render the cell with."""
        state = self.merge_state(day, time_slot, class_id)
        if isinstance(state, Root):
            return state.col_span, state.row_span
        return 1, 1

    def grid_view(self) -> list[GridRow]:
        return build_grid_view(self)

    # -- persistence -----------------------------------------------------

    def serialize(self) -> list[PersistEntry]:
        """Flatten the Cell Store in grid order.

        Raises:
            EmptyTimetableError: If nothing survives the filters.
        """
        entries = serialize(
            self.store,
            self.axes.classes,
            self.axes.special_periods,
            section=self.section,
        )
        entries.sort(
            key=lambda e: self.axes.sort_key(CellId(e.day, e.time_slot, e.class_id))
        )
        return entries

    def timetable_name(self, academic_year: AcademicYear | None, term: Term | None) -> str:
        parts = [
            self.school_name,
            f"Section: {self.section or ''}",
            f"Classes: {', '.join(c.name for c in self.axes.classes)}",
            academic_year.year if academic_year else "",
            term.name if term else "",
        ]
        return " | ".join(p for p in parts if p)

    def build_payload(
        self,
        academic_year: AcademicYear | None = None,
        term: Term | None = None,
    ) -> TimetablePayload:
        """Assemble the save payload.

        Raises:
            MissingSectionError: If no section has been selected.
            EmptyTimetableError: If there is nothing to save.
        """
        if not self.section:
            raise MissingSectionError("Please select a section before saving.")
        entries = self.serialize()
        return TimetablePayload(
            name=self.timetable_name(academic_year, term),
            academic_year_id=academic_year.id if academic_year else None,
            term_id=term.id if term else None,
            special_periods=list(self.axes.special_periods),
            entries=entries,
        )

    def save(
        self,
        client: TimetableApiClient,
        academic_year: AcademicYear | None = None,
        term: Term | None = None,
        *,
        timetable_id: str | None = None,
    ) -> SaveResult:
        """Send the timetable to the backend (create, or replace when an id is given).

        The grid is left exactly as edited whatever the outcome.
        """
        payload = self.build_payload(academic_year, term)
        log.info("timetable_save_started", entries=len(payload.entries), timetable_id=timetable_id)
        if timetable_id:
            return client.update_timetable(timetable_id, payload)
        return client.create_timetable(payload)
