"""Axis catalog - the days, time slots and class rows spanning the grid.

Days and time slots are fixed for the template. Special periods are a subset
of the time slots that are reserved across every day and class and never take
part in editing or merging. Classes are chosen per session; their order in
the displayed set defines adjacency along the class axis.
"""

from collections.abc import Iterable, Sequence

from src.timetable.errors import InvalidCellError, SpecialPeriodError
from src.timetable.grid import Axis, CellId
from src.timetable.logging import get_logger
from src.timetable.models import ClassRef, SpecialPeriod

log = get_logger(__name__)

DAYS: tuple[str, ...] = ("MON", "TUE", "WED", "THUR", "FRI", "SAT", "SUN")

TIME_SLOTS: tuple[str, ...] = (
    "6:30am-7:30am",
    "7:30am-8:00am",
    "8:00am-9:00am",
    "9:00am-10:30am",
    "10:30am-11:00am",
    "11:00am-12:00pm",
    "12:00pm-1:00pm",
    "1:00pm-2:00pm",
    "2:00pm-3:00pm",
    "3:00pm-4:00pm",
    "4:00pm-5:00pm",
    "5:00pm-7:00pm",
)

SPECIAL_PERIODS: tuple[SpecialPeriod, ...] = (
    SpecialPeriod(
        time_slot="7:30am-8:00am",
        label="MORNING TEA",
        style_hint="bg-blue-200",
        light_style_hint="bg-blue-100",
    ),
    SpecialPeriod(
        time_slot="10:30am-11:00am",
        label="BREAK TIME",
        style_hint="bg-orange-200",
        light_style_hint="bg-orange-100",
    ),
    SpecialPeriod(
        time_slot="1:00pm-2:00pm",
        label="LUNCH TIME",
        style_hint="bg-green-200",
        light_style_hint="bg-green-100",
    ),
    SpecialPeriod(
        time_slot="5:00pm-7:00pm",
        label="PRAYERS/PERSONAL ADMIN",
        style_hint="bg-purple-200",
        light_style_hint="bg-purple-100",
    ),
)


class AxisCatalog:
    """Static days/slots/special periods plus the session's displayed classes."""

    def __init__(
        self,
        days: Sequence[str] = DAYS,
        time_slots: Sequence[str] = TIME_SLOTS,
        special_periods: Iterable[SpecialPeriod] = SPECIAL_PERIODS,
    ) -> None:
        self.days: tuple[str, ...] = tuple(days)
        self.time_slots: tuple[str, ...] = tuple(time_slots)
        self.special_periods: tuple[SpecialPeriod, ...] = tuple(special_periods)

        self._day_index = {day: i for i, day in enumerate(self.days)}
        self._slot_index = {slot: i for i, slot in enumerate(self.time_slots)}
        self._special = {p.time_slot: p for p in self.special_periods}

        unknown = set(self._special) - set(self._slot_index)
        if unknown:
            raise ValueError(f"Special periods for unknown time slots: {sorted(unknown)}")

        self._classes: list[ClassRef] = []
        self._class_index: dict[str, int] = {}
        # Names of every class ever displayed, deselected ones included
        self._class_names: dict[str, str] = {}

    # -- special periods ------------------------------------------------

    def is_special(self, time_slot: str) -> bool:
        return time_slot in self._special

    def special_period(self, time_slot: str) -> SpecialPeriod | None:
        return self._special.get(time_slot)

    @property
    def special_slots(self) -> frozenset[str]:
        return frozenset(self._special)

    # -- displayed classes ----------------------------------------------

    @property
    def classes(self) -> tuple[ClassRef, ...]:
        """Displayed classes in row order."""
        return tuple(self._classes)

    def select_classes(self, classes: Iterable[ClassRef]) -> None:
        """Replace the displayed class rows, keeping the given order."""
        self._classes = []
        for cls in classes:
            if cls.id not in {c.id for c in self._classes}:
                self._classes.append(cls)
        self._reindex()
        log.debug("classes_selected", class_ids=[c.id for c in self._classes])

    def toggle_class(self, cls: ClassRef) -> bool:
        """Add the class as the last row, or remove it if already displayed.

        Returns:
            True if the class is displayed after the call.
        """
        if cls.id in self._class_index:
            self._classes = [c for c in self._classes if c.id != cls.id]
            displayed = False
        else:
            self._classes.append(cls)
            displayed = True
        self._reindex()
        log.debug("class_toggled", class_id=cls.id, displayed=displayed)
        return displayed

    def _reindex(self) -> None:
        self._class_index = {c.id: i for i, c in enumerate(self._classes)}
        for c in self._classes:
            self._class_names[c.id] = c.name

    def is_displayed(self, class_id: str) -> bool:
        return class_id in self._class_index

    def class_name(self, class_id: str) -> str:
        return self._class_names.get(class_id, class_id)

    # -- positions and adjacency ----------------------------------------

    def day_index(self, day: str) -> int:
        return self._day_index[day]

    def slot_index(self, time_slot: str) -> int:
        return self._slot_index[time_slot]

    def class_index(self, class_id: str) -> int | None:
        return self._class_index.get(class_id)

    def position(self, cell: CellId, axis: Axis) -> int:
        """Index of the cell along the given axis (-1 for a hidden class)."""
        if axis is Axis.TIME:
            return self._slot_index.get(cell.time_slot, -1)
        index = self._class_index.get(cell.class_id)
        return -1 if index is None else index

    def neighbor(self, cell: CellId, axis: Axis, step: int) -> CellId | None:
        """Adjacent cell along an axis, or None past the edge of the grid.

        Class-axis adjacency follows the displayed row order; a class that is
        not displayed has no class-axis neighbours.
        """
        if axis is Axis.TIME:
            index = self._slot_index.get(cell.time_slot)
            if index is None:
                return None
            index += step
            if not 0 <= index < len(self.time_slots):
                return None
            return cell._replace(time_slot=self.time_slots[index])

        index = self._class_index.get(cell.class_id)
        if index is None:
            return None
        index += step
        if not 0 <= index < len(self._classes):
            return None
        return cell._replace(class_id=self._classes[index].id)

    def sort_key(self, cell: CellId) -> tuple[int, int, int]:
        """Grid order: day, then time slot, then displayed class row."""
        class_index = self._class_index.get(cell.class_id)
        return (
            self._day_index.get(cell.day, len(self.days)),
            self._slot_index.get(cell.time_slot, len(self.time_slots)),
            len(self._classes) if class_index is None else class_index,
        )

    def check_editable(self, cell: CellId) -> None:
        """Raise unless the cell is an editable position in the displayed grid.

        Raises:
            SpecialPeriodError: If the time slot is a special period.
            InvalidCellError: If the day, slot or class is not part of the grid.
        """
        if cell.day not in self._day_index:
            raise InvalidCellError(f"Unknown day {cell.day!r}. Valid: {list(self.days)}")
        if cell.time_slot not in self._slot_index:
            raise InvalidCellError(f"Unknown time slot {cell.time_slot!r}")
        if self.is_special(cell.time_slot):
            label = self._special[cell.time_slot].label
            raise SpecialPeriodError(f"Cannot edit special period cell {cell.time_slot} ({label})")
        if cell.class_id not in self._class_index:
            raise InvalidCellError(f"Class {cell.class_id!r} is not displayed")
