"""Weekly class-timetable grid composer.

Assigns subjects and activities to (day, time slot, class) cells, merges runs
of identical content along the time and class axes for display, and flattens
the physical cells into entries for the school backend's timetable endpoint.
"""

from src.timetable.axes import DAYS, SPECIAL_PERIODS, TIME_SLOTS, AxisCatalog
from src.timetable.catalog import Catalog
from src.timetable.client import TimetableApiClient
from src.timetable.composer import TimetableComposer
from src.timetable.grid import Absorbed, Axis, CellId, Root
from src.timetable.models import ContentRef, PersistEntry, SpecialPeriod, TimetablePayload

__all__ = [
    "TimetableComposer",
    "TimetableApiClient",
    "AxisCatalog",
    "Catalog",
    "CellId",
    "Axis",
    "Root",
    "Absorbed",
    "ContentRef",
    "PersistEntry",
    "SpecialPeriod",
    "TimetablePayload",
    "DAYS",
    "TIME_SLOTS",
    "SPECIAL_PERIODS",
]
