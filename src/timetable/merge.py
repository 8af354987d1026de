"""Merge Engine - groups runs of adjacent cells holding identical content.

Runs are detected independently along two axes: TIME (adjacent slots within
a class row) and CLASS (adjacent displayed classes within a slot column).
A group is always one-dimensional. The time axis is scanned first; a cell
already grouped on one axis neither joins nor bridges a run on the other.
"""

from src.timetable.axes import AxisCatalog
from src.timetable.grid import Axis, CellId, CellStore, MergeIndex, Root
from src.timetable.logging import get_logger
from src.timetable.models import ContentRef

log = get_logger(__name__)

SCAN_ORDER: tuple[Axis, ...] = (Axis.TIME, Axis.CLASS)


class MergeEngine:
    """Recomputes merge groups around a cell that just received content."""

    def __init__(self, store: CellStore, index: MergeIndex, axes: AxisCatalog) -> None:
        self.store = store
        self.index = index
        self.axes = axes

    def merge(self, cell: CellId, content: ContentRef) -> None:
        """Merge ``cell`` with matching neighbours. Call right after ``store.set``.

        Special-period cells never participate and are left untouched.
        """
        if self.axes.is_special(cell.time_slot):
            log.debug("merge_skipped", reason="special_period", cell=cell)
            return

        for axis in SCAN_ORDER:
            if self.index.group_axis(cell) is axis.other:
                continue
            run = self.scan(cell, content, axis)
            self.apply_run(run, axis)

    def scan(self, cell: CellId, content: ContentRef, axis: Axis) -> list[CellId]:
        """Maximal contiguous run through ``cell`` of cells holding ``content``.

        Returns:
            The run in axis order; ``[cell]`` when no neighbour matches.
        """
        run = [cell]
        for step in (1, -1):
            current = cell
            while True:
                nxt = self.axes.neighbor(current, axis, step)
                if nxt is None or not self._joinable(nxt, content, axis):
                    break
                if step > 0:
                    run.append(nxt)
                else:
                    run.insert(0, nxt)
                current = nxt
        return run

    def _joinable(self, cell: CellId, content: ContentRef, axis: Axis) -> bool:
        if self.axes.is_special(cell.time_slot):
            return False
        if self.store.get(cell) != content:
            return False
        # Groups on the same axis are absorbed into the new run
        return self.index.group_axis(cell) is not axis.other

    def apply_run(self, run: list[CellId], axis: Axis) -> None:
        """Rewrite the Merge Index so that ``run`` forms exactly one group.

        Existing same-axis groups touching the run are dissolved first; the
        run's first cell becomes the root of the new group.
        """
        for cell in run:
            if self.index.group_axis(cell) is not axis:
                continue
            root = self.index.root_of(cell)
            for member in self.index.group(root):
                self.index.discard(member)

        if len(run) < 2:
            return

        root = run[0]
        existing = self.index.get(root)
        if axis is Axis.TIME:
            row_span = existing.row_span if isinstance(existing, Root) else 1
            self.index.set_root(root, col_span=len(run), row_span=row_span)
        else:
            col_span = existing.col_span if isinstance(existing, Root) else 1
            self.index.set_root(root, col_span=col_span, row_span=len(run))
        for member in run[1:]:
            self.index.absorb(member, root, axis)

        log.debug("merge_applied", root=root, axis=axis.value, span=len(run))

    def regroup(self, cells: list[CellId], axis: Axis) -> None:
        """Re-form ``axis`` runs among cells whose group was just dissolved.

        Cells left without a group afterwards get a full merge pass so they
        can join runs on the other axis.
        """
        for cell in cells:
            content = self.store.get(cell)
            if content is None or self.index.group_axis(cell) is not None:
                continue
            self.apply_run(self.scan(cell, content, axis), axis)

        for cell in cells:
            content = self.store.get(cell)
            if content is None or cell in self.index:
                continue
            self.merge(cell, content)
