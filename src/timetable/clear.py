"""Clear/Unmerge Engine - empties cells and shrinks or dissolves their groups."""

from src.timetable.grid import Absorbed, CellId, CellStore, MergeIndex, Root
from src.timetable.logging import get_logger
from src.timetable.merge import MergeEngine

log = get_logger(__name__)


class ClearEngine:
    """Clears cells while keeping the Merge Index consistent with the Cell Store.

    - Absorbed member: only that cell is emptied; the surviving members
      re-form their run from the root, so the root's span shrinks (or the
      run splits where the gap now is).
    - Root of a group: the whole group is emptied.
    - Unmerged cell: plain delete.
    """

    def __init__(self, store: CellStore, index: MergeIndex, merger: MergeEngine) -> None:
        self.store = store
        self.index = index
        self.merger = merger

    def clear(self, cell: CellId) -> list[CellId]:
        """Clear ``cell`` and return every cell that was emptied.

        Clearing a cell without content is a no-op.
        """
        state = self.index.get(cell)
        if cell not in self.store and state is None:
            return []

        if isinstance(state, Absorbed):
            self.store.delete(cell)
            self._release(cell, state)
            log.info("absorbed_cell_cleared", cell=cell, root=state.root)
            return [cell]

        if isinstance(state, Root) and state.axis is not None:
            group = self.index.group(cell)
            for member in group:
                self.index.discard(member)
                self.store.delete(member)
            log.info("group_cleared", root=cell, axis=state.axis.value, cells=len(group))
            return group

        self.index.discard(cell)
        self.store.delete(cell)
        log.info("cell_cleared", cell=cell)
        return [cell]

    def detach(self, cell: CellId) -> None:
        """Take ``cell`` out of its group without touching its content.

        Used when a grouped cell is reassigned different content. The cell's
        new content must already be in the store so it is not re-absorbed.
        """
        state = self.index.get(cell)
        if state is None:
            return
        if isinstance(state, Root) and state.axis is None:
            self.index.discard(cell)
            return
        self._release(cell, state)
        log.debug("cell_detached", cell=cell)

    def _release(self, cell: CellId, state: Absorbed | Root) -> None:
        root = state.root if isinstance(state, Absorbed) else cell
        axis = state.axis
        group = self.index.group(root)
        for member in group:
            self.index.discard(member)
        survivors = [member for member in group if member != cell]
        self.merger.regroup(survivors, axis)
