"""Cell Store and Merge Index - the two maps owned by a composer session.

The Cell Store is the source of truth for what each physical cell holds. The
Merge Index is a rendering overlay: it records which cells root a visual
block and which are absorbed into one. It never removes Cell Store entries.
Both are sparse; cells absent from a map read as empty / unmerged.
"""

from collections.abc import Iterator
from enum import Enum
from typing import NamedTuple, Union

from pydantic import BaseModel, ConfigDict

from src.timetable.errors import MergeInvariantError
from src.timetable.models import ContentRef


class CellId(NamedTuple):
    """One (day, time slot, class) grid position."""

    day: str
    time_slot: str
    class_id: str


class Axis(str, Enum):
    """Merge dimension: TIME runs along a class row, CLASS down a slot column."""

    TIME = "time"
    CLASS = "class"

    @property
    def other(self) -> "Axis":
        return Axis.CLASS if self is Axis.TIME else Axis.TIME


class Root(BaseModel):
    """Cell that owns a visual block of col_span x row_span cells."""

    model_config = ConfigDict(frozen=True)

    col_span: int = 1
    row_span: int = 1

    @property
    def axis(self) -> Axis | None:
        if self.col_span > 1:
            return Axis.TIME
        if self.row_span > 1:
            return Axis.CLASS
        return None

    def span(self, axis: Axis) -> int:
        return self.col_span if axis is Axis.TIME else self.row_span


class Absorbed(BaseModel):
    """Cell rendered as part of the block owned by ``root``."""

    model_config = ConfigDict(frozen=True)

    root: CellId
    axis: Axis


MergeState = Union[Root, Absorbed]


class CellStore:
    """Sparse mapping CellId -> ContentRef. Unknown ids read as absent."""

    def __init__(self) -> None:
        self._cells: dict[CellId, ContentRef] = {}

    def set(self, cell: CellId, content: ContentRef) -> None:
        self._cells[cell] = content

    def get(self, cell: CellId) -> ContentRef | None:
        return self._cells.get(cell)

    def delete(self, cell: CellId) -> None:
        self._cells.pop(cell, None)

    def items(self) -> Iterator[tuple[CellId, ContentRef]]:
        return iter(list(self._cells.items()))

    def snapshot(self) -> dict[CellId, ContentRef]:
        return dict(self._cells)

    def __contains__(self, cell: object) -> bool:
        return cell in self._cells

    def __iter__(self) -> Iterator[CellId]:
        return iter(list(self._cells))

    def __len__(self) -> int:
        return len(self._cells)


class MergeIndex:
    """Sparse mapping CellId -> MergeState for multi-cell groups only.

    A cell with no entry is unmerged. 1x1 roots are never stored.
    """

    def __init__(self) -> None:
        self._states: dict[CellId, MergeState] = {}

    def get(self, cell: CellId) -> MergeState | None:
        return self._states.get(cell)

    def set_root(self, cell: CellId, col_span: int = 1, row_span: int = 1) -> None:
        if col_span <= 1 and row_span <= 1:
            self._states.pop(cell, None)
            return
        self._states[cell] = Root(col_span=col_span, row_span=row_span)

    def absorb(self, cell: CellId, root: CellId, axis: Axis) -> None:
        self._states[cell] = Absorbed(root=root, axis=axis)

    def discard(self, cell: CellId) -> None:
        self._states.pop(cell, None)

    def is_root(self, cell: CellId) -> bool:
        state = self._states.get(cell)
        return isinstance(state, Root) and state.axis is not None

    def group_axis(self, cell: CellId) -> Axis | None:
        """Axis of the multi-cell group the cell belongs to, if any."""
        state = self._states.get(cell)
        if state is None:
            return None
        return state.axis

    def root_of(self, cell: CellId) -> CellId | None:
        """Root of the cell's group (the cell itself for a root)."""
        state = self._states.get(cell)
        if isinstance(state, Absorbed):
            if not isinstance(self._states.get(state.root), Root):
                raise MergeInvariantError(f"{cell} is absorbed into non-root {state.root}")
            return state.root
        if isinstance(state, Root) and state.axis is not None:
            return cell
        return None

    def members(self, root: CellId) -> list[CellId]:
        """Cells absorbed into ``root``, in insertion order."""
        return [
            cell
            for cell, state in self._states.items()
            if isinstance(state, Absorbed) and state.root == root
        ]

    def group(self, root: CellId) -> list[CellId]:
        """Root followed by its absorbed members."""
        return [root, *self.members(root)]

    def snapshot(self) -> dict[CellId, MergeState]:
        return dict(self._states)

    def __contains__(self, cell: object) -> bool:
        return cell in self._states

    def __iter__(self) -> Iterator[CellId]:
        return iter(list(self._states))

    def __len__(self) -> int:
        return len(self._states)

    def validate(self) -> None:
        """Check the structural invariants of the index.

        Raises:
            MergeInvariantError: On chains, dangling roots, two-axis roots
                or spans that disagree with member counts.
        """
        counts: dict[CellId, int] = {}
        for cell, state in self._states.items():
            if isinstance(state, Absorbed):
                root_state = self._states.get(state.root)
                if not isinstance(root_state, Root):
                    raise MergeInvariantError(f"{cell} is absorbed into non-root {state.root}")
                if root_state.axis is not state.axis:
                    raise MergeInvariantError(
                        f"{cell} is absorbed on {state.axis.value} axis but root "
                        f"{state.root} spans {root_state}"
                    )
                counts[state.root] = counts.get(state.root, 0) + 1
            elif state.col_span > 1 and state.row_span > 1:
                raise MergeInvariantError(f"{cell} spans both axes: {state}")
            elif state.axis is None:
                raise MergeInvariantError(f"{cell} stored as a 1x1 root")

        for cell, state in self._states.items():
            if isinstance(state, Root):
                expected = state.span(state.axis) - 1
                if counts.get(cell, 0) != expected:
                    raise MergeInvariantError(
                        f"Root {cell} spans {expected + 1} cells but has "
                        f"{counts.get(cell, 0)} absorbed members"
                    )
