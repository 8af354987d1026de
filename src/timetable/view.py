"""Render model for the timetable grid.

Rows are (day, displayed class) pairs; columns are time slots. The view reads
the Merge Index to decide which cells to draw and with what span, and the
Cell Store only for labels.
"""

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from src.timetable.grid import Absorbed, CellId, Root

if TYPE_CHECKING:
    from src.timetable.composer import TimetableComposer


class GridCell(BaseModel):
    time_slot: str
    label: str = ""
    col_span: int = 1
    row_span: int = 1
    cell: CellId | None = None  # None for special-period blocks
    is_merge_root: bool = False
    is_special: bool = False
    style_hint: str = ""


class GridRow(BaseModel):
    day: str
    class_id: str
    class_name: str
    day_row_span: int = 0  # >0 only on the first row of each day
    cells: list[GridCell] = Field(default_factory=list)


def build_grid_view(composer: "TimetableComposer") -> list[GridRow]:
    """Build the drawable rows for the composer's current state.

    Absorbed cells are omitted. Each special period is emitted once, on the
    first row of the first day, spanning every day and displayed class.
    """
    axes = composer.axes
    classes = axes.classes
    rows: list[GridRow] = []
    if not classes:
        return rows

    total_rows = len(axes.days) * len(classes)
    for day_index, day in enumerate(axes.days):
        for class_index, cls in enumerate(classes):
            row = GridRow(
                day=day,
                class_id=cls.id,
                class_name=cls.name,
                day_row_span=len(classes) if class_index == 0 else 0,
            )
            for slot in axes.time_slots:
                special = axes.special_period(slot)
                if special is not None:
                    if day_index == 0 and class_index == 0:
                        row.cells.append(
                            GridCell(
                                time_slot=slot,
                                label=special.label,
                                row_span=total_rows,
                                is_special=True,
                                style_hint=special.style_hint,
                            )
                        )
                    continue

                cell = CellId(day, slot, cls.id)
                state = composer.index.get(cell)
                if isinstance(state, Absorbed):
                    continue
                root = state if isinstance(state, Root) else Root()
                row.cells.append(
                    GridCell(
                        time_slot=slot,
                        label=composer.display_name_at(day, slot, cls.id),
                        col_span=root.col_span,
                        row_span=root.row_span,
                        cell=cell,
                        is_merge_root=root.axis is not None,
                    )
                )
            rows.append(row)
    return rows


def render_text(rows: list[GridRow], width: int = 14) -> str:
    """Plain-text rendering for the CLI, one line per grid row.

    Merged blocks print their label once, followed by ``xN`` for the span.
    """
    lines = []
    for row in rows:
        parts = [f"{row.day if row.day_row_span else '':<5}", f"{row.class_name:<10}"]
        for c in row.cells:
            if c.is_special:
                text = f"[{c.label}]"
            elif c.col_span > 1:
                text = f"{c.label} x{c.col_span}"
            elif c.row_span > 1:
                text = f"{c.label} v{c.row_span}"
            else:
                text = c.label or "-"
            parts.append(f"{text[:width]:<{width}}")
        lines.append(" | ".join(parts))
    return "\n".join(lines)
