"""
Diagram rendering utilities for Butterflow.

This module draws positioned node views and dependency edges onto a
character canvas and turns it into a Rich ``Text``. Node positions come from
the layout engine in layout units; they are scaled down to terminal cells
and never modified here.
"""

import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from rich.text import Text

from ..config.config import DisplayConfig, LayoutConfig
from ..core.models import EdgeRecord, NodeView
from .status_visualization import StatusVisualization


BOX_HEIGHT = 4

# Line characters by the directions they connect (up, down, left, right).
_LINE_CHARS = {
    (True, True, False, False): '│',
    (False, False, True, True): '─',
    (True, True, True, True): '┼',
    (False, True, False, True): '┌',
    (False, True, True, False): '┐',
    (True, False, False, True): '└',
    (True, False, True, False): '┘',
    (True, True, False, True): '├',
    (True, True, True, False): '┤',
    (False, True, True, True): '┬',
    (True, False, True, True): '┴',
}
_CHAR_DIRECTIONS = {char: dirs for dirs, char in _LINE_CHARS.items()}


@dataclass(frozen=True)
class Box:
    """Cell rectangle occupied by one node."""
    node_id: str
    column: int
    row: int
    width: int
    height: int

    @property
    def center(self) -> int:
        return self.column + self.width // 2

    @property
    def bottom(self) -> int:
        return self.row + self.height - 1

    def contains(self, column: int, row: int) -> bool:
        return self.column <= column < self.column + self.width and self.row <= row < self.row + self.height


class DiagramCanvas:
    """
    Character canvas for a positioned workflow diagram.
    """

    EDGE_STYLE = "grey62"
    BORDER_STYLE = "grey50"
    HOVER_STYLE = "bold cyan"
    SELECTED_STYLE = "bold magenta"

    def __init__(self, display: Optional[DisplayConfig] = None, layout: Optional[LayoutConfig] = None,
                 margin: int = 1):
        self.display = display or DisplayConfig()
        self.layout = layout or LayoutConfig()
        self.margin = margin
        self.box_width = max(12, math.ceil(self.layout.node_width / self.display.scale_x))
        self.boxes: Dict[str, Box] = {}
        self._cells: List[List[Tuple[str, str]]] = []

    @property
    def width(self) -> int:
        return len(self._cells[0]) if self._cells else 0

    @property
    def height(self) -> int:
        return len(self._cells)

    def render(self, views: Sequence[NodeView], edges: Sequence[EdgeRecord]) -> Text:
        """
        Draw the diagram.

        Args:
            views: Node views with positions
            edges: Dependency edges

        Returns:
            Rich Text holding the whole canvas
        """
        self._place_boxes(views)
        if not self.boxes:
            self._cells = []
            return Text("No workflow loaded", style="dim")

        width = max(box.column + box.width for box in self.boxes.values()) + self.margin
        height = max(box.row + box.height for box in self.boxes.values()) + self.margin
        self._cells = [[(' ', '') for _ in range(width)] for _ in range(height)]

        for edge in edges:
            self._draw_edge(edge)
        for view in views:
            self._draw_box(view)

        return self._to_text()

    def node_at(self, column: int, row: int) -> Optional[str]:
        """Return the id of the node drawn at a cell, if any."""
        for box in self.boxes.values():
            if box.contains(column, row):
                return box.node_id
        return None

    def _place_boxes(self, views: Sequence[NodeView]) -> None:
        self.boxes = {}
        if not views:
            return
        columns = {v.id: round(v.position.x / self.display.scale_x) for v in views}
        rows = {v.id: round(v.position.y / self.display.scale_y) for v in views}
        left = min(columns.values())
        top = min(rows.values())
        for view in views:
            self.boxes[view.id] = Box(
                node_id=view.id,
                column=columns[view.id] - left + self.margin,
                row=rows[view.id] - top + self.margin,
                width=self.box_width,
                height=BOX_HEIGHT,
            )

    def _set_line(self, column: int, row: int, up: bool, down: bool, left: bool, right: bool) -> None:
        if not (0 <= row < self.height and 0 <= column < self.width):
            return
        if self._cells[row][column][0] == '▼':
            return
        current = _CHAR_DIRECTIONS.get(self._cells[row][column][0])
        if current:
            up, down, left, right = (up or current[0], down or current[1],
                                     left or current[2], right or current[3])
        char = _LINE_CHARS.get((up, down, left, right), '┼')
        self._cells[row][column] = (char, self.EDGE_STYLE)

    def _draw_edge(self, edge: EdgeRecord) -> None:
        """
        Route an edge as bottom-center of the source, down, across on the row
        above the target, then into the target with an arrowhead.

        Edges whose target does not sit below the source are not drawn; that
        only happens with placeholder positions.
        """
        source = self.boxes.get(edge.source)
        target = self.boxes.get(edge.target)
        if source is None or target is None:
            return
        turn_row = target.row - 1
        if turn_row <= source.bottom:
            return

        start, end = source.center, target.center
        for row in range(source.bottom + 1, turn_row):
            self._set_line(start, row, True, True, False, False)

        if start == end:
            self._cells[turn_row][end] = ('▼', self.EDGE_STYLE)
            return

        step = 1 if end > start else -1
        self._set_line(start, turn_row, True, False, step < 0, step > 0)
        for column in range(start + step, end, step):
            self._set_line(column, turn_row, False, False, True, True)
        self._cells[turn_row][end] = ('▼', self.EDGE_STYLE)

    def _draw_box(self, view: NodeView) -> None:
        box = self.boxes[view.id]
        if view.is_selected:
            border = self.SELECTED_STYLE
        elif view.is_hovered:
            border = self.HOVER_STYLE
        else:
            border = self.BORDER_STYLE

        inner = box.width - 2
        top = '╭' + '─' * inner + '╮'
        bottom = '╰' + '─' * inner + '╯'
        self._write(box.column, box.row, top, border)
        self._write(box.column, box.bottom, bottom, border)

        color = StatusVisualization.get_status_color(view.aggregated_status)
        symbol = StatusVisualization.get_status_symbol(view.aggregated_status)
        name = _truncate(view.node.name, inner - 2)
        details = " · ".join(part for part in (view.task_label, view.node.type.value) if part)
        details = _truncate(details, inner - 2)

        for row in (box.row + 1, box.row + 2):
            self._write(box.column, row, '│', border)
            self._write(box.column + box.width - 1, row, '│', border)
            self._write(box.column + 1, row, ' ' * inner, '')

        self._write(box.column + 1, box.row + 1, symbol, f"bold {color}")
        self._write(box.column + 3, box.row + 1, name, "bold" if view.is_selected else "")
        self._write(box.column + 3, box.row + 2, details, "dim")

    def _write(self, column: int, row: int, text: str, style: str) -> None:
        for offset, char in enumerate(text):
            if 0 <= column + offset < self.width:
                self._cells[row][column + offset] = (char, style)

    def _to_text(self) -> Text:
        text = Text()
        for row_index, row in enumerate(self._cells):
            if row_index:
                text.append('\n')
            run, run_style = [], None
            for char, style in row:
                if style != run_style and run:
                    text.append(''.join(run), style=run_style or None)
                    run = []
                run_style = style
                run.append(char)
            if run:
                text.append(''.join(run).rstrip() if not run_style else ''.join(run), style=run_style or None)
        return text


def _truncate(value: str, limit: int) -> str:
    if limit <= 0:
        return ""
    if len(value) <= limit:
        return value
    return value[:max(limit - 1, 0)] + '…'


def render_diagram(views: Sequence[NodeView], edges: Sequence[EdgeRecord],
                   display: Optional[DisplayConfig] = None, layout: Optional[LayoutConfig] = None) -> Text:
    """Render a diagram in one call."""
    return DiagramCanvas(display, layout).render(views, edges)
