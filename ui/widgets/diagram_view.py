"""
Diagram view widget module for Butterflow Textual UI.

This module draws the controller's current node views and forwards pointer
events back to the controller as hover and selection changes.
"""

from typing import Optional
import logging

from textual import events
from textual.widgets import Static

from ...config.config import Config
from ...core.controller import DiagramController
from ...utils.diagram_render import DiagramCanvas


class DiagramView(Static):
    """
    Widget rendering the positioned workflow diagram.
    """

    def __init__(self, config: Config, controller: DiagramController, **kwargs):
        """
        Initialize the diagram view.

        Args:
            config: Application configuration
            controller: Diagram controller owning the state to draw
        """
        super().__init__("", **kwargs)
        self.config = config
        self.controller = controller
        self.canvas = DiagramCanvas(config.display, config.layout)
        self.logger = logging.getLogger(self.__class__.__name__)

    def refresh_diagram(self) -> None:
        """Redraw from the controller's current views."""
        self.update(self.canvas.render(self.controller.views(), self.controller.edges()))

    def node_at_event(self, event: events.MouseEvent) -> Optional[str]:
        offset = event.get_content_offset(self)
        if offset is None:
            return None
        return self.canvas.node_at(offset.x, offset.y)

    def on_mouse_move(self, event: events.MouseMove) -> None:
        node_id = self.node_at_event(event)
        if node_id != self.controller.hovered_node_id:
            self.controller.set_hover(node_id)

    def on_leave(self, event: events.Leave) -> None:
        self.controller.clear_hover()

    def on_click(self, event: events.Click) -> None:
        node_id = self.node_at_event(event)
        if node_id is not None:
            self.controller.select(node_id)
