"""
Main Textual application UI for Butterflow.

This module provides the interactive diagram viewer: the positioned workflow
diagram on the left and the selected node's details on the right.
"""

from pathlib import Path
from typing import Iterable, Optional
import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Footer, Header, Static

from ..config.config import Config
from ..core.controller import DiagramController, PHASE_PLACEHOLDER
from ..errors import WorkflowLoadError
from ..core.event_bus import (
    Event, GRAPH_ERROR, HOVER_CHANGED, LAYOUT_ERROR, NODE_SELECTED, POSITIONS_CHANGED,
)
from ..core.file_monitor import FileMonitor
from ..core.models import Task, Workflow
from ..parsers.task_parser import TaskParser
from ..parsers.workflow_parser import WorkflowParser
from .themes.default import DefaultTheme
from .widgets.diagram_view import DiagramView
from .widgets.node_details import NodeDetails


class ButterflowApp(App):
    """
    Main Textual application for Butterflow.
    """

    TITLE = "Butterflow - Workflow Diagram Viewer"
    SUB_TITLE = "Layered view of workflow nodes and their tasks"

    CSS_PATH = "app.tcss"

    BINDINGS = [
        Binding("n", "select_next", "Next node"),
        Binding("p", "select_previous", "Previous node"),
        Binding("escape", "clear_selection", "Clear selection"),
        Binding("r", "relayout", "Re-layout"),
        Binding("q", "quit", "Quit"),
        Binding("ctrl+d", "quit", "Quit", show=False),
    ]

    def __init__(self, config: Config, controller: DiagramController,
                 workflow: Optional[Workflow] = None, tasks: Iterable[Task] = (),
                 workflow_path: Optional[Path] = None, tasks_path: Optional[Path] = None,
                 follow: bool = False):
        """
        Initialize the application.

        Args:
            config: Application configuration
            controller: Diagram controller
            workflow: Workflow to show on start, read from workflow_path when omitted
            tasks: Tasks to show on start
            workflow_path: Workflow file, reread on changes when following
            tasks_path: Task file, reread on changes when following
            follow: Watch the source files and reload on change
        """
        self.config = config
        self.controller = controller
        self.workflow = workflow
        self.tasks = tuple(tasks)
        self.workflow_path = workflow_path
        self.tasks_path = tasks_path
        self.follow = follow
        self.workflow_parser = WorkflowParser(config)
        self.task_parser = TaskParser(config)
        self.file_monitor: Optional[FileMonitor] = None
        self.logger = logging.getLogger(__name__)

        self._subscriptions = {
            POSITIONS_CHANGED: self._on_positions_changed,
            HOVER_CHANGED: self._on_hover_changed,
            NODE_SELECTED: self._on_node_selected,
            LAYOUT_ERROR: self._on_layout_error,
            GRAPH_ERROR: self._on_graph_error,
        }

        super().__init__()

    def compose(self) -> ComposeResult:
        """Create child widgets for the app."""
        yield Header()
        yield Horizontal(
            VerticalScroll(DiagramView(self.config, self.controller, id="diagram"), id="diagram-pane"),
            VerticalScroll(NodeDetails(id="details"), id="details-pane"),
            id="main-container",
        )
        yield Static("", id="status-bar")
        yield Footer()

    def on_mount(self) -> None:
        """Called when app is mounted."""
        self.register_theme(DefaultTheme())
        theme = self.config.display.theme
        if theme == "default":
            self.theme = "butterflow-default"
        elif theme in self.available_themes:
            self.theme = theme
        else:
            self.logger.warning(f"Unknown theme '{theme}', using default")
            self.theme = "butterflow-default"

        self.controller.event_bus.subscribe_all(self._subscriptions)

        if self.workflow is None and self.workflow_path is not None:
            self.reload_sources()
        elif self.workflow is not None:
            self.start_layout()

        if self.follow:
            self.start_monitoring()

        self.refresh_ui()

    def on_unmount(self) -> None:
        self.controller.event_bus.unsubscribe_all(self._subscriptions)
        if self.file_monitor is not None:
            self.file_monitor.stop()

    @property
    def diagram(self) -> DiagramView:
        return self.query_one("#diagram", DiagramView)

    @property
    def details(self) -> NodeDetails:
        return self.query_one("#details", NodeDetails)

    def start_layout(self) -> None:
        """Hand the current workflow and tasks to the controller."""
        if self.workflow is None:
            return
        self.run_worker(self.controller.load(self.workflow, self.tasks), group="layout")

    def reload_sources(self) -> None:
        """
        Reread the workflow and task files and lay the diagram out again.

        Load errors are reported and leave the current diagram untouched.
        """
        try:
            if self.workflow_path is not None:
                self.workflow = self.workflow_parser.parse(self.workflow_path)
            if self.tasks_path is not None:
                self.tasks = tuple(self.task_parser.parse(self.tasks_path))
        except WorkflowLoadError as e:
            self.logger.error(f"Error reloading sources: {e}")
            self.notify(str(e), title="Load error", severity="error")
            return
        self.start_layout()

    def start_monitoring(self) -> None:
        paths = [p for p in (self.workflow_path, self.tasks_path) if p is not None]
        if not paths:
            return
        self.file_monitor = FileMonitor(self.config, self._on_file_change)
        for path in paths:
            self.file_monitor.watch(path)
        self.file_monitor.start()

    def _on_file_change(self, path: Path) -> None:
        # Called from the observer thread
        self.call_from_thread(self.reload_sources)

    def _on_positions_changed(self, event: Event) -> None:
        self.diagram.refresh_diagram()
        self.refresh_details()
        self.refresh_ui()

    def _on_hover_changed(self, event: Event) -> None:
        self.diagram.refresh_diagram()

    def _on_node_selected(self, event: Event) -> None:
        self.refresh_details()
        self.diagram.refresh_diagram()

    def _on_layout_error(self, event: Event) -> None:
        self.notify(event.data['message'], title="Layout error", severity="warning")
        self.refresh_ui()

    def _on_graph_error(self, event: Event) -> None:
        self.notify(event.data['message'], title="Workflow error", severity="error")
        self.details.show_node(None)
        self.diagram.refresh_diagram()
        self.refresh_ui()

    def refresh_details(self) -> None:
        """Show the controller's current selection, with its latest status."""
        node_id = self.controller.selected_node_id
        view = next((v for v in self.controller.views() if v.id == node_id), None)
        if view is None:
            self.details.show_node(None)
        else:
            self.details.show_node(view.node, view)

    def refresh_ui(self) -> None:
        """Update the status bar from the controller state."""
        status = self.query_one("#status-bar", Static)
        if self.controller.error:
            status.update(self.controller.error)
        elif self.controller.graph is None:
            status.update("No workflow loaded")
        else:
            phase = "Calculating layout..." if self.controller.layout_phase == PHASE_PLACEHOLDER else "Layout ready"
            workflow = self.controller.workflow
            status.update(f"{workflow.name or 'Workflow'} v{workflow.version} | "
                          f"{len(self.controller.graph.nodes)} nodes | {phase}")

    def _cycle_selection(self, step: int) -> None:
        node_ids = [view.id for view in self.controller.views()]
        if not node_ids:
            return
        current = self.controller.selected_node_id
        if current in node_ids:
            index = (node_ids.index(current) + step) % len(node_ids)
        else:
            index = 0 if step > 0 else len(node_ids) - 1
        self.controller.select(node_ids[index])

    def action_select_next(self) -> None:
        """Select the next node in workflow order."""
        self._cycle_selection(1)

    def action_select_previous(self) -> None:
        """Select the previous node in workflow order."""
        self._cycle_selection(-1)

    def action_clear_selection(self) -> None:
        self.controller.clear_selection()

    def action_relayout(self) -> None:
        """Reload the sources when read from files, otherwise lay out again."""
        if self.workflow_path is not None:
            self.reload_sources()
        else:
            self.start_layout()
