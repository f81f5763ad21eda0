"""
Diagram controller module for Butterflow.

This module owns the state of the diagram currently on display: the graph
built from the active workflow and tasks, node positions, and the hovered
and selected node. Layout requests are version-stamped so that a result
arriving after a newer request has been issued is dropped.
"""

import asyncio
from typing import Any, Dict, Iterable, List, Optional, Tuple
import logging

from ..config.config import Config
from ..errors import GraphError, LayoutError
from .event_bus import (
    DiagramEvent, EventBus, get_event_bus,
    GRAPH_ERROR, HOVER_CHANGED, LAYOUT_ERROR, NODE_SELECTED, POSITIONS_CHANGED,
)
from .graph_builder import GraphBuilder
from .layout_engine import LayoutEngine, Positions
from .models import EdgeRecord, NodeView, Position, Task, Workflow, WorkflowGraph


PHASE_PLACEHOLDER = "placeholder"
PHASE_LAYERED = "layered"


class DiagramController:
    """
    Single owner of the diagram state shared by builder, layout engine and renderer.
    """

    def __init__(self, config: Optional[Config] = None,
                 layout_engine: Optional[LayoutEngine] = None,
                 event_bus: Optional[EventBus] = None):
        """
        Initialize the controller.

        Args:
            config: Application configuration
            layout_engine: Layout engine, built from config when omitted
            event_bus: Bus for outbound events, the global bus when omitted
        """
        self.config = config or Config()
        self.layout_engine = layout_engine or LayoutEngine(self.config)
        self.event_bus = event_bus or get_event_bus()
        self.logger = logging.getLogger(__name__)

        self._workflow: Optional[Workflow] = None
        self._tasks: Tuple[Task, ...] = ()
        self._graph: Optional[WorkflowGraph] = None
        self._positions: Positions = {}
        self._phase: Optional[str] = None
        self._hovered_node_id: Optional[str] = None
        self._selected_node_id: Optional[str] = None
        self._request_id = 0
        self._layouting = False
        self._error: Optional[str] = None

    @property
    def workflow(self) -> Optional[Workflow]:
        return self._workflow

    @property
    def tasks(self) -> Tuple[Task, ...]:
        return self._tasks

    @property
    def graph(self) -> Optional[WorkflowGraph]:
        return self._graph

    @property
    def request_id(self) -> int:
        return self._request_id

    @property
    def is_layouting(self) -> bool:
        return self._layouting

    @property
    def layout_phase(self) -> Optional[str]:
        return self._phase

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def hovered_node_id(self) -> Optional[str]:
        return self._hovered_node_id

    @property
    def selected_node_id(self) -> Optional[str]:
        return self._selected_node_id

    async def load(self, workflow: Workflow, tasks: Iterable[Task] = ()) -> bool:
        """
        Replace the current workflow and tasks and lay the diagram out again.

        Placeholder positions are applied before the first suspension; the
        layered positions are applied only if no newer request was made in
        the meantime.

        Args:
            workflow: Workflow to display
            tasks: Tasks linked to the workflow nodes

        Returns:
            True if this request's layered layout was applied
        """
        self._request_id += 1
        request_id = self._request_id
        self._workflow = workflow
        self._tasks = tuple(tasks)

        try:
            graph = GraphBuilder.build(workflow, self._tasks)
        except GraphError as e:
            self._graph = None
            self._positions = {}
            self._phase = None
            self._layouting = False
            self._error = f"Invalid workflow structure: {e}"
            self.logger.error(self._error)
            self._drop_interaction(set())
            self._publish(GRAPH_ERROR, {'message': self._error, 'request_id': request_id})
            return False

        self._graph = graph
        self._error = None
        self._drop_interaction(graph.node_ids)

        self._positions = self.layout_engine.placeholder(graph)
        self._phase = PHASE_PLACEHOLDER
        self._layouting = True
        self._publish(POSITIONS_CHANGED, {'request_id': request_id, 'phase': PHASE_PLACEHOLDER})

        try:
            positions = await self.layout_engine.layout(graph)
        except LayoutError as e:
            if request_id != self._request_id:
                self.logger.debug(f"Ignoring layout failure of superseded request {request_id}")
                return False
            self._layouting = False
            self._error = f"Error calculating layout: {e}"
            self.logger.warning(self._error)
            self._publish(LAYOUT_ERROR, {'message': self._error, 'request_id': request_id})
            return False

        if request_id != self._request_id:
            self.logger.debug(f"Discarding layout of request {request_id}, current is {self._request_id}")
            return False

        self._positions = positions
        self._phase = PHASE_LAYERED
        self._layouting = False
        self._publish(POSITIONS_CHANGED, {'request_id': request_id, 'phase': PHASE_LAYERED})
        return True

    async def update_tasks(self, tasks: Iterable[Task]) -> bool:
        """
        Re-run the layout for the current workflow with a new task list.

        Args:
            tasks: New tasks

        Returns:
            True if the layered layout was applied
        """
        if self._workflow is None:
            raise RuntimeError("No workflow loaded")
        return await self.load(self._workflow, tasks)

    def request_layout(self, workflow: Workflow, tasks: Iterable[Task] = ()) -> asyncio.Task:
        """Schedule ``load`` on the running event loop and return its task."""
        return asyncio.ensure_future(self.load(workflow, tasks))

    def positions(self) -> Dict[str, Position]:
        return dict(self._positions)

    def views(self) -> List[NodeView]:
        """
        Build the node views for the current state.

        Returns:
            One view per node in workflow order, empty when no graph is loaded
        """
        if self._graph is None:
            return []

        views = []
        for record in self._graph.nodes:
            views.append(NodeView(
                node=record.node,
                aggregated_status=record.aggregated_status,
                position=self._positions.get(record.id, Position(0, 0)),
                is_hovered=record.id == self._hovered_node_id,
                is_selected=record.id == self._selected_node_id,
                tasks=record.tasks,
            ))
        return views

    def edges(self) -> List[EdgeRecord]:
        if self._graph is None:
            return []
        return list(self._graph.edges)

    def set_hover(self, node_id: Optional[str]) -> None:
        """
        Mark a node as hovered, or clear the hover with None.

        Args:
            node_id: Node under the pointer
        """
        if node_id is not None:
            self._require_node(node_id)
        if node_id == self._hovered_node_id:
            return
        self._hovered_node_id = node_id
        self._publish(HOVER_CHANGED, {'node_id': node_id})

    def clear_hover(self) -> None:
        self.set_hover(None)

    def select(self, node_id: str) -> None:
        """
        Select a node, replacing any previous selection.

        Publishes ``node_selected`` with the node's full record.

        Args:
            node_id: Node to select
        """
        record = self._require_node(node_id)
        self._selected_node_id = node_id
        self.logger.debug(f"Selected node {node_id}")
        self._publish(NODE_SELECTED, {'node_id': node_id, 'node': record.node})

    def clear_selection(self) -> None:
        """Drop the selection, publishing ``node_selected`` with no node."""
        if self._selected_node_id is None:
            return
        self._selected_node_id = None
        self._publish(NODE_SELECTED, {'node_id': None, 'node': None})

    def _drop_interaction(self, node_ids) -> None:
        # Hover and selection only survive while their node exists
        if self._hovered_node_id is not None and self._hovered_node_id not in node_ids:
            self._hovered_node_id = None
            self._publish(HOVER_CHANGED, {'node_id': None})
        if self._selected_node_id is not None and self._selected_node_id not in node_ids:
            self.logger.debug(f"Selected node {self._selected_node_id} no longer exists")
            self.clear_selection()

    def _require_node(self, node_id: str):
        record = self._graph.get_record(node_id) if self._graph is not None else None
        if record is None:
            raise KeyError(f"Unknown node: {node_id}")
        return record

    def _publish(self, event_type: str, data: Dict[str, Any]) -> None:
        self.event_bus.publish(DiagramEvent(type=event_type, data=data, source="diagram_controller"))
