"""
Graph builder module for Butterflow.

This module turns a workflow definition and its task list into the abstract
graph consumed by the layout engine, and derives each node's display status
from the tasks attached to it.
"""

from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Sequence
import logging

from ..errors import CyclicDependency, DanglingDependency, DuplicateNode, EmptyWorkflow
from .models import (
    EdgeRecord, NodeRecord, ProjectStatus, Task, Workflow, WorkflowGraph
)


_ACTIVE_STATUSES = (ProjectStatus.IN_PROGRESS, ProjectStatus.IS_BOT_PROCESSING)


class GraphBuilder:
    """
    Builds node and edge records from a workflow and its tasks.
    """

    logger = logging.getLogger(__name__)

    @classmethod
    def aggregate_status(cls, tasks: Sequence[Task]) -> ProjectStatus:
        """
        Derive a single display status from a node's tasks.

        Rules are checked in order and the first match wins: any active task,
        then all tasks done, then any closed, then any awaiting a trigger.

        Args:
            tasks: Tasks attached to one node

        Returns:
            Aggregated status, ``todo`` when there are no tasks
        """
        if not tasks:
            return ProjectStatus.TODO

        statuses = [task.status for task in tasks]
        if any(status in _ACTIVE_STATUSES for status in statuses):
            return ProjectStatus.IN_PROGRESS
        if all(status == ProjectStatus.DONE for status in statuses):
            return ProjectStatus.DONE
        if ProjectStatus.CLOSED in statuses:
            return ProjectStatus.CLOSED
        if ProjectStatus.AWAITING_TRIGGER in statuses:
            return ProjectStatus.AWAITING_TRIGGER
        return ProjectStatus.TODO

    @classmethod
    def build(cls, workflow: Workflow, tasks: Iterable[Task] = ()) -> WorkflowGraph:
        """
        Build the abstract graph for a workflow.

        Args:
            workflow: Workflow definition
            tasks: Tasks linked to workflow nodes by ``workflow_step_id``

        Returns:
            WorkflowGraph with one record per node and one edge per dependency

        Raises:
            EmptyWorkflow: The workflow has no nodes
            DuplicateNode: Two nodes share an id
            DanglingDependency: A dependency names an unknown node
            CyclicDependency: The dependencies form a cycle
        """
        if not workflow.nodes:
            raise EmptyWorkflow()

        node_ids = set()
        for node in workflow.nodes:
            if node.id in node_ids:
                raise DuplicateNode(node.id)
            node_ids.add(node.id)

        for node in workflow.nodes:
            for dep in node.depends_on:
                if dep not in node_ids:
                    raise DanglingDependency(node.id, dep)

        cycle = cls.find_cycle(workflow)
        if cycle:
            raise CyclicDependency(cycle)

        tasks_by_node: Dict[str, List[Task]] = defaultdict(list)
        for task in tasks:
            if task.workflow_step_id not in node_ids:
                cls.logger.debug(f"Ignoring task {task.id} for unknown step {task.workflow_step_id}")
                continue
            tasks_by_node[task.workflow_step_id].append(task)

        records = []
        for node in workflow.nodes:
            node_tasks = tuple(tasks_by_node.get(node.id, ()))
            records.append(NodeRecord(
                node=node,
                aggregated_status=cls.aggregate_status(node_tasks),
                tasks=node_tasks,
            ))

        edges = tuple(
            EdgeRecord(source=dep, target=node.id)
            for node in workflow.nodes
            for dep in node.depends_on
        )

        cls.logger.debug(f"Built graph with {len(records)} nodes and {len(edges)} edges")
        return WorkflowGraph(nodes=tuple(records), edges=edges)

    @classmethod
    def find_cycle(cls, workflow: Workflow) -> Optional[List[str]]:
        """
        Find one dependency cycle in the workflow.

        Args:
            workflow: Workflow definition

        Returns:
            The node ids along the cycle, first id repeated at the end, or None
        """
        graph = {node.id: list(node.depends_on) for node in workflow.nodes}

        # 0 = unvisited, 1 = on the current path, 2 = finished
        state: Dict[str, int] = {node_id: 0 for node_id in graph}

        for start in graph:
            if state[start]:
                continue

            path = [start]
            stack = [iter(graph[start])]
            state[start] = 1

            while stack:
                neighbor = next(stack[-1], None)
                if neighbor is None:
                    stack.pop()
                    state[path.pop()] = 2
                    continue
                if neighbor not in state:
                    continue
                if state[neighbor] == 1:
                    cycle = path[path.index(neighbor):] + [neighbor]
                    # Edges point at dependencies; report in dependency order.
                    cycle.reverse()
                    return cycle
                if state[neighbor] == 0:
                    state[neighbor] = 1
                    path.append(neighbor)
                    stack.append(iter(graph[neighbor]))

        return None


def aggregate_status(tasks: Sequence[Task]) -> ProjectStatus:
    """Aggregate a node's task statuses. See ``GraphBuilder.aggregate_status``."""
    return GraphBuilder.aggregate_status(tasks)


def build(workflow: Workflow, tasks: Iterable[Task] = ()) -> WorkflowGraph:
    """Build the abstract graph for a workflow. See ``GraphBuilder.build``."""
    return GraphBuilder.build(workflow, tasks)
