"""
Exception hierarchy for Butterflow.
"""
from typing import List, Sequence


class ButterflowError(Exception):
    """Base class for all Butterflow errors."""


class WorkflowLoadError(ButterflowError):
    """Raised when a workflow or task file cannot be read or understood."""


class ConfigError(ButterflowError):
    """Raised when the configuration file or environment cannot be applied."""


class GraphError(ButterflowError):
    """Raised when a workflow cannot be turned into a graph."""


class EmptyWorkflow(GraphError):
    """The workflow has no nodes."""

    def __init__(self):
        super().__init__("Workflow has no nodes")


class DuplicateNode(GraphError):
    """Two nodes share an id."""

    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Duplicate node id '{node_id}'")


class DanglingDependency(GraphError):
    """A ``depends_on`` entry names a node that does not exist."""

    def __init__(self, node_id: str, missing_id: str):
        self.node_id = node_id
        self.missing_id = missing_id
        super().__init__(f"Node '{node_id}' depends on unknown node '{missing_id}'")


class CyclicDependency(GraphError):
    """The ``depends_on`` relation contains a cycle."""

    def __init__(self, cycle: Sequence[str]):
        self.cycle: List[str] = list(cycle)
        super().__init__(f"Circular dependency: {' -> '.join(self.cycle)}")


class LayoutError(ButterflowError):
    """The layered layout computation failed or returned no placements."""
