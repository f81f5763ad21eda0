"""
Core data models for Butterflow.
"""
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Dict, Any, Optional, Tuple


class ProjectStatus(str, Enum):
    """
    Lifecycle status of a task tracked against a workflow node.
    """
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    CLOSED = "closed"
    AWAITING_TRIGGER = "awaiting_trigger"
    IS_BOT_PROCESSING = "is_bot_processing"


class NodeType(str, Enum):
    """
    How a workflow step is triggered. Informational only.
    """
    AUTOMATIC = "automatic"
    MANUAL = "manual"


# Substrings of a node name mapped to the folder and extension used when
# the node has no explicit file path.
_FILE_PATH_RULES = [
    (("Component", "UI"), "components", ".jsx"),
    (("Service", "API"), "services", ".js"),
    (("Model", "Schema"), "models", ".js"),
    (("Controller",), "controllers", ".js"),
    (("Route",), "routes", ".js"),
]


@dataclass(frozen=True)
class Node:
    """
    Represents one step in a workflow.
    """
    id: str
    name: str
    type: NodeType = NodeType.AUTOMATIC
    depends_on: Tuple[str, ...] = ()
    description: str = ""
    code_snippet: str = ""
    file_path: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Node':
        """
        Create a Node from a plain dictionary.

        Args:
            data: Node dictionary as found in a workflow file

        Returns:
            Node instance
        """
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or data['id']),
            type=NodeType(data.get('type') or NodeType.AUTOMATIC.value),
            depends_on=tuple(str(dep) for dep in (data.get('depends_on') or [])),
            description=data.get('description') or "",
            code_snippet=data.get('code_snippet') or "",
            file_path=data.get('file_path') or "",
        )

    def resolved_file_path(self) -> str:
        """Return the explicit file path, or one derived from the node name."""
        if self.file_path:
            return self.file_path

        slug = re.sub(r'\s+', '-', self.name.lower())
        for markers, folder, extension in _FILE_PATH_RULES:
            if any(marker in self.name for marker in markers):
                return f"{folder}/{slug}{extension}"
        return f"src/{slug}.js"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type.value,
            'depends_on': list(self.depends_on),
            'description': self.description,
            'code_snippet': self.code_snippet,
            'file_path': self.file_path,
        }


@dataclass(frozen=True)
class Workflow:
    """
    A named DAG of steps. Immutable; a new workflow replaces the old one.
    """
    version: str
    nodes: Tuple[Node, ...] = ()
    name: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Workflow':
        """
        Create a Workflow from a plain dictionary.

        Accepts both the bare form and the ``{"workflow": {...}}`` wrapper.

        Args:
            data: Workflow dictionary

        Returns:
            Workflow instance
        """
        if 'workflow' in data and isinstance(data['workflow'], dict):
            data = data['workflow']
        return cls(
            version=str(data.get('version', '1.0')),
            name=data.get('name'),
            description=data.get('description'),
            nodes=tuple(Node.from_dict(node) for node in (data.get('nodes') or [])),
        )

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'version': self.version}
        if self.name is not None:
            result['name'] = self.name
        if self.description is not None:
            result['description'] = self.description
        result['nodes'] = [node.to_dict() for node in self.nodes]
        return result


@dataclass(frozen=True)
class Task:
    """
    A unit of work tracked against a workflow node.
    """
    id: str
    name: str
    status: ProjectStatus
    workflow_step_id: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Task':
        step_id = data.get('workflowStepId', data.get('workflow_step_id'))
        if step_id is None:
            raise KeyError('workflowStepId')
        return cls(
            id=str(data['id']),
            name=str(data.get('name') or data['id']),
            status=ProjectStatus(data.get('status') or ProjectStatus.TODO.value),
            workflow_step_id=str(step_id),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'name': self.name,
            'status': self.status.value,
            'workflowStepId': self.workflow_step_id,
        }


@dataclass(frozen=True)
class Position:
    """
    Top-left corner of a node box in layout units.
    """
    x: float
    y: float


@dataclass(frozen=True)
class NodeRecord:
    """
    A node together with its tasks and aggregated display status.
    """
    node: Node
    aggregated_status: ProjectStatus
    tasks: Tuple[Task, ...] = ()

    @property
    def id(self) -> str:
        return self.node.id


@dataclass(frozen=True)
class EdgeRecord:
    """
    A dependency edge drawn from ``source`` to ``target``.
    """
    source: str
    target: str

    @property
    def id(self) -> str:
        return f"e{self.source}-{self.target}"


@dataclass(frozen=True)
class WorkflowGraph:
    """
    Abstract directed graph produced by the graph builder.
    """
    nodes: Tuple[NodeRecord, ...] = ()
    edges: Tuple[EdgeRecord, ...] = ()

    @property
    def node_ids(self) -> List[str]:
        return [record.id for record in self.nodes]

    def get_record(self, node_id: str) -> Optional[NodeRecord]:
        for record in self.nodes:
            if record.id == node_id:
                return record
        return None


@dataclass(frozen=True)
class NodeView:
    """
    Everything a renderer needs to draw one node. Rebuilt on every change.
    """
    node: Node
    aggregated_status: ProjectStatus
    position: Position
    is_hovered: bool = False
    is_selected: bool = False
    tasks: Tuple[Task, ...] = field(default=())

    @property
    def id(self) -> str:
        return self.node.id

    @property
    def task_label(self) -> str:
        """Badge text such as ``1 task`` or ``3 tasks``; empty without tasks."""
        count = len(self.tasks)
        if count == 0:
            return ""
        return f"{count} {'task' if count == 1 else 'tasks'}"
