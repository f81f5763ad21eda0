"""
Tests for the data models in Butterflow.
"""

import pytest

from butterflow.core.models import (
    EdgeRecord, Node, NodeType, NodeView, Position, ProjectStatus, Task, Workflow
)


class TestNode:
    """Tests for the Node class."""

    def test_from_dict_defaults(self):
        node = Node.from_dict({'id': 'n1'})

        assert node.name == 'n1'
        assert node.type == NodeType.AUTOMATIC
        assert node.depends_on == ()
        assert node.code_snippet == ""

    def test_from_dict_keeps_dependency_order(self):
        node = Node.from_dict({'id': 'n', 'name': 'N', 'depends_on': ['z', 'a', 'm']})
        assert node.depends_on == ('z', 'a', 'm')

    def test_invalid_type_rejected(self):
        with pytest.raises(ValueError):
            Node.from_dict({'id': 'n', 'type': 'robotic'})

    @pytest.mark.parametrize("name,expected", [
        ("Login Component", "components/login-component.jsx"),
        ("Settings UI", "components/settings-ui.jsx"),
        ("Weather API", "services/weather-api.js"),
        ("User Schema", "models/user-schema.js"),
        ("Auth Controller", "controllers/auth-controller.js"),
        ("User Route", "routes/user-route.js"),
        ("Project   Setup", "src/project-setup.js"),
    ])
    def test_resolved_file_path(self, name, expected):
        assert Node(id='n', name=name).resolved_file_path() == expected

    def test_explicit_file_path_wins(self):
        node = Node(id='n', name='Weather API', file_path='api/weather.ts')
        assert node.resolved_file_path() == 'api/weather.ts'


class TestWorkflow:
    """Tests for the Workflow class."""

    def test_unwraps_workflow_key(self):
        workflow = Workflow.from_dict({'workflow': {'version': '2.0', 'nodes': [{'id': 'x'}]}})

        assert workflow.version == '2.0'
        assert [node.id for node in workflow.nodes] == ['x']

    def test_get_node(self, sample_workflow):
        assert sample_workflow.get_node('c').name == 'Review Results'
        assert sample_workflow.get_node('missing') is None

    def test_to_dict_round_trip(self, sample_workflow):
        assert Workflow.from_dict(sample_workflow.to_dict()) == sample_workflow

    def test_is_immutable(self, sample_workflow):
        with pytest.raises(AttributeError):
            sample_workflow.version = '9'


class TestTask:
    """Tests for the Task class."""

    def test_accepts_both_step_keys(self):
        camel = Task.from_dict({'id': 't', 'name': 'T', 'status': 'done', 'workflowStepId': 'a'})
        snake = Task.from_dict({'id': 't', 'name': 'T', 'status': 'done', 'workflow_step_id': 'a'})

        assert camel == snake
        assert camel.to_dict()['workflowStepId'] == 'a'

    def test_missing_step_id(self):
        with pytest.raises(KeyError):
            Task.from_dict({'id': 't', 'status': 'done'})

    def test_unknown_status(self):
        with pytest.raises(ValueError):
            Task.from_dict({'id': 't', 'status': 'blocked', 'workflowStepId': 'a'})


def test_edge_id():
    assert EdgeRecord(source='a', target='b').id == 'ea-b'


@pytest.mark.parametrize("count,label", [(0, ""), (1, "1 task"), (3, "3 tasks")])
def test_node_view_task_label(count, label):
    tasks = tuple(Task(id=str(i), name=str(i), status=ProjectStatus.TODO, workflow_step_id='a')
                  for i in range(count))
    view = NodeView(node=Node(id='a', name='A'), aggregated_status=ProjectStatus.TODO,
                    position=Position(0, 0), tasks=tasks)
    assert view.task_label == label
