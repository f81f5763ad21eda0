"""
Pytest configuration for Butterflow tests.

This file contains fixtures and configuration for the test suite.
"""

import json
import pytest
import tempfile
import os
from pathlib import Path

import yaml

from butterflow.config.config import Config
from butterflow.core.controller import DiagramController
from butterflow.core.event_bus import EventBus
from butterflow.core.models import ProjectStatus, Task, Workflow
from butterflow.parsers.task_parser import TaskParser
from butterflow.parsers.workflow_parser import WorkflowParser


SAMPLE_WORKFLOW = {
    'version': '1.0',
    'name': 'Sample Pipeline',
    'nodes': [
        {'id': 'a', 'name': 'Fetch Data', 'type': 'automatic'},
        {'id': 'b', 'name': 'Clean Data', 'type': 'automatic', 'depends_on': ['a']},
        {'id': 'c', 'name': 'Review Results', 'type': 'manual', 'depends_on': ['a']},
        {'id': 'd', 'name': 'Publish Report', 'type': 'automatic', 'depends_on': ['b', 'c'],
         'code_snippet': '    def publish():\n        return True'},
    ],
}

SAMPLE_TASKS = [
    {'id': 't1', 'name': 'Download', 'status': 'done', 'workflowStepId': 'a'},
    {'id': 't2', 'name': 'Dedupe', 'status': 'in_progress', 'workflowStepId': 'b'},
    {'id': 't3', 'name': 'Sign off', 'status': 'awaiting_trigger', 'workflowStepId': 'c'},
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep BUTTERFLOW_* variables from the outer shell out of the tests."""
    for name in ('BUTTERFLOW_CONFIG', 'BUTTERFLOW_LOG_LEVEL', 'BUTTERFLOW_THEME', 'BUTTERFLOW_LAYOUT_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_config():
    """Create a sample configuration for testing."""
    config = Config()
    config.monitor.debounce = 0.1  # Faster for tests
    return config


@pytest.fixture
def sample_workflow():
    """Four-node diamond workflow."""
    return Workflow.from_dict(SAMPLE_WORKFLOW)


@pytest.fixture
def sample_tasks():
    return [Task.from_dict(task) for task in SAMPLE_TASKS]


@pytest.fixture
def event_bus():
    """Create a private event bus instance."""
    return EventBus()


@pytest.fixture
def sample_controller(sample_config, event_bus):
    """Create a controller publishing on a private bus."""
    return DiagramController(sample_config, event_bus=event_bus)


@pytest.fixture
def sample_workflow_parser(sample_config):
    """Create a sample workflow parser for testing."""
    return WorkflowParser(sample_config)


@pytest.fixture
def sample_task_parser(sample_config):
    return TaskParser(sample_config)


@pytest.fixture
def temp_workflow_file():
    """Create a temporary YAML workflow file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.yaml', delete=False) as f:
        yaml.dump(SAMPLE_WORKFLOW, f, default_flow_style=False)
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    os.unlink(temp_path)


@pytest.fixture
def temp_tasks_file():
    """Create a temporary JSON task file for testing."""
    with tempfile.NamedTemporaryFile(mode='w', suffix='.json', delete=False) as f:
        json.dump({'tasks': SAMPLE_TASKS}, f)
        temp_path = Path(f.name)

    yield temp_path

    # Cleanup
    os.unlink(temp_path)


@pytest.fixture
def make_task():
    """Factory for tasks attached to node 'a' unless told otherwise."""
    def factory(task_id: str, status: ProjectStatus, step: str = 'a') -> Task:
        return Task(id=task_id, name=task_id, status=status, workflow_step_id=step)
    return factory
