"""
Task parser module for Butterflow.

This module loads the task list tracked against a workflow's nodes.
"""

from pathlib import Path
from typing import Any, List, Union
import logging

from ..errors import WorkflowLoadError
from ..core.models import ProjectStatus, Task
from .base_parser import BaseParser


class TaskParser(BaseParser):
    """
    Parser for task list files.
    """

    def __init__(self, config=None):
        """
        Initialize the task parser.

        Args:
            config: Application configuration
        """
        super().__init__(config)
        self.logger = logging.getLogger(self.__class__.__name__)

        # Status spellings accepted besides the canonical ones
        self.status_aliases = {
            'in-progress': ProjectStatus.IN_PROGRESS.value,
            'inprogress': ProjectStatus.IN_PROGRESS.value,
            'awaiting-trigger': ProjectStatus.AWAITING_TRIGGER.value,
            'bot_processing': ProjectStatus.IS_BOT_PROCESSING.value,
        }

    def parse(self, source: Union[str, Path]) -> List[Task]:
        """
        Parse a task file.

        Args:
            source: Path to a JSON or YAML file holding a list of tasks,
                or a mapping with a ``tasks`` list

        Returns:
            List of tasks in file order

        Raises:
            WorkflowLoadError: The file is missing or a task is invalid
        """
        tasks = self.parse_data(self.load(source))
        self.logger.info(f"Loaded {len(tasks)} tasks from {source}")
        return tasks

    def parse_data(self, data: Any) -> List[Task]:
        if data is None:
            return []
        if isinstance(data, dict):
            data = data.get('tasks', [])
        if not isinstance(data, list):
            raise WorkflowLoadError("Task document must be a list or a mapping with 'tasks'")

        tasks = []
        for i, entry in enumerate(data):
            if not isinstance(entry, dict):
                raise WorkflowLoadError(f"Task {i} must be a mapping")
            entry = dict(entry)
            status = str(entry.get('status') or ProjectStatus.TODO.value).lower()
            entry['status'] = self.status_aliases.get(status, status)
            try:
                tasks.append(Task.from_dict(entry))
            except KeyError as e:
                raise WorkflowLoadError(f"Task {i} is missing field {e}") from e
            except ValueError as e:
                raise WorkflowLoadError(f"Task {i} has invalid status: {entry['status']}") from e
        return tasks
