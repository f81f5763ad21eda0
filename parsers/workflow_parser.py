"""
Workflow parser module for Butterflow.

This module loads workflow definitions from JSON or YAML files, either in the
bare form (``version`` and ``nodes`` at the top level) or wrapped in a
``workflow`` key as produced by the generator.
"""
import logging
from pathlib import Path
from typing import Any, Union

from ..errors import WorkflowLoadError
from ..core.models import Workflow
from .base_parser import BaseParser


class WorkflowParser(BaseParser):
    """
    Parser for workflow definition files.
    """

    def __init__(self, config=None) -> None:
        super().__init__(config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def parse(self, source: Union[str, Path]) -> Workflow:
        """
        Parse a workflow file.

        Args:
            source: Path to a JSON or YAML workflow file

        Returns:
            Workflow instance

        Raises:
            WorkflowLoadError: The file is missing, malformed or has invalid values
        """
        workflow = self.parse_data(self.load(source))
        self.logger.info(f"Loaded workflow {workflow.name or source} with {len(workflow.nodes)} nodes")
        return workflow

    def parse_data(self, data: Any) -> Workflow:
        if not isinstance(data, dict):
            raise WorkflowLoadError("Workflow document must be a mapping")

        body = data.get('workflow', data)
        if not isinstance(body, dict):
            raise WorkflowLoadError("'workflow' must be a mapping")
        if not isinstance(body.get('nodes', []), list):
            raise WorkflowLoadError("'nodes' must be a list")

        for i, node in enumerate(body.get('nodes', [])):
            if not isinstance(node, dict) or 'id' not in node:
                raise WorkflowLoadError(f"Node {i} has no id")

        try:
            return Workflow.from_dict(body)
        except (KeyError, TypeError, ValueError) as e:
            raise WorkflowLoadError(f"Invalid workflow: {e}") from e
