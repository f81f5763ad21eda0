"""Parsers module for Butterflow."""

from .workflow_parser import WorkflowParser
from .task_parser import TaskParser

__all__ = ['WorkflowParser', 'TaskParser']
