"""
UI module for Butterflow.

This module provides the terminal user interface for the application.
"""

from .app import ButterflowApp
from .widgets.diagram_view import DiagramView
from .widgets.node_details import NodeDetails
from .themes.default import DefaultTheme

__all__ = [
    'ButterflowApp',
    'DiagramView',
    'NodeDetails',
    'DefaultTheme'
]
