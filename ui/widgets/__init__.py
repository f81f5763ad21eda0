"""
Widgets module for Butterflow UI.

This module provides the widget components for the application.
"""

from .diagram_view import DiagramView
from .node_details import NodeDetails

__all__ = [
    'DiagramView',
    'NodeDetails'
]
