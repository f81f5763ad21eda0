"""Utilities module for Butterflow."""

from .diagram_render import DiagramCanvas
from .status_visualization import StatusVisualization

__all__ = ['DiagramCanvas', 'StatusVisualization']
