"""Core functionality module for Butterflow."""

from .controller import DiagramController
from .event_bus import EventBus
from .file_monitor import FileMonitor
from .graph_builder import GraphBuilder
from .layout_engine import LayeredLayout, LayoutEngine

__all__ = ['DiagramController', 'EventBus', 'FileMonitor', 'GraphBuilder', 'LayeredLayout', 'LayoutEngine']
