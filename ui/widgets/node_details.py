"""
Node details widget module for Butterflow Textual UI.

This module shows the full record of the selected node: overview fields and
its code snippet.
"""

from typing import Optional

from rich.console import Group
from rich.syntax import Syntax
from rich.text import Text
from textual.widgets import Static

from ...core.models import Node, NodeView
from ...utils.snippets import dedent_snippet, language_for
from ...utils.status_visualization import StatusVisualization


class NodeDetails(Static):
    """
    Side panel describing the selected node.
    """

    EMPTY_TEXT = "Select a node to see its details"

    def __init__(self, **kwargs):
        super().__init__(Text(self.EMPTY_TEXT, style="dim"), **kwargs)
        self.node: Optional[Node] = None
        self.view: Optional[NodeView] = None

    def show_node(self, node: Optional[Node], view: Optional[NodeView] = None) -> None:
        """
        Display a node, or the empty hint when node is None.

        Args:
            node: Node to describe
            view: Current view of the node, for status and tasks
        """
        self.node = node
        self.view = view
        if node is None:
            self.update(Text(self.EMPTY_TEXT, style="dim"))
            return
        self.update(self.build_renderable(node, view))

    @staticmethod
    def build_renderable(node: Node, view: Optional[NodeView] = None) -> Group:
        parts = [Text(node.name, style="bold")]
        if view is not None:
            status = StatusVisualization.format_status_text(view.aggregated_status)
            if view.task_label:
                status.append(f"  ({view.task_label})", style="dim")
            parts.append(status)

        parts.append(Text.assemble(("Type: ", "dim"), node.type.value))
        if node.depends_on:
            parts.append(Text.assemble(("Dependencies: ", "dim"), ", ".join(node.depends_on)))
        if node.description:
            parts.append(Text(node.description))

        file_path = node.resolved_file_path()
        parts.append(Text.assemble(("File: ", "dim"), file_path))
        if node.code_snippet:
            parts.append(Syntax(dedent_snippet(node.code_snippet), language_for(file_path),
                                theme="monokai", line_numbers=True, word_wrap=True))
        else:
            parts.append(Text("No code available", style="dim italic"))

        return Group(*parts)
