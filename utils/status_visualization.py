"""
Status visualization utilities for Butterflow.

This module maps task and node statuses to colors, symbols and summary
tables used by the terminal renderer and the CLI.
"""

from typing import Dict, Iterable, Union

from rich.table import Table
from rich.text import Text

from ..core.models import NodeView, ProjectStatus


class StatusVisualization:
    """
    Utility class for status visualization in Butterflow.
    """

    STATUS_COLORS = {
        ProjectStatus.DONE: 'green',
        ProjectStatus.IN_PROGRESS: 'blue',
        ProjectStatus.IS_BOT_PROCESSING: 'blue',
        ProjectStatus.AWAITING_TRIGGER: 'yellow',
        ProjectStatus.CLOSED: 'red',
        ProjectStatus.TODO: 'grey50',
    }

    STATUS_SYMBOLS = {
        ProjectStatus.DONE: '✔',
        ProjectStatus.IN_PROGRESS: '●',
        ProjectStatus.IS_BOT_PROCESSING: '●',
        ProjectStatus.AWAITING_TRIGGER: '◐',
        ProjectStatus.CLOSED: '✖',
        ProjectStatus.TODO: '○',
    }

    @classmethod
    def _coerce(cls, status: Union[ProjectStatus, str]) -> ProjectStatus:
        return status if isinstance(status, ProjectStatus) else ProjectStatus(status)

    @classmethod
    def get_status_color(cls, status: Union[ProjectStatus, str]) -> str:
        """
        Get the color for a given status.

        Args:
            status: Status value

        Returns:
            Rich color name for the status
        """
        return cls.STATUS_COLORS.get(cls._coerce(status), 'grey50')

    @classmethod
    def get_status_symbol(cls, status: Union[ProjectStatus, str]) -> str:
        return cls.STATUS_SYMBOLS.get(cls._coerce(status), '○')

    @classmethod
    def format_status_text(cls, status: Union[ProjectStatus, str], include_symbol: bool = True) -> Text:
        """
        Format status text with color and symbol.

        Args:
            status: Status value
            include_symbol: Whether to include symbol

        Returns:
            Formatted Text object
        """
        status = cls._coerce(status)
        color = cls.get_status_color(status)
        label = status.value.replace('_', ' ')
        if include_symbol:
            return Text(f"{cls.get_status_symbol(status)} {label}", style=f"bold {color}")
        return Text(label, style=f"bold {color}")

    @classmethod
    def count_statuses(cls, views: Iterable[NodeView]) -> Dict[ProjectStatus, int]:
        """Count nodes per aggregated status, in enum order."""
        counts = {status: 0 for status in ProjectStatus}
        for view in views:
            counts[view.aggregated_status] += 1
        return {status: count for status, count in counts.items() if count}

    @classmethod
    def create_node_table(cls, views: Iterable[NodeView]) -> Table:
        """
        Create a Rich table listing nodes with status and position.

        Args:
            views: Node views to list

        Returns:
            Rich Table object
        """
        table = Table(title="Workflow Nodes", show_header=True, header_style="bold magenta")
        table.add_column("ID", style="dim")
        table.add_column("Name")
        table.add_column("Status")
        table.add_column("Tasks", justify="right")
        table.add_column("Depends on")
        table.add_column("X", justify="right")
        table.add_column("Y", justify="right")

        for view in views:
            table.add_row(
                view.id,
                view.node.name,
                cls.format_status_text(view.aggregated_status),
                str(len(view.tasks)),
                ", ".join(view.node.depends_on),
                f"{view.position.x:.1f}",
                f"{view.position.y:.1f}",
            )

        return table
