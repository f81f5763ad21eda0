"""
Default theme module for Butterflow Textual UI.

This module defines the default theme for the application UI. Node status
colours live with the renderer in ``utils.status_visualization``.
"""

from textual.theme import Theme


class DefaultTheme(Theme):
    """
    Default theme for Butterflow UI.
    """

    def __init__(self):
        """
        Initialize the default theme.
        """
        super().__init__(
            name="butterflow-default",
            primary="#DAF682",
            secondary="#9D6263",
            accent="#F4F9E0",
            warning="#EAB308",
            error="#EF4444",
            success="#22C55E",
            foreground="#F4F9E0",
            background="#1C2326",
            surface="#232B2F",
            panel="#2C363B",
            dark=True,
        )
