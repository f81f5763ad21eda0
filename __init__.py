"""
Butterflow - Generate, lay out and explore workflow diagrams.

This package turns a workflow definition and its tasks into a layered,
status-coloured diagram, with a terminal viewer and a command-line interface.
"""

__version__ = "0.1.0"

# Import main modules for easy access
from . import config
from . import core
from . import parsers
from . import utils

# Import CLI module for entry point
from . import cli

# Define what gets imported with "from butterflow import *"
__all__ = [
    "config",
    "core",
    "parsers",
    "utils",
    "cli",
    "__version__"
]


# Define the CLI entry point function
def main():
    """Main entry point for the CLI."""
    from .cli import main as cli_main
    return cli_main()
