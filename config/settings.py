"""
Settings management for Butterflow.

This module provides application-wide settings and constants.
"""

from dataclasses import dataclass


@dataclass
class Settings:
    """Application settings and constants."""

    # Default paths
    DEFAULT_CONFIG_PATH: str = "./butterflow.yaml"

    # Node box size in layout units
    NODE_WIDTH: float = 250
    NODE_HEIGHT: float = 70
