"""
Themes module for Butterflow UI.

This module provides the theme components for the application.
"""

from .default import DefaultTheme

__all__ = [
    'DefaultTheme'
]
