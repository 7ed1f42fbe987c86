"""
Videodoc CLI Commands

All command modules for the vd CLI tool.
Each module provides functions and argument parsing for a specific command group.
"""

from . import narration, captions

__all__ = ['narration', 'captions']
