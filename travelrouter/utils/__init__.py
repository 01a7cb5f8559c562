"""
Utility functions for Travel Router.

This module provides common utility functions used throughout the application.
"""

from .commands import CommandResult, run_command
from .polling import PollResult, poll_until

__all__ = [
    "CommandResult",
    "run_command",
    "PollResult",
    "poll_until",
]
