"""
CLI Module - Command Line Interface and presentation adapter for bugledger.
"""

from .app import main, run
from .exit_codes import ExitCode
from .shell import BugShell
from .view import BugListView, BugRow, BugTrackerPresenter, Notification

__all__ = [
    "main",
    "run",
    "ExitCode",
    "BugShell",
    "BugListView",
    "BugRow",
    "BugTrackerPresenter",
    "Notification",
]
