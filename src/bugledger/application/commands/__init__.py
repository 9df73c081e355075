"""
Commands - Mutating operations against the ledger.

Commands represent write operations and are:
- Validated locally before anything is submitted
- Submitted as exactly one mutating call
- Reported as a CommandResult, never raised
"""

from .base import Command, CommandResult, CommandOutcome
from .bug_commands import AddBugCommand, UpdateStatusCommand, DeleteBugCommand
from .dispatcher import CommandDispatcher

__all__ = [
    "Command",
    "CommandResult",
    "CommandOutcome",
    "AddBugCommand",
    "UpdateStatusCommand",
    "DeleteBugCommand",
    "CommandDispatcher",
]
