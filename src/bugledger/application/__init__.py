"""
Application Layer - Use cases, commands, and reconciliation.

This layer contains:
- session: Session bootstrap against the ledger
- projection: Full-table reads into the display model
- commands/: Add, resolve and delete commands and their dispatcher
- sync/: Reconciliation trigger and the engine facade
"""

from .session import SessionBootstrap
from .projection import ProjectionReader, project_record
from .commands import (
    Command,
    CommandResult,
    CommandOutcome,
    CommandDispatcher,
    AddBugCommand,
    UpdateStatusCommand,
    DeleteBugCommand,
)
from .sync import BugSyncEngine, ReconciliationTrigger, TriggerState

__all__ = [
    "SessionBootstrap",
    "ProjectionReader",
    "project_record",
    "Command",
    "CommandResult",
    "CommandOutcome",
    "CommandDispatcher",
    "AddBugCommand",
    "UpdateStatusCommand",
    "DeleteBugCommand",
    "BugSyncEngine",
    "ReconciliationTrigger",
    "TriggerState",
]
