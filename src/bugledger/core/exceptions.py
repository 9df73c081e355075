"""
Exceptions - Outcome errors of engine operations.

These never escape an operation: loads report them through the
reconciliation trigger, commands through CommandResult.
"""

from typing import Optional


class BugLedgerError(Exception):
    """Base exception for engine outcomes."""
    
    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.cause = cause


class LoadError(BugLedgerError):
    """A read failed mid-projection; no partial projection is published."""
    
    def __init__(
        self,
        message: str,
        index: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.index = index


class CommandError(BugLedgerError):
    """A command failed validation or its mutating call was rejected."""
    
    def __init__(
        self,
        message: str,
        command: str = "",
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, cause=cause)
        self.command = command


class PreconditionNotMet(BugLedgerError):
    """A command was refused before any ledger write was attempted."""
    
    def __init__(self, message: str, index: Optional[int] = None):
        super().__init__(message)
        self.index = index


__all__ = ["BugLedgerError", "LoadError", "CommandError", "PreconditionNotMet"]
