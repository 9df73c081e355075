"""
Exit Codes - Process exit statuses for the CLI.
"""

from enum import IntEnum

from ..application.commands import CommandOutcome, CommandResult


class ExitCode(IntEnum):
    """Exit codes returned by `bugledger`."""
    
    SUCCESS = 0
    ERROR = 1
    CONFIG_ERROR = 2
    CONNECTION_ERROR = 3
    COMMAND_FAILED = 4
    PRECONDITION_NOT_MET = 5
    LOAD_FAILED = 6
    
    @classmethod
    def from_result(cls, result: CommandResult) -> "ExitCode":
        if result.outcome is CommandOutcome.ACCEPTED:
            return cls.SUCCESS
        if result.outcome is CommandOutcome.PRECONDITION_NOT_MET:
            return cls.PRECONDITION_NOT_MET
        return cls.COMMAND_FAILED
