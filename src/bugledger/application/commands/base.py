"""
Command Base - Shared execution contract for mutating commands.

Every command follows the same path: validate locally, submit one
mutating call to the ledger, report the outcome. Commands never raise;
failures come back as a CommandResult.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union

from ...core.domain.entities import Session
from ...core.domain.events import CommandFailed, DomainEvent, EventBus
from ...core.exceptions import CommandError, PreconditionNotMet
from ...core.ports.ledger import CallOptions, DEFAULT_GAS_LIMIT, LedgerError


class CommandOutcome(Enum):
    """Terminal outcome of a command."""
    
    ACCEPTED = "accepted"
    FAILED = "failed"
    PRECONDITION_NOT_MET = "precondition_not_met"


@dataclass
class CommandResult:
    """Result of executing a command."""
    
    outcome: CommandOutcome = CommandOutcome.ACCEPTED
    data: Any = None
    error: Optional[str] = None
    exception: Optional[Union[CommandError, PreconditionNotMet]] = None
    
    @property
    def success(self) -> bool:
        return self.outcome is CommandOutcome.ACCEPTED
    
    @property
    def refused(self) -> bool:
        return self.outcome is CommandOutcome.PRECONDITION_NOT_MET
    
    @classmethod
    def ok(cls, data: Any = None) -> "CommandResult":
        return cls(outcome=CommandOutcome.ACCEPTED, data=data)
    
    @classmethod
    def fail(cls, error: Union[CommandError, str]) -> "CommandResult":
        if isinstance(error, str):
            error = CommandError(error)
        return cls(outcome=CommandOutcome.FAILED, error=str(error), exception=error)
    
    @classmethod
    def not_met(cls, error: PreconditionNotMet) -> "CommandResult":
        return cls(
            outcome=CommandOutcome.PRECONDITION_NOT_MET,
            error=str(error),
            exception=error,
        )


class Command(ABC):
    """
    Abstract base class for commands.
    
    Subclasses implement validate() and _execute(). _execute() may raise
    LedgerError (reported as a failure) or PreconditionNotMet (reported as
    a refusal).
    """
    
    def __init__(
        self,
        session: Optional[Session],
        gas_limit: int = DEFAULT_GAS_LIMIT,
        event_bus: Optional[EventBus] = None,
    ):
        self.session = session
        self.gas_limit = gas_limit
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger(self.__class__.__name__)
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Command name for logs and events."""
        ...
    
    @property
    def options(self) -> CallOptions:
        return CallOptions(sender=self.session.acting_identity, gas=self.gas_limit)
    
    def validate(self) -> Optional[str]:
        """Return an error message, or None if the command may be submitted."""
        if self.session is None:
            return "No ledger session"
        if not self.session.can_act:
            return "No acting identity; commands are unavailable"
        return None
    
    @abstractmethod
    async def _execute(self) -> Any:
        """Submit the mutating call."""
        ...
    
    @abstractmethod
    def _accepted_event(self, data: Any) -> DomainEvent:
        """Event published once the ledger accepts the command."""
        ...
    
    async def execute(self) -> CommandResult:
        """Validate, submit and report."""
        error = self.validate()
        if error:
            return self._failed(CommandError(error, command=self.name))
        
        try:
            data = await self._execute()
        except PreconditionNotMet as e:
            self.logger.warning(f"{self.name} refused: {e}")
            self._on_refused(e)
            return CommandResult.not_met(e)
        except LedgerError as e:
            return self._failed(CommandError(f"{self.name} failed: {e}", command=self.name, cause=e))
        
        self.logger.info(f"{self.name} accepted")
        self.event_bus.publish(self._accepted_event(data))
        return CommandResult.ok(data)
    
    def _on_refused(self, error: PreconditionNotMet) -> None:
        """Hook for commands that publish a refusal event."""
    
    def _failed(self, error: CommandError) -> CommandResult:
        self.logger.error(str(error))
        self.event_bus.publish(CommandFailed(command=self.name, error=str(error)))
        return CommandResult.fail(error)
