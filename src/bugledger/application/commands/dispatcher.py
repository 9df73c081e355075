"""
Command Dispatcher - Entry point for user intents that mutate the ledger.
"""

import logging
from typing import TYPE_CHECKING, Callable, Optional

from ...core.domain.entities import BugDraft, EngineContext
from ...core.domain.events import EventBus
from ...core.ports.ledger import DEFAULT_GAS_LIMIT
from .base import Command, CommandResult
from .bug_commands import AddBugCommand, DeleteBugCommand, UpdateStatusCommand

if TYPE_CHECKING:
    from ..sync.reconciler import ReconciliationTrigger


class CommandDispatcher:
    """
    Builds and runs commands against the current session.
    
    Every accepted command requests a reconciliation. Failed or refused
    commands do not: a stale projection is preferred over masking a failed
    write.
    """
    
    def __init__(
        self,
        context: Callable[[], EngineContext],
        trigger: "ReconciliationTrigger",
        event_bus: Optional[EventBus] = None,
        gas_limit: int = DEFAULT_GAS_LIMIT,
    ):
        """
        Initialize the dispatcher.
        
        Args:
            context: Returns the engine's current context
            trigger: Reconciliation trigger to notify after acceptance
            event_bus: Optional event bus
            gas_limit: Fixed resource ceiling for every call
        """
        self._context = context
        self.trigger = trigger
        self.event_bus = event_bus or EventBus()
        self.gas_limit = gas_limit
        self.logger = logging.getLogger("CommandDispatcher")
    
    async def add_bug(self, draft: BugDraft) -> CommandResult:
        """
        Submit `draft` as a new bug.
        
        The draft is cleared only once the ledger accepts it, so a failed
        submission can be retried as-is.
        """
        command = AddBugCommand(
            self._session(),
            bug_id=draft.bug_id,
            description=draft.description,
            criticality=draft.criticality,
            gas_limit=self.gas_limit,
            event_bus=self.event_bus,
        )
        result = await command.execute()
        if result.success:
            draft.clear()
            await self.trigger.request()
        return result
    
    async def update_status(self, index: int) -> CommandResult:
        """Mark the record at `index` resolved."""
        return await self._run(UpdateStatusCommand(
            self._session(),
            index,
            gas_limit=self.gas_limit,
            event_bus=self.event_bus,
        ))
    
    async def delete_bug(self, index: int) -> CommandResult:
        """Delete the record at `index` if the ledger says it is resolved."""
        return await self._run(DeleteBugCommand(
            self._session(),
            index,
            gas_limit=self.gas_limit,
            event_bus=self.event_bus,
        ))
    
    async def _run(self, command: Command) -> CommandResult:
        result = await command.execute()
        if result.success:
            await self.trigger.request()
        return result
    
    def _session(self):
        return self._context().session
