"""
Bug Sync Engine - Wires session, reader, trigger and dispatcher together.

The engine owns a single EngineContext. Operations never edit it in place:
each reconciliation swaps in a new context holding the new projection.
"""

import logging
from typing import Optional

from ...core.domain.entities import BugDraft, EngineContext, Projection, Session
from ...core.domain.events import EventBus, ProjectionLoaded
from ...core.exceptions import LoadError
from ...core.ports.ledger import DEFAULT_GAS_LIMIT, LedgerPort
from ..commands import CommandDispatcher, CommandResult
from ..projection import ProjectionReader
from ..session import SessionBootstrap
from .reconciler import ReconciliationTrigger, TriggerState


class BugSyncEngine:
    """
    Keeps a local projection of the ledger in step with the commands issued
    through it.
    
    Usage:
        engine = BugSyncEngine(ledger)
        await engine.start()
        await engine.add_bug(BugDraft("BUG-1", "null pointer", "Medium"))
        engine.projection  # reconciled after the add was accepted
    """
    
    def __init__(
        self,
        ledger: LedgerPort,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        event_bus: Optional[EventBus] = None,
    ):
        self.ledger = ledger
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("BugSyncEngine")
        
        self.context = EngineContext()
        self.bootstrap = SessionBootstrap(ledger, self.event_bus)
        self.reader = ProjectionReader(gas_limit=gas_limit)
        self.trigger = ReconciliationTrigger(self._reload, self.event_bus)
        self.dispatcher = CommandDispatcher(
            lambda: self.context,
            self.trigger,
            event_bus=self.event_bus,
            gas_limit=gas_limit,
        )
    
    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------
    
    @property
    def session(self) -> Optional[Session]:
        return self.context.session
    
    @property
    def projection(self) -> Projection:
        return self.context.projection
    
    @property
    def state(self) -> TriggerState:
        return self.trigger.state
    
    @property
    def last_load_error(self) -> Optional[LoadError]:
        return self.trigger.last_error
    
    @property
    def can_act(self) -> bool:
        return self.session is not None and self.session.can_act
    
    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------
    
    async def start(self) -> EngineContext:
        """
        Bootstrap the session and run the first reconciliation.
        
        Raises:
            LedgerConnectionError: If the ledger cannot be reached
        """
        if self.session is not None:
            return self.context
        
        session = await self.bootstrap.bootstrap()
        self.context = self.context.with_session(session)
        await self.trigger.activate(session)
        return self.context
    
    async def refresh(self) -> Projection:
        """Request a reconciliation and return the resulting projection."""
        await self.trigger.request()
        return self.projection
    
    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------
    
    async def add_bug(self, draft: BugDraft) -> CommandResult:
        return await self.dispatcher.add_bug(draft)
    
    async def update_status(self, index: int) -> CommandResult:
        return await self.dispatcher.update_status(index)
    
    async def delete_bug(self, index: int) -> CommandResult:
        return await self.dispatcher.delete_bug(index)
    
    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------
    
    async def _reload(self) -> None:
        context = await self.reader.load_all(self.context)
        if context is self.context:
            return
        self.context = context
        self.event_bus.publish(ProjectionLoaded(bug_count=len(context.projection)))
