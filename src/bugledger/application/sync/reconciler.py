"""
Reconciliation Trigger - Decides when the projection is rebuilt.

States: UNINITIALIZED -> READY -> LOADING -> READY (loop).

Loads never overlap. A request that arrives while a load is in flight
marks one follow-up load as pending; any number of such requests collapse
into that single follow-up.
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, Optional

from ...core.domain.entities import Session
from ...core.domain.events import EventBus, ProjectionLoadFailed
from ...core.exceptions import LoadError


class TriggerState(Enum):
    """Reconciliation state."""
    
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    LOADING = "loading"


class ReconciliationTrigger:
    """
    Serializes projection loads.
    
    `reload` rebuilds and installs the projection; it may raise LoadError,
    which is recorded and published while the previous projection stays in
    place.
    """
    
    def __init__(
        self,
        reload: Callable[[], Awaitable[None]],
        event_bus: Optional[EventBus] = None,
    ):
        self._reload = reload
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("ReconciliationTrigger")
        
        self._state = TriggerState.UNINITIALIZED
        self._pending = False
        self._idle = asyncio.Event()
        self._idle.set()
        
        self.load_count = 0
        self.last_error: Optional[LoadError] = None
    
    @property
    def state(self) -> TriggerState:
        return self._state
    
    @property
    def has_pending(self) -> bool:
        return self._pending
    
    async def activate(self, session: Session) -> bool:
        """
        Enter READY once a session with an acting identity exists, and run
        the first load.
        
        Returns:
            True if the trigger became ready
        """
        if self._state is not TriggerState.UNINITIALIZED:
            return False
        if not session.can_act:
            self.logger.info("Session has no identities; staying uninitialized")
            return False
        
        self._state = TriggerState.READY
        await self.request()
        return True
    
    async def request(self) -> None:
        """
        Ask for a reconciliation.
        
        Returns once the projection reflects a load that started after this
        request (or immediately while uninitialized).
        """
        if self._state is TriggerState.UNINITIALIZED:
            self.logger.debug("Reconciliation requested before ready; ignored")
            return
        
        if self._state is TriggerState.LOADING:
            if not self._pending:
                self.logger.debug("Load in flight; scheduling one follow-up")
            else:
                self.logger.debug("Follow-up already scheduled; coalescing")
            self._pending = True
            await self._idle.wait()
            return
        
        self._state = TriggerState.LOADING
        self._idle.clear()
        try:
            while True:
                self._pending = False
                await self._load_once()
                if not self._pending:
                    break
                self.logger.debug("Running follow-up load")
        finally:
            self._state = TriggerState.READY
            self._idle.set()
    
    async def _load_once(self) -> None:
        self.load_count += 1
        try:
            await self._reload()
        except LoadError as e:
            self.last_error = e
            self.logger.error(f"Reconciliation failed, keeping previous projection: {e}")
            self.event_bus.publish(ProjectionLoadFailed(
                failed_index=e.index,
                error=str(e),
            ))
        else:
            self.last_error = None
