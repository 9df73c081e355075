"""
Session Bootstrap - Open the ledger connection and resolve identities.
"""

import logging
from typing import Optional

from ..core.domain.entities import Session
from ..core.domain.events import EventBus, SessionOpened
from ..core.ports.ledger import LedgerConnectionError, LedgerError, LedgerPort


class SessionBootstrap:
    """
    Establishes the one session the engine uses for its whole lifetime.
    
    A session without identities is valid but inert: reads are skipped and
    commands are unavailable.
    """
    
    def __init__(self, ledger: LedgerPort, event_bus: Optional[EventBus] = None):
        self.ledger = ledger
        self.event_bus = event_bus or EventBus()
        self.logger = logging.getLogger("SessionBootstrap")
    
    async def open(self) -> Session:
        """
        Perform the handshake with the ledger endpoint.
        
        Raises:
            LedgerConnectionError: If the endpoint is unreachable
        """
        endpoint = self.ledger.endpoint
        self.logger.info(f"Opening session against {endpoint}")
        try:
            await self.ledger.connect()
        except LedgerConnectionError:
            raise
        except LedgerError as e:
            raise LedgerConnectionError(
                f"Could not open session against {endpoint}: {e}",
                endpoint=endpoint,
                cause=e,
            )
        return Session(connection=self.ledger, endpoint=endpoint)
    
    async def list_identities(self, session: Session) -> tuple[str, ...]:
        """
        Identities available on `session`, in the order the ledger lists them.
        
        Raises:
            LedgerConnectionError: If the identities cannot be fetched
        """
        try:
            identities = await session.connection.list_accounts()
        except LedgerError as e:
            raise LedgerConnectionError(
                f"Could not list identities on {session.endpoint}: {e}",
                endpoint=session.endpoint,
                cause=e,
            )
        return tuple(identities)
    
    async def bootstrap(self) -> Session:
        """Open a session and attach its identities."""
        session = await self.open()
        session = session.with_identities(await self.list_identities(session))
        
        if session.can_act:
            self.logger.info(
                f"Session ready with {len(session.identities)} identities, "
                f"acting as {session.acting_identity}"
            )
        else:
            self.logger.warning("Ledger exposed no identities; commands are unavailable")
        
        self.event_bus.publish(SessionOpened(
            endpoint=session.endpoint,
            identities=session.identities,
        ))
        return session
