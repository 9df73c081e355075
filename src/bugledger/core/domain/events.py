"""
Domain Events - Things that happened in the domain.

Events are immutable records of something that occurred. The presentation
layer subscribes to them to learn about outcomes out of band.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4


@dataclass(frozen=True)
class DomainEvent:
    """Base class for all domain events."""
    
    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    
    @property
    def event_type(self) -> str:
        """Get the event type name."""
        return self.__class__.__name__


@dataclass(frozen=True)
class SessionOpened(DomainEvent):
    """Event: A session against the ledger was established."""
    
    endpoint: str = ""
    identities: tuple = ()


@dataclass(frozen=True)
class ProjectionLoaded(DomainEvent):
    """Event: A fresh projection was installed."""
    
    bug_count: int = 0


@dataclass(frozen=True)
class ProjectionLoadFailed(DomainEvent):
    """Event: A reconciliation failed; the previous projection was kept."""
    
    failed_index: Optional[int] = None
    error: str = ""


@dataclass(frozen=True)
class BugAdded(DomainEvent):
    """Event: The ledger accepted a new bug."""
    
    bug_id: str = ""
    criticality: str = ""
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class BugResolved(DomainEvent):
    """Event: The ledger accepted a status update."""
    
    index: int = -1
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class BugDeleted(DomainEvent):
    """Event: The ledger accepted a deletion."""
    
    index: int = -1
    tx_hash: Optional[str] = None


@dataclass(frozen=True)
class CommandFailed(DomainEvent):
    """Event: A command was rejected locally or by the ledger."""
    
    command: str = ""
    error: str = ""


@dataclass(frozen=True)
class DeleteRefused(DomainEvent):
    """Event: A delete was refused because the bug is not resolved."""
    
    index: int = -1


class EventBus:
    """
    Simple event bus for publishing and subscribing to domain events.
    
    This enables loose coupling between components.
    """
    
    def __init__(self):
        self._handlers: dict[type, list] = {}
        self._history: list[DomainEvent] = []
    
    def subscribe(self, event_type: type, handler: Callable) -> None:
        """Subscribe a handler to an event type."""
        if event_type not in self._handlers:
            self._handlers[event_type] = []
        self._handlers[event_type].append(handler)
    
    def publish(self, event: DomainEvent) -> None:
        """Publish an event to all subscribers."""
        self._history.append(event)
        
        # Call specific handlers
        for handler in self._handlers.get(type(event), []):
            handler(event)
        
        # Call catch-all handlers
        for handler in self._handlers.get(DomainEvent, []):
            handler(event)
    
    def get_history(self) -> list[DomainEvent]:
        """Get all published events."""
        return self._history.copy()
    
    def clear_history(self) -> None:
        """Clear event history."""
        self._history.clear()
