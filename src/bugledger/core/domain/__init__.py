"""
Domain - Entities, enums and events of the bug ledger.
"""

from .enums import Criticality, INVALID_CODE, encode_criticality, decode_criticality
from .entities import Bug, BugDraft, Session, Projection, EngineContext
from .events import (
    DomainEvent,
    EventBus,
    SessionOpened,
    ProjectionLoaded,
    ProjectionLoadFailed,
    BugAdded,
    BugResolved,
    BugDeleted,
    CommandFailed,
    DeleteRefused,
)

__all__ = [
    "Criticality",
    "INVALID_CODE",
    "encode_criticality",
    "decode_criticality",
    "Bug",
    "BugDraft",
    "Session",
    "Projection",
    "EngineContext",
    "DomainEvent",
    "EventBus",
    "SessionOpened",
    "ProjectionLoaded",
    "ProjectionLoadFailed",
    "BugAdded",
    "BugResolved",
    "BugDeleted",
    "CommandFailed",
    "DeleteRefused",
]
