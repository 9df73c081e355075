"""
Domain Entities - Bugs, the session and the projection.

Bugs are owned by the ledger. The client only ever holds read-only copies
inside a Projection, which is rebuilt wholesale on every reconciliation.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import TYPE_CHECKING, Any, Iterator, Optional

from .enums import Criticality, INVALID_CODE

if TYPE_CHECKING:
    from ..ports.ledger import LedgerPort


@dataclass(frozen=True)
class Bug:
    """
    A bug record as last read from the ledger.
    
    `index` is the record's position in the ledger at read time and is the
    only handle commands can use to address it. It shifts when an earlier
    record is deleted.
    """
    
    bug_id: str
    description: str
    criticality: Criticality
    is_resolved: bool
    index: int
    criticality_code: int = INVALID_CODE
    
    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.bug_id,
            "description": self.description,
            "criticality": self.criticality.label,
            "isResolved": self.is_resolved,
            "index": self.index,
        }


@dataclass
class BugDraft:
    """Caller-held form fields for a bug that has not been submitted yet."""
    
    bug_id: str = ""
    description: str = ""
    criticality: str = Criticality.LOW.label
    
    def clear(self) -> None:
        """Reset to the empty form."""
        self.bug_id = ""
        self.description = ""
        self.criticality = Criticality.LOW.label


@dataclass(frozen=True)
class Session:
    """
    A connection to the ledger plus the identities it exposes.
    
    Created once at startup and never refreshed.
    """
    
    connection: "LedgerPort"
    endpoint: str = ""
    identities: tuple[str, ...] = ()
    
    @property
    def acting_identity(self) -> Optional[str]:
        """First identity, used for every read and write."""
        return self.identities[0] if self.identities else None
    
    @property
    def can_act(self) -> bool:
        return self.acting_identity is not None
    
    def with_identities(self, identities: Any) -> "Session":
        return replace(self, identities=tuple(identities))


@dataclass(frozen=True)
class Projection:
    """Point-in-time snapshot of every ledger record, in ledger order."""
    
    bugs: tuple[Bug, ...] = ()
    loaded_at: Optional[datetime] = None
    
    def __len__(self) -> int:
        return len(self.bugs)
    
    def __iter__(self) -> Iterator[Bug]:
        return iter(self.bugs)
    
    def __getitem__(self, index: int) -> Bug:
        return self.bugs[index]
    
    @property
    def is_loaded(self) -> bool:
        return self.loaded_at is not None
    
    def to_list(self) -> list[dict[str, Any]]:
        return [bug.to_dict() for bug in self.bugs]


@dataclass(frozen=True)
class EngineContext:
    """
    Everything the engine shares between operations.
    
    Operations never mutate a context; they return a new one.
    """
    
    session: Optional[Session] = None
    projection: Projection = field(default_factory=Projection)
    
    @property
    def acting_identity(self) -> Optional[str]:
        return self.session.acting_identity if self.session else None
    
    def with_session(self, session: Session) -> "EngineContext":
        return replace(self, session=session)
    
    def with_projection(self, projection: Projection) -> "EngineContext":
        return replace(self, projection=projection)
