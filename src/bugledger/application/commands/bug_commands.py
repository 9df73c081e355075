"""
Bug Commands - Add, resolve and delete bugs on the ledger.
"""

from typing import Any, Optional

from ...core.domain.entities import Session
from ...core.domain.enums import (
    INVALID_CODE,
    Criticality,
    decode_criticality,
    encode_criticality,
)
from ...core.domain.events import (
    BugAdded,
    BugDeleted,
    BugResolved,
    DeleteRefused,
    DomainEvent,
    EventBus,
)
from ...core.exceptions import PreconditionNotMet
from ...core.ports.ledger import DEFAULT_GAS_LIMIT, TransactionReceipt
from .base import Command


class AddBugCommand(Command):
    """Append a new bug record."""
    
    def __init__(
        self,
        session: Optional[Session],
        bug_id: str,
        description: str,
        criticality: Any,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        event_bus: Optional[EventBus] = None,
    ):
        super().__init__(session, gas_limit=gas_limit, event_bus=event_bus)
        self.bug_id = bug_id
        self.description = description
        self.criticality = criticality
        self.criticality_code = encode_criticality(criticality)
    
    @property
    def name(self) -> str:
        return "AddBug"
    
    def validate(self) -> Optional[str]:
        error = super().validate()
        if error:
            return error
        if not self.bug_id or not self.bug_id.strip():
            return "Bug ID is required"
        if not self.description or not self.description.strip():
            return "Description is required"
        if self.criticality_code == INVALID_CODE:
            allowed = ", ".join(c.label for c in Criticality.selectable())
            return f"Invalid criticality {self.criticality!r}; expected one of {allowed}"
        return None
    
    async def _execute(self) -> TransactionReceipt:
        self.logger.debug(
            f"Criticality {self.criticality!r} encodes to {self.criticality_code}"
        )
        return await self.session.connection.add_record(
            self.bug_id,
            self.description,
            self.criticality_code,
            self.options,
        )
    
    def _accepted_event(self, data: TransactionReceipt) -> DomainEvent:
        return BugAdded(
            bug_id=self.bug_id,
            criticality=decode_criticality(self.criticality_code).label,
            tx_hash=data.tx_hash if data else None,
        )


class _IndexedCommand(Command):
    """A command addressing one record by its ledger position."""
    
    def __init__(
        self,
        session: Optional[Session],
        index: int,
        gas_limit: int = DEFAULT_GAS_LIMIT,
        event_bus: Optional[EventBus] = None,
    ):
        super().__init__(session, gas_limit=gas_limit, event_bus=event_bus)
        self.index = index
    
    def validate(self) -> Optional[str]:
        error = super().validate()
        if error:
            return error
        if isinstance(self.index, bool) or not isinstance(self.index, int) or self.index < 0:
            return f"Invalid record index: {self.index!r}"
        return None


class UpdateStatusCommand(_IndexedCommand):
    """
    Mark a bug resolved.
    
    The transition is one-way. Whether the record is still unresolved is
    not re-checked here; the presentation only offers this for unresolved
    rows.
    """
    
    @property
    def name(self) -> str:
        return "UpdateStatus"
    
    async def _execute(self) -> TransactionReceipt:
        return await self.session.connection.set_resolved(self.index, True, self.options)
    
    def _accepted_event(self, data: TransactionReceipt) -> DomainEvent:
        return BugResolved(index=self.index, tx_hash=data.tx_hash if data else None)


class DeleteBugCommand(_IndexedCommand):
    """
    Delete a resolved bug.
    
    Re-reads the record first and refuses, without writing, unless it is
    resolved. Deletion shifts every later record down by one.
    """
    
    @property
    def name(self) -> str:
        return "DeleteBug"
    
    async def _execute(self) -> TransactionReceipt:
        ledger = self.session.connection
        record = await ledger.get_record(self.index, self.options)
        if not record.is_resolved:
            raise PreconditionNotMet(
                f"Bug {record.bug_id or self.index} cannot be deleted because it is not resolved",
                index=self.index,
            )
        return await ledger.remove_record(self.index, self.options)
    
    def _on_refused(self, error: PreconditionNotMet) -> None:
        self.event_bus.publish(DeleteRefused(index=self.index))
    
    def _accepted_event(self, data: TransactionReceipt) -> DomainEvent:
        return BugDeleted(index=self.index, tx_hash=data.tx_hash if data else None)
