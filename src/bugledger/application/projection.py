"""
Projection Reader - Rebuild the local projection from the ledger.
"""

import logging
from datetime import datetime

from ..core.domain.entities import Bug, EngineContext, Projection, Session
from ..core.domain.enums import decode_criticality
from ..core.exceptions import LoadError
from ..core.ports.ledger import CallOptions, DEFAULT_GAS_LIMIT, LedgerError, RawBugRecord


def project_record(record: RawBugRecord, index: int) -> Bug:
    """Map a raw ledger record to a Bug at position `index`."""
    return Bug(
        bug_id=record.bug_id,
        description=record.description,
        criticality=decode_criticality(record.criticality_code),
        is_resolved=record.is_resolved,
        index=index,
        criticality_code=record.criticality_code,
    )


class ProjectionReader:
    """
    Pulls every record from the ledger and maps it into the display model.
    
    Loads are all-or-nothing: the first failed read aborts the load and no
    partial projection is ever returned.
    """
    
    def __init__(self, gas_limit: int = DEFAULT_GAS_LIMIT):
        self.gas_limit = gas_limit
        self.logger = logging.getLogger("ProjectionReader")
    
    async def load_all(self, context: EngineContext) -> EngineContext:
        """
        Rebuild the projection held by `context`.
        
        Returns `context` unchanged when there is no session or no acting
        identity.
        
        Raises:
            LoadError: If any read fails; `index` is None for the count read
        """
        session = context.session
        if session is None or not session.can_act:
            self.logger.debug("No acting identity; skipping load")
            return context
        
        projection = await self.read_projection(session)
        return context.with_projection(projection)
    
    async def read_projection(self, session: Session) -> Projection:
        """Read the full record set under the session's acting identity."""
        options = CallOptions(sender=session.acting_identity, gas=self.gas_limit)
        ledger = session.connection
        
        try:
            count = await ledger.get_record_count(options)
        except LedgerError as e:
            raise LoadError(f"Failed to read record count: {e}", cause=e)
        
        self.logger.debug(f"Ledger holds {count} records")
        
        bugs = []
        for index in range(count):
            record = await self._read_record(ledger, index, options)
            bugs.append(project_record(record, index))
        
        self.logger.info(f"Loaded {len(bugs)} bugs")
        return Projection(bugs=tuple(bugs), loaded_at=datetime.now())
    
    async def _read_record(self, ledger, index: int, options: CallOptions) -> RawBugRecord:
        try:
            return await ledger.get_record(index, options)
        except LedgerError as e:
            raise LoadError(f"Failed to read record {index}: {e}", index=index, cause=e)
