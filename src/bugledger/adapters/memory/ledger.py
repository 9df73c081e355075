"""
In-Memory Ledger - A LedgerPort kept in process memory.

Honors the same contract as the real ledger: positional addressing,
deletions shift later records down, out-of-range indices and codes the
contract cannot store are rejected. Useful for tests and offline demos.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

from ...core.ports.ledger import (
    CallOptions,
    LedgerCallError,
    LedgerConnectionError,
    LedgerPort,
    RawBugRecord,
    TransactionReceipt,
    TransactionRevertedError,
)


@dataclass
class LedgerCall:
    """One call observed by the in-memory ledger."""
    
    method: str
    args: tuple = ()
    sender: Optional[str] = None
    gas: Optional[int] = None
    
    @property
    def is_mutation(self) -> bool:
        return self.method in InMemoryBugLedger.MUTATING_METHODS


@dataclass
class _StoredBug:
    bug_id: str
    description: str
    criticality: int
    is_resolved: bool = False


class InMemoryBugLedger(LedgerPort):
    """
    Fake ledger for deterministic testing without a node.
    
    Failure injection:
        reachable: If False, connect() raises LedgerConnectionError
        failing_reads: Indices whose get_record raises LedgerCallError
        fail_count_read: If True, get_record_count raises LedgerCallError
        reject_writes: If True, every write reverts
    """
    
    MUTATING_METHODS = frozenset({"add_record", "set_resolved", "remove_record"})
    
    def __init__(
        self,
        accounts: Optional[list[str]] = None,
        records: Optional[list[RawBugRecord]] = None,
        latency: float = 0.0,
    ):
        self.accounts = list(accounts) if accounts is not None else ["0xA"]
        self.latency = latency
        self.logger = logging.getLogger("InMemoryBugLedger")
        
        self.reachable = True
        self.failing_reads: set[int] = set()
        self.fail_count_read = False
        self.reject_writes = False
        
        self.calls: list[LedgerCall] = []
        self._bugs: list[_StoredBug] = [
            _StoredBug(r.bug_id, r.description, r.criticality_code, r.is_resolved)
            for r in records or []
        ]
        self._block = 0
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Properties
    # -------------------------------------------------------------------------
    
    @property
    def name(self) -> str:
        return "InMemory"
    
    @property
    def endpoint(self) -> str:
        return "memory://"
    
    # -------------------------------------------------------------------------
    # Inspection
    # -------------------------------------------------------------------------
    
    @property
    def records(self) -> list[RawBugRecord]:
        """Current ledger content."""
        return [
            RawBugRecord(b.bug_id, b.description, b.criticality, b.is_resolved)
            for b in self._bugs
        ]
    
    @property
    def mutations(self) -> list[LedgerCall]:
        return [c for c in self.calls if c.is_mutation]
    
    def count_calls(self, method: str) -> int:
        return sum(1 for c in self.calls if c.method == method)
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Session
    # -------------------------------------------------------------------------
    
    async def connect(self) -> None:
        await self._record("connect")
        if not self.reachable:
            raise LedgerConnectionError(
                "In-memory ledger is unreachable",
                endpoint=self.endpoint,
                method="connect",
            )
    
    async def list_accounts(self) -> list[str]:
        await self._record("list_accounts")
        return list(self.accounts)
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Reads
    # -------------------------------------------------------------------------
    
    async def get_record_count(self, options: CallOptions) -> int:
        await self._record("get_record_count", options=options)
        if self.fail_count_read:
            raise LedgerCallError("Count read failed", method="get_record_count")
        return len(self._bugs)
    
    async def get_record(self, index: int, options: CallOptions) -> RawBugRecord:
        await self._record("get_record", index, options=options)
        if index in self.failing_reads:
            raise LedgerCallError(f"Read of record {index} failed", method="get_record")
        bug = self._at(index, "get_record")
        return RawBugRecord(bug.bug_id, bug.description, bug.criticality, bug.is_resolved)
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Writes
    # -------------------------------------------------------------------------
    
    async def add_record(
        self,
        bug_id: str,
        description: str,
        criticality_code: int,
        options: CallOptions,
    ) -> TransactionReceipt:
        await self._record("add_record", bug_id, description, criticality_code, options=options)
        self._check_writable("add_record")
        if not 0 <= criticality_code <= 255:
            raise LedgerCallError(
                f"Criticality {criticality_code} does not fit uint8",
                method="add_record",
            )
        self._bugs.append(_StoredBug(bug_id, description, criticality_code))
        return self._receipt()
    
    async def set_resolved(
        self,
        index: int,
        resolved: bool,
        options: CallOptions,
    ) -> TransactionReceipt:
        await self._record("set_resolved", index, resolved, options=options)
        self._check_writable("set_resolved")
        self._at(index, "set_resolved").is_resolved = resolved
        return self._receipt()
    
    async def remove_record(self, index: int, options: CallOptions) -> TransactionReceipt:
        await self._record("remove_record", index, options=options)
        self._check_writable("remove_record")
        self._at(index, "remove_record")
        del self._bugs[index]
        return self._receipt()
    
    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------
    
    async def _record(self, method: str, *args, options: Optional[CallOptions] = None) -> None:
        self.calls.append(LedgerCall(
            method=method,
            args=args,
            sender=options.sender if options else None,
            gas=options.gas if options else None,
        ))
        # Always suspend so callers interleave the way they would over a network
        await asyncio.sleep(self.latency)
    
    def _at(self, index: int, method: str) -> _StoredBug:
        if not 0 <= index < len(self._bugs):
            raise TransactionRevertedError(f"Index {index} out of range", method=method)
        return self._bugs[index]
    
    def _check_writable(self, method: str) -> None:
        if self.reject_writes:
            raise TransactionRevertedError(f"{method} rejected by ledger", method=method)
    
    def _receipt(self) -> TransactionReceipt:
        self._block += 1
        return TransactionReceipt(tx_hash=f"0x{uuid4().hex}", block_number=self._block)
