"""Tests for the in-memory ledger."""

import pytest

from bugledger.adapters.memory import InMemoryBugLedger
from bugledger.core.ports.ledger import (
    CallOptions,
    LedgerCallError,
    TransactionRevertedError,
)

from ..conftest import raw


OPTIONS = CallOptions(sender="0xA", gas=100)


class TestInMemoryBugLedger:
    """Tests for InMemoryBugLedger."""
    
    @pytest.mark.asyncio
    async def test_remove_shifts_later_records(self):
        ledger = InMemoryBugLedger(records=[raw("A"), raw("B"), raw("C")])
        
        await ledger.remove_record(1, OPTIONS)
        
        assert [r.bug_id for r in ledger.records] == ["A", "C"]
        assert await ledger.get_record_count(OPTIONS) == 2
    
    @pytest.mark.asyncio
    async def test_out_of_range_reverts(self):
        ledger = InMemoryBugLedger()
        
        with pytest.raises(TransactionRevertedError):
            await ledger.set_resolved(0, True, OPTIONS)
    
    @pytest.mark.asyncio
    async def test_criticality_must_fit_uint8(self):
        ledger = InMemoryBugLedger()
        
        with pytest.raises(LedgerCallError):
            await ledger.add_record("A", "desc", -1, OPTIONS)
        
        assert ledger.records == []
    
    @pytest.mark.asyncio
    async def test_calls_are_recorded(self):
        ledger = InMemoryBugLedger()
        
        receipt = await ledger.add_record("A", "desc", 1, OPTIONS)
        
        assert receipt.block_number == 1
        assert ledger.calls[-1].sender == "0xA"
        assert ledger.calls[-1].gas == 100
        assert ledger.calls[-1].is_mutation
    
    @pytest.mark.asyncio
    async def test_rejected_writes(self):
        ledger = InMemoryBugLedger(records=[raw("A")])
        ledger.reject_writes = True
        
        with pytest.raises(TransactionRevertedError):
            await ledger.remove_record(0, OPTIONS)
        
        assert len(ledger.records) == 1
