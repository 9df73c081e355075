"""Tests for the bug sync engine, end to end against the in-memory ledger."""

import asyncio

import pytest

from bugledger.adapters.memory import InMemoryBugLedger
from bugledger.application.commands import CommandOutcome
from bugledger.application.sync import BugSyncEngine, TriggerState
from bugledger.core.domain import BugDraft, Criticality, ProjectionLoaded
from bugledger.core.ports.ledger import LedgerConnectionError

from ..conftest import GatedLedger, settle


def snapshot(engine):
    return [
        (b.bug_id, b.description, b.criticality, b.is_resolved, b.index)
        for b in engine.projection
    ]


class TestStartup:
    """Tests for engine startup."""
    
    @pytest.mark.asyncio
    async def test_start_loads_projection(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        
        await engine.start()
        
        assert engine.state is TriggerState.READY
        assert len(engine.projection) == 3
        assert any(isinstance(e, ProjectionLoaded) for e in engine.event_bus.get_history())
    
    @pytest.mark.asyncio
    async def test_unreachable_ledger_raises(self):
        ledger = InMemoryBugLedger()
        ledger.reachable = False
        
        with pytest.raises(LedgerConnectionError):
            await BugSyncEngine(ledger).start()
    
    @pytest.mark.asyncio
    async def test_no_identities_is_inert(self, seeded_ledger):
        seeded_ledger.accounts = []
        engine = BugSyncEngine(seeded_ledger)
        
        await engine.start()
        result = await engine.add_bug(BugDraft("BUG-4", "desc", "Low"))
        
        assert engine.state is TriggerState.UNINITIALIZED
        assert len(engine.projection) == 0
        assert result.outcome is CommandOutcome.FAILED
        assert seeded_ledger.count_calls("get_record_count") == 0
        assert seeded_ledger.mutations == []
    
    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        await engine.start()
        
        assert seeded_ledger.count_calls("connect") == 1
    
    @pytest.mark.asyncio
    async def test_failed_first_load_keeps_engine_usable(self, seeded_ledger):
        seeded_ledger.failing_reads = {2}
        engine = BugSyncEngine(seeded_ledger)
        
        await engine.start()
        
        assert engine.last_load_error.index == 2
        assert len(engine.projection) == 0
        
        seeded_ledger.failing_reads = set()
        await engine.refresh()
        
        assert engine.last_load_error is None
        assert len(engine.projection) == 3


class TestScenario:
    """The add / resolve / delete lifecycle of a single bug."""
    
    @pytest.mark.asyncio
    async def test_full_lifecycle(self):
        ledger = InMemoryBugLedger(accounts=["0xA"])
        engine = BugSyncEngine(ledger)
        
        await engine.start()
        assert engine.projection.to_list() == []
        
        draft = BugDraft("BUG-1", "null pointer", "Medium")
        result = await engine.add_bug(draft)
        assert result.success
        assert engine.projection.to_list() == [{
            "id": "BUG-1",
            "description": "null pointer",
            "criticality": "Medium",
            "isResolved": False,
            "index": 0,
        }]
        assert draft == BugDraft()
        
        assert (await engine.update_status(0)).success
        assert engine.projection.to_list()[0]["isResolved"] is True
        
        assert (await engine.delete_bug(0)).success
        assert engine.projection.to_list() == []
        
        assert {c.sender for c in ledger.calls if c.sender} == {"0xA"}


class TestCommandProperties:
    """Projection properties after each command."""
    
    @pytest.mark.asyncio
    async def test_add_grows_projection_by_one(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        before = len(engine.projection)
        
        await engine.add_bug(BugDraft("BUG-4", "new", "High"))
        
        assert len(engine.projection) == before + 1
        assert engine.projection[-1].criticality is Criticality.HIGH
        assert engine.projection[-1].index == before
    
    @pytest.mark.asyncio
    async def test_update_status_touches_only_target(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        before = snapshot(engine)
        
        await engine.update_status(1)
        after = snapshot(engine)
        
        assert engine.projection[1].is_resolved
        assert [after[0], after[2]] == [before[0], before[2]]
        assert after[1][:3] == before[1][:3]
    
    @pytest.mark.asyncio
    async def test_delete_unresolved_changes_nothing(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        loads = engine.trigger.load_count
        
        result = await engine.delete_bug(1)
        
        assert result.outcome is CommandOutcome.PRECONDITION_NOT_MET
        assert seeded_ledger.mutations == []
        assert len(engine.projection) == 3
        assert engine.trigger.load_count == loads
    
    @pytest.mark.asyncio
    async def test_delete_resolved_shifts_later_records(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        
        result = await engine.delete_bug(0)
        
        assert result.success
        assert len(seeded_ledger.mutations) == 1
        assert [(b.bug_id, b.index) for b in engine.projection] == [("BUG-2", 0), ("BUG-3", 1)]
    
    @pytest.mark.asyncio
    async def test_rejected_add_keeps_draft_and_skips_reconciliation(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        loads = engine.trigger.load_count
        seeded_ledger.reject_writes = True
        draft = BugDraft("BUG-4", "desc", "Low")
        
        result = await engine.add_bug(draft)
        
        assert result.outcome is CommandOutcome.FAILED
        assert draft == BugDraft("BUG-4", "desc", "Low")
        assert engine.trigger.load_count == loads
    
    @pytest.mark.asyncio
    async def test_failed_reconciliation_keeps_previous_projection(self, seeded_ledger):
        engine = BugSyncEngine(seeded_ledger)
        await engine.start()
        previous = engine.projection
        seeded_ledger.fail_count_read = True
        
        result = await engine.update_status(1)
        
        assert result.success
        assert engine.projection is previous
        assert engine.last_load_error is not None


class TestCoalescing:
    """Concurrent commands and in-flight loads."""
    
    @pytest.mark.asyncio
    async def test_two_commands_during_one_load_cause_one_follow_up(self):
        ledger = GatedLedger(accounts=["0xA"])
        engine = BugSyncEngine(ledger)
        await engine.start()
        
        ledger.gate = asyncio.Event()
        in_flight = asyncio.create_task(engine.refresh())
        await settle()
        assert engine.state is TriggerState.LOADING
        
        first = asyncio.create_task(engine.add_bug(BugDraft("A", "first", "Low")))
        second = asyncio.create_task(engine.add_bug(BugDraft("B", "second", "High")))
        await settle()
        assert ledger.count_calls("add_record") == 2
        
        ledger.gate.set()
        results = await asyncio.gather(in_flight, first, second)
        
        assert all(r.success for r in results[1:])
        # startup load + in-flight load + one follow-up
        assert engine.trigger.load_count == 3
        assert ledger.count_calls("get_record_count") == 3
        assert sorted(b.bug_id for b in engine.projection) == ["A", "B"]
