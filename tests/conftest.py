"""Shared fixtures for bugledger tests."""

import asyncio

import pytest

from bugledger.adapters.memory import InMemoryBugLedger
from bugledger.core.ports.ledger import RawBugRecord


def raw(bug_id: str, description: str = "", code: int = 0, resolved: bool = False) -> RawBugRecord:
    """Shorthand for a raw ledger record."""
    return RawBugRecord(
        bug_id=bug_id,
        description=description or f"{bug_id} description",
        criticality_code=code,
        is_resolved=resolved,
    )


class GatedLedger(InMemoryBugLedger):
    """In-memory ledger whose count read can be held open."""
    
    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.gate = None
    
    async def get_record_count(self, options):
        if self.gate is not None:
            await self.gate.wait()
        return await super().get_record_count(options)


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def ledger():
    return InMemoryBugLedger(accounts=["0xA", "0xB"])


@pytest.fixture
def seeded_ledger():
    return InMemoryBugLedger(
        accounts=["0xA"],
        records=[
            raw("BUG-1", "crash on start", code=2, resolved=True),
            raw("BUG-2", "typo in footer", code=0),
            raw("BUG-3", "slow search", code=1),
        ],
    )
