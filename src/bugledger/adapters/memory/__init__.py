"""
Memory Adapter - LedgerPort held in process memory.
"""

from .ledger import InMemoryBugLedger, LedgerCall

__all__ = ["InMemoryBugLedger", "LedgerCall"]
