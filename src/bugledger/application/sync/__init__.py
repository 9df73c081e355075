"""
Sync Module - Keeping the local projection in step with the ledger.
"""

from .reconciler import ReconciliationTrigger, TriggerState
from .engine import BugSyncEngine

__all__ = ["ReconciliationTrigger", "TriggerState", "BugSyncEngine"]
