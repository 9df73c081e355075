"""
Ports - Abstract interfaces for external dependencies.

Ports define the contracts that adapters must implement.
This enables dependency inversion and easy testing.
"""

from .ledger import (
    LedgerPort,
    CallOptions,
    RawBugRecord,
    TransactionReceipt,
    LedgerError,
    LedgerConnectionError,
    LedgerCallError,
    TransactionRevertedError,
)
from .config_provider import ConfigProviderPort, AppConfig, LedgerConfig

__all__ = [
    "LedgerPort",
    "CallOptions",
    "RawBugRecord",
    "TransactionReceipt",
    "LedgerError",
    "LedgerConnectionError",
    "LedgerCallError",
    "TransactionRevertedError",
    "ConfigProviderPort",
    "AppConfig",
    "LedgerConfig",
]
