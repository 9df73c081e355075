"""
Adapters - Concrete implementations of ports.

This module contains implementations for:
- Ledgers: Ethereum JSON-RPC, in-memory
- Config: Environment variables
"""

from .ethereum import EthereumBugLedger
from .memory import InMemoryBugLedger
from .config import EnvironmentConfigProvider

__all__ = [
    "EthereumBugLedger",
    "InMemoryBugLedger",
    "EnvironmentConfigProvider",
]
