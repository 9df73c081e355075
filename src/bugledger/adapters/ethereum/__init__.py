"""
Ethereum Adapter - Implementation of LedgerPort over JSON-RPC.
"""

from .adapter import EthereumBugLedger, ContractFunction
from .client import JsonRpcClient

__all__ = ["EthereumBugLedger", "ContractFunction", "JsonRpcClient"]
