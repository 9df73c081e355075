"""
Ledger Port - Abstract interface for the bug ledger.

The ledger program is an external contract: this client only calls it.
Every call is made under an acting identity with a fixed resource ceiling.
All methods are coroutines; they return once the ledger has answered (for
writes, once the write is accepted, not necessarily final).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


DEFAULT_GAS_LIMIT = 3_000_000


# =============================================================================
# Errors
# =============================================================================

class LedgerError(Exception):
    """Base exception for ledger errors."""
    
    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.method = method
        self.cause = cause


class LedgerConnectionError(LedgerError):
    """The ledger endpoint could not be reached."""
    
    def __init__(
        self,
        message: str,
        endpoint: str = "",
        method: Optional[str] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, method=method, cause=cause)
        self.endpoint = endpoint


class LedgerCallError(LedgerError):
    """A read or write call failed or was rejected by the node."""
    
    def __init__(
        self,
        message: str,
        method: Optional[str] = None,
        code: Optional[int] = None,
        cause: Optional[Exception] = None,
    ):
        super().__init__(message, method=method, cause=cause)
        self.code = code


class TransactionRevertedError(LedgerCallError):
    """The ledger program rejected a write."""
    
    def __init__(
        self,
        message: str,
        tx_hash: Optional[str] = None,
        method: Optional[str] = None,
    ):
        super().__init__(message, method=method)
        self.tx_hash = tx_hash


# =============================================================================
# Data Transfer Objects
# =============================================================================

@dataclass(frozen=True)
class CallOptions:
    """Identity and resource ceiling attached to every ledger call."""
    
    sender: str
    gas: int = DEFAULT_GAS_LIMIT


@dataclass(frozen=True)
class RawBugRecord:
    """A record exactly as the ledger returns it (criticality still encoded)."""
    
    bug_id: str
    description: str
    criticality_code: int
    is_resolved: bool


@dataclass(frozen=True)
class TransactionReceipt:
    """Proof that the ledger accepted a write."""
    
    tx_hash: str
    block_number: Optional[int] = None
    gas_used: Optional[int] = None


# =============================================================================
# Port Interface
# =============================================================================

class LedgerPort(ABC):
    """
    Abstract interface for the bug ledger.
    
    Implementations: EthereumBugLedger (JSON-RPC), InMemoryBugLedger.
    """
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Get the ledger name."""
        ...
    
    @property
    @abstractmethod
    def endpoint(self) -> str:
        """Where the ledger lives (URL or descriptive name)."""
        ...
    
    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------
    
    @abstractmethod
    async def connect(self) -> None:
        """
        Perform the network handshake.
        
        Raises:
            LedgerConnectionError: If the endpoint is unreachable
        """
        ...
    
    @abstractmethod
    async def list_accounts(self) -> list[str]:
        """Identities the endpoint can act as, in node order."""
        ...
    
    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    
    @abstractmethod
    async def get_record_count(self, options: CallOptions) -> int:
        """Number of records currently on the ledger."""
        ...
    
    @abstractmethod
    async def get_record(self, index: int, options: CallOptions) -> RawBugRecord:
        """Read the record at position `index`."""
        ...
    
    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------
    
    @abstractmethod
    async def add_record(
        self,
        bug_id: str,
        description: str,
        criticality_code: int,
        options: CallOptions,
    ) -> TransactionReceipt:
        """Append a record."""
        ...
    
    @abstractmethod
    async def set_resolved(
        self,
        index: int,
        resolved: bool,
        options: CallOptions,
    ) -> TransactionReceipt:
        """Set the resolved flag of the record at `index`."""
        ...
    
    @abstractmethod
    async def remove_record(self, index: int, options: CallOptions) -> TransactionReceipt:
        """Delete the record at `index`; later records shift down by one."""
        ...
    
    def describe(self) -> dict[str, Any]:
        """Summary for diagnostics."""
        return {"name": self.name, "endpoint": self.endpoint}
