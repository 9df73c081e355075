"""
Config Provider Port - Abstract interface for configuration.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from .ledger import DEFAULT_GAS_LIMIT


DEFAULT_RPC_URL = "http://127.0.0.1:7545"


@dataclass
class LedgerConfig:
    """Where the ledger lives and how calls are made against it."""
    
    rpc_url: str = DEFAULT_RPC_URL
    contract_address: str = ""
    gas_limit: int = DEFAULT_GAS_LIMIT
    receipt_timeout: float = 120.0
    poll_interval: float = 0.5
    request_timeout: float = 30.0


@dataclass
class AppConfig:
    """Complete application configuration."""
    
    ledger: LedgerConfig = field(default_factory=LedgerConfig)
    verbose: bool = False
    color: bool = True


class ConfigProviderPort(ABC):
    """Abstract interface for configuration providers."""
    
    @property
    @abstractmethod
    def name(self) -> str:
        """Get the provider name."""
        ...
    
    @abstractmethod
    def load(self) -> AppConfig:
        """Load complete configuration."""
        ...
    
    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        ...
    
    @abstractmethod
    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        ...
    
    @abstractmethod
    def validate(self) -> list[str]:
        """Validate configuration, return list of errors."""
        ...
