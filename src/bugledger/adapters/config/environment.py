"""
Environment Config Provider - Load configuration from environment variables.

Supports:
- Environment variables (BUGLEDGER_RPC_URL, BUGLEDGER_CONTRACT_ADDRESS, ...)
- .env files
- Command line argument overrides
"""

import os
from pathlib import Path
from typing import Any, Optional

from ...core.ports.config_provider import (
    AppConfig,
    ConfigProviderPort,
    DEFAULT_RPC_URL,
    LedgerConfig,
)
from ...core.ports.ledger import DEFAULT_GAS_LIMIT


class EnvironmentConfigProvider(ConfigProviderPort):
    """
    Configuration provider that loads from environment variables and .env files.
    """
    
    ENV_PREFIX = "BUGLEDGER_"
    
    BOOLEAN_KEYS = frozenset({"verbose", "no_color"})
    
    def __init__(
        self,
        env_file: Optional[Path] = None,
        cli_overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the config provider.
        
        Args:
            env_file: Path to .env file (auto-detected if not specified)
            cli_overrides: Command line argument overrides
            environ: Environment mapping (defaults to os.environ)
        """
        self._values: dict[str, Any] = {}
        self._env_file = env_file
        self._cli_overrides = cli_overrides or {}
        self._environ = os.environ if environ is None else environ
        
        # Load configuration
        self._load_env_file()
        self._load_environment()
        self._apply_cli_overrides()
    
    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------
    
    @property
    def name(self) -> str:
        return "Environment"
    
    def load(self) -> AppConfig:
        """Load complete configuration."""
        ledger = LedgerConfig(
            rpc_url=self.get("rpc_url", DEFAULT_RPC_URL),
            contract_address=self.get("contract_address", ""),
            gas_limit=self._get_int("gas_limit", DEFAULT_GAS_LIMIT),
            receipt_timeout=self._get_float("receipt_timeout", 120.0),
        )
        
        return AppConfig(
            ledger=ledger,
            verbose=self._get_bool("verbose", False),
            color=not self._get_bool("no_color", False),
        )
    
    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        # Normalize key
        key = key.lower().replace("-", "_")
        
        # Check CLI overrides first
        if self._cli_overrides.get(key) is not None:
            return self._cli_overrides[key]
        
        # Check loaded values
        return self._values.get(key, default)
    
    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        key = key.lower().replace("-", "_")
        self._values[key] = value
    
    def validate(self) -> list[str]:
        """Validate configuration."""
        errors = []
        
        if not self.get("rpc_url", DEFAULT_RPC_URL):
            errors.append("Missing BUGLEDGER_RPC_URL - set in environment or .env file")
        if not self.get("contract_address"):
            errors.append(
                "Missing BUGLEDGER_CONTRACT_ADDRESS - set in environment or .env file"
            )
        
        try:
            if self._get_int("gas_limit", DEFAULT_GAS_LIMIT) <= 0:
                errors.append("BUGLEDGER_GAS_LIMIT must be positive")
        except ValueError:
            errors.append(f"BUGLEDGER_GAS_LIMIT is not an integer: {self.get('gas_limit')!r}")
        
        try:
            if self._get_float("receipt_timeout", 120.0) <= 0:
                errors.append("BUGLEDGER_RECEIPT_TIMEOUT must be positive")
        except ValueError:
            errors.append(
                f"BUGLEDGER_RECEIPT_TIMEOUT is not a number: {self.get('receipt_timeout')!r}"
            )
        
        return errors
    
    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------
    
    def _get_int(self, key: str, default: int) -> int:
        return int(self.get(key, default))
    
    def _get_float(self, key: str, default: float) -> float:
        return float(self.get(key, default))
    
    def _get_bool(self, key: str, default: bool) -> bool:
        value = self.get(key, default)
        if isinstance(value, str):
            return value.lower() in ("true", "1", "yes")
        return bool(value)
    
    def _load_env_file(self) -> None:
        """Load values from .env file."""
        env_file = self._find_env_file()
        if not env_file:
            return
        
        for line in env_file.read_text().splitlines():
            line = line.strip()
            
            # Skip empty lines and comments
            if not line or line.startswith("#"):
                continue
            
            # Parse key=value
            if "=" not in line:
                continue
            
            key, value = line.split("=", 1)
            key = key.strip().lower()
            if key.startswith(self.ENV_PREFIX.lower()):
                key = key[len(self.ENV_PREFIX):]
            value = value.strip().strip('"').strip("'")
            
            self._values[key] = value
    
    def _find_env_file(self) -> Optional[Path]:
        """Find .env file."""
        if self._env_file is not None:
            return self._env_file if self._env_file.exists() else None
        
        # Check current directory
        cwd_env = Path.cwd() / ".env"
        if cwd_env.exists():
            return cwd_env
        
        return None
    
    def _load_environment(self) -> None:
        """Load values from environment variables."""
        env_mapping = {
            "BUGLEDGER_RPC_URL": "rpc_url",
            "BUGLEDGER_CONTRACT_ADDRESS": "contract_address",
            "BUGLEDGER_GAS_LIMIT": "gas_limit",
            "BUGLEDGER_RECEIPT_TIMEOUT": "receipt_timeout",
            "BUGLEDGER_VERBOSE": "verbose",
            "NO_COLOR": "no_color",
        }
        
        for env_key, config_key in env_mapping.items():
            raw_value = self._environ.get(env_key)
            if raw_value is None:
                continue
            
            final_value: Any = raw_value
            # Convert boolean-ish values
            if config_key in self.BOOLEAN_KEYS:
                final_value = raw_value.lower() in ("true", "1", "yes")
            
            self._values[config_key] = final_value
    
    def _apply_cli_overrides(self) -> None:
        """Apply CLI argument overrides."""
        # Map CLI args to config keys
        cli_mapping = {
            "rpc_url": "rpc_url",
            "contract": "contract_address",
            "gas": "gas_limit",
            "receipt_timeout": "receipt_timeout",
            "verbose": "verbose",
            "no_color": "no_color",
        }
        
        for cli_key, config_key in cli_mapping.items():
            if cli_key in self._cli_overrides and self._cli_overrides[cli_key] is not None:
                self._values[config_key] = self._cli_overrides[cli_key]
