"""
JSON-RPC Client - Low-level HTTP client for an Ethereum node.

This handles the raw HTTP communication with the node.
The EthereumBugLedger uses this to implement the LedgerPort.
"""

import itertools
import logging
import time
from typing import Any, Optional

import requests

from ...core.ports.ledger import (
    LedgerCallError,
    LedgerConnectionError,
)


class JsonRpcClient:
    """
    Low-level JSON-RPC 2.0 client over HTTP.
    
    Handles request ids, transport errors and RPC error objects.
    """
    
    JSONRPC_VERSION = "2.0"
    
    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the client.
        
        Args:
            url: Node URL (e.g., http://127.0.0.1:7545)
            timeout: Per-request HTTP timeout in seconds
            session: Optional preconfigured requests session
        """
        self.url = url
        self.timeout = timeout
        self.logger = logging.getLogger("JsonRpcClient")
        
        self._session = session or requests.Session()
        self._session.headers.update({
            "Accept": "application/json",
            "Content-Type": "application/json",
        })
        self._ids = itertools.count(1)
    
    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------
    
    def call(self, method: str, params: Optional[list] = None) -> Any:
        """
        Invoke a JSON-RPC method.
        
        Args:
            method: RPC method name (e.g., 'eth_call')
            params: Positional parameters
            
        Returns:
            The `result` member of the response
            
        Raises:
            LedgerConnectionError: If the node cannot be reached
            LedgerCallError: On HTTP or RPC errors
        """
        payload = {
            "jsonrpc": self.JSONRPC_VERSION,
            "id": next(self._ids),
            "method": method,
            "params": params or [],
        }
        self.logger.debug(f"-> {method} {payload['params']}")
        
        try:
            response = self._session.post(self.url, json=payload, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise LedgerConnectionError(
                f"Connection failed: {e}", endpoint=self.url, method=method, cause=e
            )
        except requests.exceptions.Timeout as e:
            raise LedgerCallError(f"Request timed out: {e}", method=method, cause=e)
        except requests.exceptions.RequestException as e:
            raise LedgerCallError(f"Request failed: {e}", method=method, cause=e)
        
        return self._handle_response(response, method)
    
    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------
    
    def _handle_response(self, response: requests.Response, method: str) -> Any:
        """Handle HTTP response and RPC errors."""
        if not response.ok:
            body = response.text[:500] if response.text else ""
            raise LedgerCallError(
                f"HTTP error {response.status_code}: {body}",
                method=method,
            )
        
        try:
            data = response.json()
        except ValueError as e:
            raise LedgerCallError(f"Invalid JSON from node: {e}", method=method, cause=e)
        
        if not isinstance(data, dict):
            raise LedgerCallError(
                f"Malformed response to {method}: expected an object, got {type(data).__name__}",
                method=method,
            )
        
        error = data.get("error")
        if error and not isinstance(error, dict):
            raise LedgerCallError(f"RPC error in {method}: {error}", method=method)
        if error:
            message = error.get("message", "unknown error")
            if isinstance(error.get("data"), dict) and error["data"].get("reason"):
                message = f"{message} ({error['data']['reason']})"
            raise LedgerCallError(
                f"RPC error in {method}: {message}",
                method=method,
                code=error.get("code"),
            )
        
        return data.get("result")
    
    # -------------------------------------------------------------------------
    # Convenience Methods
    # -------------------------------------------------------------------------
    
    def net_version(self) -> str:
        return self.call("net_version")
    
    def accounts(self) -> list[str]:
        accounts = self.call("eth_accounts") or []
        if not isinstance(accounts, list):
            raise LedgerCallError(f"Malformed eth_accounts result: {accounts!r}", method="eth_accounts")
        return accounts
    
    def eth_call(self, transaction: dict[str, Any], block: str = "latest") -> str:
        return self.call("eth_call", [transaction, block])
    
    def send_transaction(self, transaction: dict[str, Any]) -> str:
        return self.call("eth_sendTransaction", [transaction])
    
    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.call("eth_getTransactionReceipt", [tx_hash])
    
    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120.0,
        poll_interval: float = 0.5,
    ) -> dict[str, Any]:
        """
        Poll until the node returns a receipt for `tx_hash`.
        
        Raises:
            LedgerCallError: If no receipt appears within `timeout` seconds
        """
        deadline = time.monotonic() + timeout
        while True:
            receipt = self.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() >= deadline:
                raise LedgerCallError(
                    f"No receipt for {tx_hash} after {timeout:.0f}s",
                    method="eth_getTransactionReceipt",
                )
            time.sleep(poll_interval)
    