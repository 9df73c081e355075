"""
Ethereum Adapter - Implements LedgerPort for the bug tracker contract.

Translates between ledger DTOs and the contract's ABI. The node's accounts
are expected to be unlocked (Ganache), so writes go through
eth_sendTransaction without local signing.
"""

import asyncio
import logging
from typing import Any, Optional

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from ...core.ports.config_provider import LedgerConfig
from ...core.ports.ledger import (
    CallOptions,
    LedgerCallError,
    LedgerConnectionError,
    LedgerPort,
    RawBugRecord,
    TransactionReceipt,
    TransactionRevertedError,
)
from .client import JsonRpcClient


class ContractFunction:
    """One function of the contract ABI: selector plus argument/return types."""
    
    def __init__(self, name: str, inputs: list[str], outputs: Optional[list[str]] = None):
        self.name = name
        self.inputs = inputs
        self.outputs = outputs or []
        self.signature = f"{name}({','.join(inputs)})"
        self.selector = function_signature_to_4byte_selector(self.signature)
    
    def encode_call(self, *args: Any) -> str:
        """Calldata for this function as a 0x-prefixed hex string."""
        return encode_hex(self.selector + encode(self.inputs, list(args)))
    
    def decode_result(self, data: str) -> tuple:
        """Decode the return data of an eth_call."""
        return decode(self.outputs, decode_hex(data))


class EthereumBugLedger(LedgerPort):
    """
    Ethereum implementation of the LedgerPort.
    
    The blocking JSON-RPC client runs in a worker thread so every port
    method can be awaited.
    """
    
    GET_BUG_COUNT = ContractFunction("getBugCount", [], ["uint256"])
    GET_BUG = ContractFunction("getBug", ["uint256"], ["string", "string", "uint8", "bool"])
    ADD_BUG = ContractFunction("addBug", ["string", "string", "uint8"])
    UPDATE_BUG_STATUS = ContractFunction("updateBugStatus", ["uint256", "bool"])
    DELETE_BUG = ContractFunction("deleteBug", ["uint256"])
    
    def __init__(
        self,
        config: LedgerConfig,
        client: Optional[JsonRpcClient] = None,
    ):
        """
        Initialize the adapter.
        
        Args:
            config: Ledger configuration (URL, contract address, timeouts)
            client: Optional custom JSON-RPC client
        """
        self.config = config
        self.logger = logging.getLogger("EthereumBugLedger")
        self._client = client or JsonRpcClient(
            url=config.rpc_url,
            timeout=config.request_timeout,
        )
        self._network: Optional[str] = None
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Properties
    # -------------------------------------------------------------------------
    
    @property
    def name(self) -> str:
        return "Ethereum"
    
    @property
    def endpoint(self) -> str:
        return self.config.rpc_url
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Session
    # -------------------------------------------------------------------------
    
    async def connect(self) -> None:
        try:
            self._network = await asyncio.to_thread(self._client.net_version)
        except LedgerConnectionError:
            raise
        except LedgerCallError as e:
            raise LedgerConnectionError(
                f"Handshake with {self.endpoint} failed: {e}",
                endpoint=self.endpoint,
                method="net_version",
                cause=e,
            )
        self.logger.info(f"Connected to {self.endpoint} (network {self._network})")
    
    async def list_accounts(self) -> list[str]:
        return await asyncio.to_thread(self._client.accounts)
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Reads
    # -------------------------------------------------------------------------
    
    async def get_record_count(self, options: CallOptions) -> int:
        (count,) = await self._read(self.GET_BUG_COUNT, options)
        return int(count)
    
    async def get_record(self, index: int, options: CallOptions) -> RawBugRecord:
        bug_id, description, criticality, is_resolved = await self._read(
            self.GET_BUG, options, index
        )
        return RawBugRecord(
            bug_id=bug_id,
            description=description,
            criticality_code=int(criticality),
            is_resolved=bool(is_resolved),
        )
    
    # -------------------------------------------------------------------------
    # LedgerPort Implementation - Writes
    # -------------------------------------------------------------------------
    
    async def add_record(
        self,
        bug_id: str,
        description: str,
        criticality_code: int,
        options: CallOptions,
    ) -> TransactionReceipt:
        return await self._write(self.ADD_BUG, options, bug_id, description, criticality_code)
    
    async def set_resolved(
        self,
        index: int,
        resolved: bool,
        options: CallOptions,
    ) -> TransactionReceipt:
        return await self._write(self.UPDATE_BUG_STATUS, options, index, resolved)
    
    async def remove_record(self, index: int, options: CallOptions) -> TransactionReceipt:
        return await self._write(self.DELETE_BUG, options, index)
    
    def describe(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "endpoint": self.endpoint,
            "contract": self.config.contract_address,
            "network": self._network,
        }
    
    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------
    
    def _transaction(self, function: ContractFunction, options: CallOptions, *args: Any) -> dict:
        try:
            data = function.encode_call(*args)
        except EncodingError as e:
            raise LedgerCallError(
                f"Invalid arguments for {function.signature}: {e}",
                method=function.signature,
                cause=e,
            )
        return {
            "from": options.sender,
            "to": self.config.contract_address,
            "gas": hex(options.gas),
            "data": data,
        }
    
    async def _read(self, function: ContractFunction, options: CallOptions, *args: Any) -> tuple:
        tx = self._transaction(function, options, *args)
        data = await asyncio.to_thread(self._client.eth_call, tx)
        try:
            return function.decode_result(data or "0x")
        except (DecodingError, TypeError, ValueError) as e:
            raise LedgerCallError(
                f"Could not decode {function.name} result: {e}",
                method=function.signature,
                cause=e,
            )
    
    async def _write(
        self,
        function: ContractFunction,
        options: CallOptions,
        *args: Any,
    ) -> TransactionReceipt:
        tx = self._transaction(function, options, *args)
        tx_hash = await asyncio.to_thread(self._client.send_transaction, tx)
        self.logger.debug(f"Submitted {function.signature}: {tx_hash}")
        
        receipt = await asyncio.to_thread(
            self._client.wait_for_receipt,
            tx_hash,
            self.config.receipt_timeout,
            self.config.poll_interval,
        )
        if not isinstance(receipt, dict):
            raise LedgerCallError(
                f"Malformed receipt for {tx_hash}: {receipt!r}",
                method=function.signature,
            )
        try:
            status = _hex_to_int(receipt.get("status"), default=1)
            block_number = _hex_to_int(receipt.get("blockNumber"))
            gas_used = _hex_to_int(receipt.get("gasUsed"))
        except (TypeError, ValueError) as e:
            raise LedgerCallError(
                f"Malformed receipt for {tx_hash}: {e}",
                method=function.signature,
                cause=e,
            )
        
        if status == 0:
            raise TransactionRevertedError(
                f"{function.name} reverted in transaction {tx_hash}",
                tx_hash=tx_hash,
                method=function.signature,
            )
        
        self.logger.info(f"{function.name} accepted in block {receipt.get('blockNumber')}")
        return TransactionReceipt(
            tx_hash=tx_hash,
            block_number=block_number,
            gas_used=gas_used,
        )


def _hex_to_int(value: Any, default: Optional[int] = None) -> Optional[int]:
    if value is None:
        return default
    if isinstance(value, int):
        return value
    return int(value, 16)
