"""Tests for the Ethereum JSON-RPC client and ledger adapter."""

import pytest
from unittest.mock import Mock

import requests
from eth_abi import decode, encode
from eth_utils import decode_hex, encode_hex, function_signature_to_4byte_selector

from bugledger.adapters.ethereum import ContractFunction, EthereumBugLedger, JsonRpcClient
from bugledger.application.sync import BugSyncEngine
from bugledger.core.domain import BugDraft
from bugledger.core.exceptions import LoadError
from bugledger.core.ports.config_provider import LedgerConfig
from bugledger.core.ports.ledger import (
    CallOptions,
    LedgerCallError,
    LedgerConnectionError,
    TransactionRevertedError,
)


CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
SENDER = "0x90F8bf6A479f320ead074411a4B0e7944Ea8c9C1"


def rpc_response(result=None, error=None, status_code=200):
    response = Mock()
    response.ok = status_code < 400
    response.status_code = status_code
    response.text = "body"
    body = {"jsonrpc": "2.0", "id": 1}
    if error is not None:
        body["error"] = error
    else:
        body["result"] = result
    response.json.return_value = body
    return response


class TestJsonRpcClient:
    """Tests for JsonRpcClient."""
    
    @pytest.fixture
    def session(self):
        session = Mock()
        session.headers = {}
        return session
    
    def test_call_returns_result(self, session):
        session.post.return_value = rpc_response(["0xA"])
        client = JsonRpcClient("http://node", session=session)
        
        assert client.accounts() == ["0xA"]
        payload = session.post.call_args.kwargs["json"]
        assert payload["method"] == "eth_accounts"
        assert payload["jsonrpc"] == "2.0"
    
    def test_request_ids_increase(self, session):
        session.post.return_value = rpc_response("5777")
        client = JsonRpcClient("http://node", session=session)
        
        client.net_version()
        client.net_version()
        
        ids = [c.kwargs["json"]["id"] for c in session.post.call_args_list]
        assert ids == [1, 2]
    
    def test_rpc_error(self, session):
        session.post.return_value = rpc_response(
            error={"code": -32000, "message": "revert", "data": {"reason": "not found"}}
        )
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError) as exc_info:
            client.call("eth_call", [{}])
        
        assert exc_info.value.code == -32000
        assert "not found" in str(exc_info.value)
    
    def test_http_error(self, session):
        session.post.return_value = rpc_response(status_code=502)
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="HTTP error 502"):
            client.net_version()
    
    def test_connection_error(self, session):
        session.post.side_effect = requests.exceptions.ConnectionError("refused")
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerConnectionError) as exc_info:
            client.net_version()
        
        assert exc_info.value.endpoint == "http://node"
    
    def test_timeout(self, session):
        session.post.side_effect = requests.exceptions.Timeout("slow")
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="timed out"):
            client.net_version()
    
    def test_invalid_url_is_a_call_error(self, session):
        session.post.side_effect = requests.exceptions.MissingSchema("No scheme supplied")
        client = JsonRpcClient("127.0.0.1:7545", session=session)
        
        with pytest.raises(LedgerCallError, match="Request failed"):
            client.net_version()
    
    def test_broken_stream_is_a_call_error(self, session):
        session.post.side_effect = requests.exceptions.ChunkedEncodingError("reset")
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError):
            client.net_version()
    
    def test_string_error_member(self, session):
        session.post.return_value = rpc_response(error="node overloaded")
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="node overloaded"):
            client.call("eth_call", [{}])
    
    def test_non_object_body(self, session):
        response = rpc_response()
        response.json.return_value = ["not", "an", "object"]
        session.post.return_value = response
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="Malformed response"):
            client.net_version()
    
    def test_non_list_accounts(self, session):
        session.post.return_value = rpc_response(42)
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="eth_accounts"):
            client.accounts()
    
    def test_wait_for_receipt_polls(self, session):
        receipt = {"status": "0x1", "blockNumber": "0x2"}
        session.post.side_effect = [rpc_response(None), rpc_response(receipt)]
        client = JsonRpcClient("http://node", session=session)
        
        assert client.wait_for_receipt("0xabc", timeout=5, poll_interval=0) == receipt
        assert session.post.call_count == 2
    
    def test_wait_for_receipt_times_out(self, session):
        session.post.return_value = rpc_response(None)
        client = JsonRpcClient("http://node", session=session)
        
        with pytest.raises(LedgerCallError, match="No receipt"):
            client.wait_for_receipt("0xabc", timeout=0, poll_interval=0)


class TestContractFunction:
    """Tests for ContractFunction."""
    
    def test_calldata_starts_with_selector(self):
        fn = ContractFunction("updateBugStatus", ["uint256", "bool"])
        
        data = decode_hex(fn.encode_call(3, True))
        
        assert fn.signature == "updateBugStatus(uint256,bool)"
        assert data[:4] == function_signature_to_4byte_selector("updateBugStatus(uint256,bool)")
        assert decode(["uint256", "bool"], data[4:]) == (3, True)


class TestEthereumBugLedger:
    """Tests for EthereumBugLedger."""
    
    @pytest.fixture
    def client(self):
        return Mock(spec=JsonRpcClient)
    
    @pytest.fixture
    def ledger(self, client):
        config = LedgerConfig(
            rpc_url="http://node",
            contract_address=CONTRACT,
            receipt_timeout=5,
            poll_interval=0,
        )
        return EthereumBugLedger(config, client=client)
    
    @pytest.fixture
    def options(self):
        return CallOptions(sender=SENDER, gas=3_000_000)
    
    @pytest.mark.asyncio
    async def test_connect(self, ledger, client):
        client.net_version.return_value = "5777"
        
        await ledger.connect()
        
        assert ledger.describe()["network"] == "5777"
    
    @pytest.mark.asyncio
    async def test_connect_failure(self, ledger, client):
        client.net_version.side_effect = LedgerCallError("HTTP error 500")
        
        with pytest.raises(LedgerConnectionError):
            await ledger.connect()
    
    @pytest.mark.asyncio
    async def test_list_accounts(self, ledger, client):
        client.accounts.return_value = [SENDER]
        assert await ledger.list_accounts() == [SENDER]
    
    @pytest.mark.asyncio
    async def test_get_record_count(self, ledger, client, options):
        client.eth_call.return_value = encode_hex(encode(["uint256"], [4]))
        
        assert await ledger.get_record_count(options) == 4
        
        tx = client.eth_call.call_args.args[0]
        assert tx["from"] == SENDER
        assert tx["to"] == CONTRACT
        assert tx["gas"] == hex(3_000_000)
        assert decode_hex(tx["data"]) == function_signature_to_4byte_selector("getBugCount()")
    
    @pytest.mark.asyncio
    async def test_get_record(self, ledger, client, options):
        client.eth_call.return_value = encode_hex(encode(
            ["string", "string", "uint8", "bool"],
            ["BUG-1", "null pointer", 1, False],
        ))
        
        record = await ledger.get_record(2, options)
        
        assert record.bug_id == "BUG-1"
        assert record.description == "null pointer"
        assert record.criticality_code == 1
        assert record.is_resolved is False
        data = decode_hex(client.eth_call.call_args.args[0]["data"])
        assert decode(["uint256"], data[4:]) == (2,)
    
    @pytest.mark.asyncio
    async def test_undecodable_result(self, ledger, client, options):
        client.eth_call.return_value = "0x"
        
        with pytest.raises(LedgerCallError, match="decode"):
            await ledger.get_record_count(options)
    
    @pytest.mark.asyncio
    async def test_add_record_waits_for_receipt(self, ledger, client, options):
        client.send_transaction.return_value = "0xhash"
        client.wait_for_receipt.return_value = {
            "status": "0x1", "blockNumber": "0x10", "gasUsed": "0x5208",
        }
        
        receipt = await ledger.add_record("BUG-1", "desc", 2, options)
        
        assert receipt.tx_hash == "0xhash"
        assert receipt.block_number == 16
        assert receipt.gas_used == 21000
        client.wait_for_receipt.assert_called_once_with("0xhash", 5, 0)
        data = decode_hex(client.send_transaction.call_args.args[0]["data"])
        assert decode(["string", "string", "uint8"], data[4:]) == ("BUG-1", "desc", 2)
    
    @pytest.mark.asyncio
    async def test_reverted_write(self, ledger, client, options):
        client.send_transaction.return_value = "0xhash"
        client.wait_for_receipt.return_value = {"status": "0x0", "blockNumber": "0x1"}
        
        with pytest.raises(TransactionRevertedError) as exc_info:
            await ledger.remove_record(0, options)
        
        assert exc_info.value.tx_hash == "0xhash"
    
    @pytest.mark.asyncio
    async def test_set_resolved_encodes_arguments(self, ledger, client, options):
        client.send_transaction.return_value = "0xhash"
        client.wait_for_receipt.return_value = {"status": "0x1"}
        
        await ledger.set_resolved(7, True, options)
        
        data = decode_hex(client.send_transaction.call_args.args[0]["data"])
        assert data[:4] == function_signature_to_4byte_selector("updateBugStatus(uint256,bool)")
        assert decode(["uint256", "bool"], data[4:]) == (7, True)
    
    @pytest.mark.asyncio
    async def test_unencodable_arguments(self, ledger, client, options):
        with pytest.raises(LedgerCallError, match="Invalid arguments"):
            await ledger.add_record("BUG-1", "desc", -1, options)
        
        client.send_transaction.assert_not_called()
    
    @pytest.mark.asyncio
    async def test_malformed_receipt(self, ledger, client, options):
        client.send_transaction.return_value = "0xhash"
        client.wait_for_receipt.return_value = {"status": "ok", "blockNumber": "0x1"}
        
        with pytest.raises(LedgerCallError, match="Malformed receipt"):
            await ledger.set_resolved(0, True, options)
    
    @pytest.mark.asyncio
    async def test_non_string_call_result(self, ledger, client, options):
        client.eth_call.return_value = 12
        
        with pytest.raises(LedgerCallError, match="decode"):
            await ledger.get_record_count(options)


class TestEngineOverJsonRpc:
    """The engine stays usable whatever the node replies."""
    
    @pytest.fixture
    def session(self):
        session = Mock()
        session.headers = {}
        return session
    
    @pytest.fixture
    def engine(self, session):
        config = LedgerConfig(
            rpc_url="http://node",
            contract_address=CONTRACT,
            receipt_timeout=5,
            poll_interval=0,
        )
        return BugSyncEngine(EthereumBugLedger(config, client=JsonRpcClient("http://node", session=session)))
    
    @pytest.mark.asyncio
    async def test_failed_reconcile_after_accepted_add(self, engine, session):
        session.post.side_effect = [
            rpc_response("5777"),
            rpc_response([SENDER]),
            rpc_response(encode_hex(encode(["uint256"], [0]))),
        ]
        await engine.start()
        
        session.post.side_effect = [
            rpc_response("0xhash"),
            rpc_response({"status": "0x1", "blockNumber": "0x2", "gasUsed": "0x5208"}),
            rpc_response(error="node overloaded"),
        ]
        draft = BugDraft("BUG-1", "desc", "Low")
        result = await engine.add_bug(draft)
        
        assert result.success
        assert draft == BugDraft()
        assert isinstance(engine.last_load_error, LoadError)
        assert "node overloaded" in str(engine.last_load_error)
        assert len(engine.projection) == 0
    
    @pytest.mark.asyncio
    async def test_unreachable_url_fails_the_read(self, engine, session):
        session.post.side_effect = [
            rpc_response("5777"),
            rpc_response([SENDER]),
            requests.exceptions.InvalidURL("bad url"),
        ]
        
        await engine.start()
        
        assert isinstance(engine.last_load_error, LoadError)
        assert engine.last_load_error.index is None
