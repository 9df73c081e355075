"""Tests for the CLI application."""

import io
import json

import pytest

from bugledger.adapters.memory import InMemoryBugLedger
from bugledger.cli.app import build_parser, run
from bugledger.cli.exit_codes import ExitCode
from bugledger.cli.output import Console

from ..conftest import raw


@pytest.fixture
def out():
    return io.StringIO()


@pytest.fixture
def console(out):
    return Console(color=False, stream=out)


@pytest.fixture
def ledger():
    return InMemoryBugLedger(records=[
        raw("BUG-1", "crash on start", code=2, resolved=True),
        raw("BUG-2", "typo in footer", code=0),
    ])


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in ("BUGLEDGER_RPC_URL", "BUGLEDGER_CONTRACT_ADDRESS", "BUGLEDGER_GAS_LIMIT"):
        monkeypatch.delenv(key, raising=False)


def parse(*argv):
    return build_parser().parse_args(list(argv))


class TestParser:
    """Tests for argument parsing."""
    
    def test_add_defaults_to_low(self):
        args = parse("add", "--id", "BUG-1", "--description", "desc")
        assert args.criticality == "Low"
    
    def test_add_rejects_unknown_criticality(self):
        with pytest.raises(SystemExit):
            parse("add", "-i", "BUG-1", "-d", "desc", "-c", "Critical")
    
    def test_resolve_takes_index(self):
        assert parse("resolve", "3").index == 3


class TestRun:
    """Tests for run()."""
    
    @pytest.mark.asyncio
    async def test_missing_contract_is_config_error(self, console, out):
        code = await run(parse("list"), console=console)
        
        assert code == ExitCode.CONFIG_ERROR
        assert "BUGLEDGER_CONTRACT_ADDRESS" in out.getvalue()
    
    @pytest.mark.asyncio
    async def test_list(self, console, out, ledger):
        code = await run(parse("list"), console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        text = out.getvalue()
        assert "BUG-1" in text and "crash on start" in text and "High" in text
        assert "typo in footer" in text
    
    @pytest.mark.asyncio
    async def test_list_json(self, console, out, ledger):
        code = await run(parse("list", "--json"), console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        bugs = json.loads(out.getvalue())
        assert [b["id"] for b in bugs] == ["BUG-1", "BUG-2"]
        assert bugs[0]["criticality"] == "High"
        assert bugs[0]["isResolved"] is True
        assert bugs[1]["index"] == 1
    
    @pytest.mark.asyncio
    async def test_verbose_describes_ledger(self, out, ledger):
        console = Console(color=False, verbose=True, stream=out)
        
        await run(parse("list"), console=console, ledger=ledger)
        
        assert "memory://" in out.getvalue()
    
    @pytest.mark.asyncio
    async def test_add(self, console, out, ledger):
        args = parse("add", "-i", "BUG-3", "-d", "slow search", "-c", "Medium")
        
        code = await run(args, console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        assert ledger.records[-1].criticality_code == 1
        assert "Added bug BUG-3" in out.getvalue()
    
    @pytest.mark.asyncio
    async def test_resolve(self, console, ledger):
        code = await run(parse("resolve", "1"), console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        assert ledger.records[1].is_resolved
    
    @pytest.mark.asyncio
    async def test_delete_unresolved(self, console, out, ledger):
        code = await run(parse("delete", "1", "--yes"), console=console, ledger=ledger)
        
        assert code == ExitCode.PRECONDITION_NOT_MET
        assert len(ledger.records) == 2
        assert "not resolved" in out.getvalue()
    
    @pytest.mark.asyncio
    async def test_delete_resolved(self, console, ledger):
        code = await run(parse("delete", "0", "--yes"), console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        assert [r.bug_id for r in ledger.records] == ["BUG-2"]
    
    @pytest.mark.asyncio
    async def test_delete_aborted_at_prompt(self, console, ledger, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "n")
        
        code = await run(parse("delete", "0"), console=console, ledger=ledger)
        
        assert code == ExitCode.SUCCESS
        assert len(ledger.records) == 2
    
    @pytest.mark.asyncio
    async def test_rejected_write(self, console, ledger):
        ledger.reject_writes = True
        
        code = await run(parse("resolve", "1"), console=console, ledger=ledger)
        
        assert code == ExitCode.COMMAND_FAILED
    
    @pytest.mark.asyncio
    async def test_unreachable_ledger(self, console, ledger):
        ledger.reachable = False
        
        code = await run(parse("list"), console=console, ledger=ledger)
        
        assert code == ExitCode.CONNECTION_ERROR
    
    @pytest.mark.asyncio
    async def test_load_failure(self, console, ledger):
        ledger.failing_reads = {1}
        
        code = await run(parse("list"), console=console, ledger=ledger)
        
        assert code == ExitCode.LOAD_FAILED
