"""
CLI Application - Entry point for the `bugledger` command.

Usage:
    # List bugs
    bugledger --contract 0xABC... list
    
    # File a bug
    bugledger add --id BUG-1 --description "null pointer" --criticality Medium
    
    # Resolve, then delete, the bug at ledger position 0
    bugledger resolve 0
    bugledger delete 0
    
    # Interactive session (add --memory to use a throwaway in-memory ledger)
    bugledger shell

Environment Variables:
    BUGLEDGER_RPC_URL: Ledger node URL (default http://127.0.0.1:7545)
    BUGLEDGER_CONTRACT_ADDRESS: Address of the bug tracker contract
    BUGLEDGER_GAS_LIMIT: Gas ceiling for every call (default 3000000)
    BUGLEDGER_RECEIPT_TIMEOUT: Seconds to wait for a write receipt (default 120)
"""

import argparse
import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

from ..adapters.config import EnvironmentConfigProvider
from ..adapters.ethereum import EthereumBugLedger
from ..adapters.memory import InMemoryBugLedger
from ..application.sync import BugSyncEngine
from ..core.domain.entities import BugDraft
from ..core.domain.enums import Criticality
from ..core.ports.config_provider import AppConfig
from ..core.ports.ledger import LedgerConnectionError, LedgerPort
from .exit_codes import ExitCode
from .output import Console
from .shell import BugShell
from .view import BugTrackerPresenter


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S"
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="bugledger",
        description="Track bugs stored on a smart-contract ledger",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__
    )
    
    parser.add_argument(
        "--rpc-url",
        type=str,
        help="Ledger node URL (or set BUGLEDGER_RPC_URL env var)"
    )
    parser.add_argument(
        "--contract",
        type=str,
        help="Bug tracker contract address (or set BUGLEDGER_CONTRACT_ADDRESS env var)"
    )
    parser.add_argument(
        "--gas",
        type=int,
        help="Gas ceiling for every call (default 3000000)"
    )
    parser.add_argument(
        "--receipt-timeout",
        type=float,
        help="Seconds to wait for a transaction receipt"
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        help="Path to a .env file (default: ./.env)"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        default=None,
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        default=None,
        help="Disable colored output"
    )
    
    subparsers = parser.add_subparsers(dest="command", required=True)
    
    list_parser = subparsers.add_parser("list", help="List all bugs on the ledger")
    list_parser.add_argument(
        "--json",
        action="store_true",
        help="Print the bug list as JSON"
    )
    
    add = subparsers.add_parser("add", help="File a new bug")
    add.add_argument("--id", "-i", dest="bug_id", required=True, help="Bug ID")
    add.add_argument("--description", "-d", required=True, help="Description")
    add.add_argument(
        "--criticality", "-c",
        choices=[c.label for c in Criticality.selectable()],
        default=Criticality.LOW.label,
        help="Criticality (default Low)"
    )
    
    resolve = subparsers.add_parser("resolve", help="Mark the bug at INDEX resolved")
    resolve.add_argument("index", type=int, help="Ledger position of the bug")
    
    delete = subparsers.add_parser("delete", help="Delete the resolved bug at INDEX")
    delete.add_argument("index", type=int, help="Ledger position of the bug")
    delete.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip the confirmation prompt"
    )
    
    shell = subparsers.add_parser("shell", help="Interactive session")
    shell.add_argument(
        "--memory",
        action="store_true",
        help="Use a throwaway in-memory ledger instead of a node"
    )
    
    return parser


def build_ledger(config: AppConfig, memory: bool = False) -> LedgerPort:
    """Create the ledger adapter for `config`."""
    if memory:
        return InMemoryBugLedger()
    return EthereumBugLedger(config.ledger)


def _config_provider(args: argparse.Namespace) -> EnvironmentConfigProvider:
    return EnvironmentConfigProvider(
        env_file=args.env_file,
        cli_overrides={
            "rpc_url": args.rpc_url,
            "contract": args.contract,
            "gas": args.gas,
            "receipt_timeout": args.receipt_timeout,
            "verbose": args.verbose,
            "no_color": args.no_color,
        },
    )


async def run(
    args: argparse.Namespace,
    console: Optional[Console] = None,
    ledger: Optional[LedgerPort] = None,
) -> int:
    """Run one CLI invocation and return its exit code."""
    logger = logging.getLogger("main")
    memory = args.command == "shell" and args.memory
    
    provider = _config_provider(args)
    if ledger is None and not memory:
        errors = provider.validate()
        if errors:
            console = console or Console()
            for error in errors:
                console.error(error)
            return ExitCode.CONFIG_ERROR
    
    config = provider.load()
    console = console or Console(color=config.color, verbose=config.verbose)
    ledger = ledger or build_ledger(config, memory=memory)
    
    engine = BugSyncEngine(ledger, gas_limit=config.ledger.gas_limit)
    presenter = BugTrackerPresenter(engine)
    
    try:
        await engine.start()
    except LedgerConnectionError as e:
        logger.debug(f"Session bootstrap failed: {e}")
        console.error(f"Cannot reach ledger at {ledger.endpoint}: {e}")
        return ExitCode.CONNECTION_ERROR
    
    console.debug(f"Ledger: {ledger.describe()}")
    
    if not engine.can_act:
        console.warning("The ledger exposed no identities; commands are unavailable")
    
    if args.command == "shell":
        return await BugShell(presenter, console).run()
    
    if engine.last_load_error is not None:
        console.error(f"Could not load bugs: {engine.last_load_error}")
        return ExitCode.LOAD_FAILED
    
    if args.command == "list":
        if args.json:
            console.print(json.dumps(engine.projection.to_list(), indent=2, default=str))
        else:
            console.bug_list(presenter.view)
        return ExitCode.SUCCESS
    
    if args.command == "add":
        presenter.draft = BugDraft(
            bug_id=args.bug_id,
            description=args.description,
            criticality=args.criticality,
        )
        result = await presenter.submit_draft()
        console.command_result(result, f"Added bug {args.bug_id}")
    elif args.command == "resolve":
        result = await presenter.resolve(args.index)
        console.command_result(result, f"Marked bug #{args.index} resolved")
    elif args.command == "delete":
        row = presenter.row(args.index)
        label = row.bug_id if row else f"#{args.index}"
        if not args.yes and not console.confirm(f"Delete bug {label}? This cannot be undone"):
            console.info("Aborted.")
            return ExitCode.SUCCESS
        result = await presenter.delete(args.index)
        console.command_result(result, f"Deleted bug {label}")
    else:
        console.error(f"Unknown command: {args.command}")
        return ExitCode.ERROR
    
    if result.success:
        console.notifications(presenter.drain_notifications())
    return ExitCode.from_result(result)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    
    setup_logging(bool(args.verbose))
    
    try:
        return int(asyncio.run(run(args)))
    except KeyboardInterrupt:
        return ExitCode.ERROR
