"""
Interactive Shell - A long-lived session over one engine.

Mirrors a single-page app: the session is opened once, the draft form
survives failed submissions, and every accepted command is followed by a
fresh listing.
"""

import asyncio
import logging
import shlex
from typing import Optional

from ..core.domain.enums import Criticality
from .exit_codes import ExitCode
from .output import Console
from .view import BugTrackerPresenter


HELP = """\
Commands:
  list            Show all bugs
  add             File a bug (prompts for id, description, criticality)
  resolve N       Mark bug N resolved
  delete N        Delete bug N (must be resolved)
  refresh         Reload bugs from the ledger
  help            Show this help
  quit            Leave the shell"""


class BugShell:
    """Read-eval-print loop over a BugTrackerPresenter."""
    
    PROMPT = "bugledger> "
    
    def __init__(self, presenter: BugTrackerPresenter, console: Console, reader=None):
        """
        Args:
            presenter: Presenter bound to a started engine
            console: Output console
            reader: Callable taking a prompt and returning a line
                (defaults to input(); raise EOFError to end the session)
        """
        self.presenter = presenter
        self.console = console
        self._reader = reader or input
        self.logger = logging.getLogger("BugShell")
    
    async def run(self) -> int:
        self.console.header(f"Bug Tracker ({self.presenter.engine.ledger.endpoint})")
        self._show()
        
        while True:
            line = await self._read(self.PROMPT)
            if line is None:
                self.console.print()
                return ExitCode.SUCCESS
            
            try:
                parts = shlex.split(line)
            except ValueError as e:
                self.console.error(f"Could not parse input: {e}")
                continue
            if not parts:
                continue
            
            command, args = parts[0].lower(), parts[1:]
            if command in ("quit", "exit"):
                return ExitCode.SUCCESS
            await self.handle(command, args)
    
    async def handle(self, command: str, args: list[str]) -> None:
        """Run one shell command."""
        if command == "help":
            self.console.print(HELP)
        elif command == "list":
            self._show()
        elif command == "refresh":
            await self.presenter.engine.refresh()
            self._show()
        elif command == "add":
            await self._add()
        elif command in ("resolve", "delete"):
            index = self._parse_index(args)
            if index is None:
                return
            if command == "resolve":
                result = await self.presenter.resolve(index)
                accepted = f"Marked bug #{index} resolved"
            else:
                result = await self.presenter.delete(index)
                accepted = f"Deleted bug #{index}"
            self._report(result, accepted)
        else:
            self.console.error(f"Unknown command: {command} (try 'help')")
    
    async def _add(self) -> None:
        draft = self.presenter.draft
        labels = "/".join(c.label for c in Criticality.selectable())
        
        bug_id = await self._read(self._field_prompt("Bug ID", draft.bug_id))
        if bug_id is None:
            return
        description = await self._read(self._field_prompt("Description", draft.description))
        if description is None:
            return
        criticality = await self._read(self._field_prompt(f"Criticality ({labels})", draft.criticality))
        if criticality is None:
            return
        
        draft.bug_id = bug_id.strip() or draft.bug_id
        draft.description = description.strip() or draft.description
        draft.criticality = self._criticality_label(criticality) or draft.criticality
        
        result = await self.presenter.submit_draft()
        self._report(result, "Bug added")
        if not result.success:
            self.console.detail("Draft kept; run 'add' again to retry")
    
    def _report(self, result, accepted: str) -> None:
        self.console.command_result(result, accepted)
        if result.success:
            self.console.notifications(self.presenter.drain_notifications())
            self._show()
        else:
            self.presenter.drain_notifications()
    
    def _show(self) -> None:
        if not self.presenter.engine.projection.is_loaded:
            self.console.info("Bug list has not been loaded from the ledger")
        self.console.bug_list(self.presenter.view)
        error = self.presenter.engine.last_load_error
        if error is not None:
            self.console.warning(f"List may be stale: {error}")
    
    def _parse_index(self, args: list[str]) -> Optional[int]:
        if len(args) != 1:
            self.console.error("Expected exactly one bug number")
            return None
        try:
            return int(args[0])
        except ValueError:
            self.console.error(f"Not a bug number: {args[0]}")
            return None
    
    @staticmethod
    def _criticality_label(text: str) -> str:
        """Canonical label for typed input; unmatched text is passed through."""
        text = text.strip()
        for member in Criticality.selectable():
            if member.label.lower() == text.lower():
                return member.label
        return text
    
    @staticmethod
    def _field_prompt(name: str, current: str) -> str:
        return f"  {name} [{current}]: " if current else f"  {name}: "
    
    async def _read(self, prompt: str) -> Optional[str]:
        try:
            return await asyncio.to_thread(self._reader, prompt)
        except EOFError:
            return None
