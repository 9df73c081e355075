"""
Output - Console output formatting.

Provides pretty-printed output with colors and formatting.
"""

import sys

from ..application.commands import CommandOutcome, CommandResult
from .view import BugListView, Notification


class Colors:
    """ANSI color codes."""
    
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"
    
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"


class Symbols:
    """Unicode symbols for output."""
    
    CHECK = "✓"
    CROSS = "✗"
    ARROW = "→"
    DOT = "•"
    WARN = "⚠"
    INFO = "ℹ"
    
    BOX_H = "─"


class Console:
    """Console output helper with colors and formatting."""
    
    def __init__(self, color: bool = True, verbose: bool = False, stream=None):
        self.stream = stream or sys.stdout
        self.color = color and hasattr(self.stream, "isatty") and self.stream.isatty()
        self.verbose = verbose
    
    def _c(self, text: str, *codes: str) -> str:
        """Apply color codes to text."""
        if not self.color:
            return text
        return "".join(codes) + text + Colors.RESET
    
    def print(self, text: str = "") -> None:
        """Print text."""
        print(text, file=self.stream)
    
    def header(self, text: str) -> None:
        """Print a header."""
        width = max(len(text) + 4, 50)
        border = self._c(Symbols.BOX_H * width, Colors.CYAN) if self.color else "-" * width
        
        self.print()
        self.print(border)
        self.print(self._c(f"  {text}", Colors.BOLD, Colors.CYAN))
        self.print(border)
        self.print()
    
    def section(self, text: str) -> None:
        """Print a section header."""
        self.print()
        self.print(self._c(f"{Symbols.ARROW} {text}", Colors.BOLD, Colors.BLUE))
    
    def success(self, text: str) -> None:
        """Print success message."""
        self.print(self._c(f"  {Symbols.CHECK} {text}", Colors.GREEN))
    
    def error(self, text: str) -> None:
        """Print error message."""
        self.print(self._c(f"  {Symbols.CROSS} {text}", Colors.RED))
    
    def warning(self, text: str) -> None:
        """Print warning message."""
        self.print(self._c(f"  {Symbols.WARN} {text}", Colors.YELLOW))
    
    def info(self, text: str) -> None:
        """Print info message."""
        self.print(self._c(f"  {Symbols.INFO} {text}", Colors.CYAN))
    
    def detail(self, text: str) -> None:
        """Print detail text (dimmed)."""
        self.print(self._c(f"    {text}", Colors.DIM))
    
    def debug(self, text: str) -> None:
        """Print debug message (only in verbose mode)."""
        if self.verbose:
            self.print(self._c(f"  [DEBUG] {text}", Colors.DIM))
    
    def table(self, headers: list[str], rows: list[list[str]]) -> None:
        """Print a simple table."""
        # Calculate column widths
        widths = [len(h) for h in headers]
        for row in rows:
            for i, cell in enumerate(row):
                if i < len(widths):
                    widths[i] = max(widths[i], len(str(cell)))
        
        # Print header
        header_line = "  " + "  ".join(
            self._c(h.ljust(widths[i]), Colors.BOLD)
            for i, h in enumerate(headers)
        )
        self.print(header_line)
        self.print("  " + "  ".join("-" * w for w in widths))
        
        # Print rows
        for row in rows:
            row_line = "  " + "  ".join(
                str(cell).ljust(widths[i]) if i < len(widths) else str(cell)
                for i, cell in enumerate(row)
            )
            self.print(row_line)
    
    def bug_list(self, view: BugListView) -> None:
        """Print the bug list."""
        self.section("Bugs List")
        self.print()
        if not view.rows:
            self.info("No bugs on the ledger")
            return
        self.table(BugListView.HEADERS, view.table())
        if view.hidden:
            self.debug(f"{view.hidden} record(s) without an id not shown")
    
    def command_result(self, result: CommandResult, accepted: str) -> None:
        """Print the outcome of a command."""
        if result.outcome is CommandOutcome.ACCEPTED:
            self.success(accepted)
        elif result.outcome is CommandOutcome.PRECONDITION_NOT_MET:
            self.warning(result.error or "Precondition not met")
        else:
            self.error(result.error or "Command failed")
    
    def notifications(self, notes: list[Notification]) -> None:
        """Print notifications."""
        for note in notes:
            if note.level == "error":
                self.error(note.message)
            elif note.level == "warning":
                self.warning(note.message)
            else:
                self.info(note.message)
    
    def confirm(self, message: str) -> bool:
        """Ask for confirmation."""
        prompt = self._c(f"\n{Symbols.WARN} {message} (y/N): ", Colors.YELLOW)
        try:
            response = input(prompt).strip().lower()
            return response in ("y", "yes")
        except (EOFError, KeyboardInterrupt):
            self.print()
            return False
