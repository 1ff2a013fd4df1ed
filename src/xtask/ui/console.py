"""Console output formatting utilities for xtask."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_task_start(self, name: str) -> None:
        """Print task start message."""
        print(f"\nTASK STARTED: {name}")

    def print_task_skipped(self, name: str, reason: str) -> None:
        """Print a task that was not run."""
        self.print_debug(f"TASK SKIPPED: {name} ({reason})")

    def print_step(self, command: str, directory: Optional[str] = None) -> None:
        """Print step start message."""
        if directory:
            print(f"STEP: {command} (in {directory})")
        else:
            print(f"STEP: {command}")

    def print_success(self, name: str) -> None:
        """Print success message."""
        print("STATUS: success")

    def print_file_written(self, path: str) -> None:
        print(f"WROTE: {path}")

    def print_file_checked(self, path: str) -> None:
        self.print_debug(f"CHECKED: {path}")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
