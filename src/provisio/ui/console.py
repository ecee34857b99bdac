"""Console output formatting utilities for provisio."""

from __future__ import annotations

import sys
from typing import Optional


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, quiet: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            quiet: If True, suppress per-step progress lines
        """
        self.debug = debug
        self.quiet = quiet

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_run_started(self, recipe: str, step_count: int, workdir: str) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Recipe: {recipe}")
        print(f"Steps: {step_count}")
        print(f"Workdir: {workdir}")
        print()

    def print_step(self, index: int, total: int, description: str) -> None:
        """Print step start message (index is 0-based)."""
        if not self.quiet:
            print(f"STEP {index + 1}/{total}: {description}")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """Print failure message for a step."""
        print(f"STEP FAILED: {name}", file=sys.stderr)
        if exit_code is not None:
            print(f"Exit code: {exit_code}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)

    def print_result(self, ok: bool, steps_run: int, total: int, exit_code: int = 0) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULT")
        print("=" * 40)
        if ok:
            print(f"  SUCCEEDED ({steps_run}/{total} steps)")
        else:
            print(f"  FAILED at step {steps_run}/{total} (exit={exit_code})")

    def print_plan(self, lines: list[str]) -> None:
        """Print a parsed plan, one numbered step per line."""
        width = len(str(len(lines))) if lines else 1
        for i, line in enumerate(lines, start=1):
            print(f"  {i:>{width}}. {line}")

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

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
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
