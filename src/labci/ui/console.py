"""Console output formatting utilities for labci."""

from __future__ import annotations

import sys
from typing import List, Optional

from ..model import Pipeline


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
        """
        self.debug = debug

    def print_header(self, title: str) -> None:
        """Print a section header."""
        print(f"\n{title}")
        print("-" * len(title))

    def print_summary(self, pipeline: Pipeline, source: str) -> None:
        """Print what was generated."""
        print("\nPIPELINE OK")
        print(f"Matrix: {source}")
        print(f"Jobs: {len(pipeline.jobs)}")
        print(f"Artifacts: {len(pipeline.artifact_producers())}")
        print(f"Dependencies: {len(pipeline.edges)}")

    def print_plan_stage(self, index: int, names: List[str]) -> None:
        """Print the header of a stage of jobs that may run in parallel."""
        print(f"\n=== Stage {index + 1} ({len(names)} jobs) ===")

    def print_plan_job(self, name: str, needs: List[str]) -> None:
        """Print a job and the producers it waits for."""
        if needs:
            print(f"  {name} (after: {', '.join(needs)})")
        else:
            print(f"  {name}")

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
