"""Console output formatting utilities for symflow."""

from __future__ import annotations

import sys
from typing import Iterable, Optional


def _ids(ids: Iterable[int]) -> str:
    ids = sorted(ids)
    return "{" + ", ".join(str(i) for i in ids) + "}" if ids else "{}"


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

    def print_workflow_loaded(self, workflow: str, job_count: int) -> None:
        print("\nWORKFLOW LOADED")
        print(f"Workflow: {workflow}")
        print(f"Jobs: {job_count}")
        print()

    def print_plan(self, waves: list[list[int]], names: dict[int, str] | None = None) -> None:
        """Print ready waves, one per line."""
        names = names or {}
        self.print_header("PLAN")
        for idx, wave in enumerate(waves, start=1):
            labels = ", ".join(f"{j} ({names[j]})" if names.get(j) else str(j) for j in wave)
            print(f"  Wave {idx}: {labels}")

    def print_job_edges(
        self,
        jobid: int,
        ancestors: Iterable[int],
        children: Iterable[int],
        outputs: Iterable[str],
    ) -> None:
        outputs = list(outputs)
        print(f"  job {jobid}")
        print(f"    ancestors: {_ids(ancestors)}")
        print(f"    children:  {_ids(children)}")
        if outputs:
            print(f"    produces:  {', '.join(outputs)}")

    def print_event(self, jobid: int, event: str, ready: Iterable[int]) -> None:
        """Print the ready set produced by one event."""
        print(f"  {jobid}:{event} -> ready {_ids(ready)}")

    def print_results(self, results: dict[int, str]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for jobid, status in sorted(results.items()):
            print(f"  {jobid}: {status.upper()}")

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
            traceback.print_exception(type(exc), exc, exc.__traceback__)
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        print(message)


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
