"""Console output formatting utilities for taskrun."""

from __future__ import annotations

import sys
from typing import Mapping, Optional


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

    def print_run_started(self, workflow: str, target: str, chain: list[str]) -> None:
        """Print run start information."""
        print("\nRUN STARTED")
        print(f"Workflow: {workflow}")
        print(f"Target: {target}")
        print(f"Chain: {' -> '.join(chain)}")
        print()

    def print_target_start(self, name: str) -> None:
        print(f"\nTARGET STARTED: {name}")

    def print_step(self, name: str, cmd: str) -> None:
        print(f"STEP: {name}")
        print(f"  $ {cmd}")

    def print_success(self, name: str) -> None:
        print("STATUS: success")

    def print_failure(
        self,
        name: str,
        reason: str,
        status: Optional[str] = None,
        hint: Optional[str] = None,
        is_target: bool = False,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Target or step name
            reason: Failure reason/error message
            status: Optional exit status ("exit=1", "signal=SIGKILL")
            hint: Optional hint for user
            is_target: If True, print "TARGET FAILED", otherwise "STEP FAILED"
        """
        prefix = "TARGET FAILED" if is_target else "STEP FAILED"
        print(f"{prefix}: {name}")
        if status is not None:
            print(f"Status: {status}")
        if hint:
            print(f"Hint: {hint}")
        if self.debug:
            print(f"Error details: {reason}")
        else:
            # first line only outside debug mode
            error_line = reason.split("\n")[0] if reason else "Unknown error"
            if error_line and error_line != str(reason):
                print(f"Error: {error_line}")

    def print_target_line(self, name: str, needs: Optional[str], description: str) -> None:
        """Print one row of the target listing."""
        line = f"  {name}"
        if needs:
            line += f" (needs {needs})"
        if description:
            line += f" - {description}"
        print(line)

    def print_plan_step(self, target: str, cmd: str, env: Mapping[str, str]) -> None:
        """Print a step that would run (dry run / show)."""
        prefix = " ".join(f"{k}={v}" for k, v in env.items())
        print(f"  [{target}] {prefix + ' ' if prefix else ''}{cmd}")

    def print_results(self, results: Mapping[str, object]) -> None:
        """Print final results summary."""
        print("\n" + "=" * 40)
        print("RESULTS")
        print("=" * 40)
        for name, state in results.items():
            value = getattr(state, "value", state)
            print(f"  {name}: {str(value).upper()}")

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
