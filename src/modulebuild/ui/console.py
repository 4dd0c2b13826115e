"""Console output formatting utilities for modulebuild."""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..model import BuildResult


class Console:
    """
    Centralized console output.

    A Console is created once by the CLI (or by a test) and handed to every
    component that reports progress; nothing looks it up globally.
    """

    def __init__(self, debug: bool = False, out=None, err=None):
        """
        Initialize console formatter.

        Args:
            debug: If True, show debug lines and full tracebacks
            out: Stream for regular output (defaults to sys.stdout at print time)
            err: Stream for warnings and errors (defaults to sys.stderr at print time)
        """
        self.debug_enabled = debug
        self._out = out
        self._err = err

    @property
    def out(self):
        return self._out if self._out is not None else sys.stdout

    @property
    def err(self):
        return self._err if self._err is not None else sys.stderr

    # ------------------------------------------------------------------
    # Channels
    # ------------------------------------------------------------------

    def info(self, message: str) -> None:
        """Print informational message."""
        print(message, file=self.out)

    def warn(self, message: str) -> None:
        """Print warning message."""
        print(f"WARNING: {message}", file=self.err)

    def error(self, message: str) -> None:
        """Print error message."""
        print(f"ERROR: {message}", file=self.err)

    def debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug_enabled:
            print(f"[DEBUG] {message}", file=self.err)

    # ------------------------------------------------------------------
    # Structured output
    # ------------------------------------------------------------------

    def print_build_started(
        self, build_file: str, module_count: int, compiler: str, goal: Optional[str] = None,
    ) -> None:
        """Print build start information."""
        print("\nBUILD STARTED", file=self.out)
        if goal:
            print(f"Goal: {goal}", file=self.out)
        print(f"Build file: {build_file}", file=self.out)
        print(f"Modules: {module_count}", file=self.out)
        print(f"Compiler: {compiler}", file=self.out)
        print(file=self.out)

    def print_module_start(self, name: str) -> None:
        """Print module banner."""
        print("=" * 40, file=self.out)
        print(f"MODULE: {name}", file=self.out)
        print("=" * 40, file=self.out)

    def print_step(self, module: str, step: str) -> None:
        """Print step start message."""
        print(f"[{module}] STEP: {step}", file=self.out)

    def print_step_result(self, module: str, step: str, outcome: str) -> None:
        print(f"[{module}] {step}: {outcome}", file=self.out)

    def print_results(self, result: "BuildResult") -> None:
        """Print final results summary."""
        print("\n" + "=" * 40, file=self.out)
        print("RESULTS", file=self.out)
        print("=" * 40, file=self.out)
        for module_result in result.modules:
            print(f"  {module_result.name}: {module_result.state.value.upper()}", file=self.out)
            for kind, outcome in module_result.steps:
                print(f"    {kind.value}: {outcome.value}", file=self.out)
        status = "FAILED" if result.failed else "SUCCESS"
        print(f"BUILD {status}", file=self.out)

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
        print(f"\nERROR: {title}", file=self.err)
        print(f"{message}", file=self.err)
        if details:
            for detail in details:
                print(f"  {detail}", file=self.err)
        if suggestion:
            print(f"\n{suggestion}", file=self.err)

    def print_exception(self, exc: BaseException) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug_enabled:
            import traceback
            traceback.print_exception(type(exc), exc, exc.__traceback__, file=self.err)
        else:
            print(f"Error: {exc}", file=self.err)
