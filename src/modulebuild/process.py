# process.py
from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Optional, Sequence

from .errors import ProcessExecutionError
from .ui.console import Console


class ProcessExecutor:
    """
    Runs an external command, streaming its merged stdout/stderr to the
    console line by line while it runs.

    There is no timeout: a child that never exits blocks the build.
    """

    def __init__(self, console: Console, prefix: str = "[process] "):
        self.console = console
        self.prefix = prefix

    def run(self, command: Sequence[str], working_directory: Optional[str | Path] = None) -> int:
        """Run `command` and return its exit code."""
        cmd = [str(c) for c in command]
        cwd = str(working_directory) if working_directory is not None else None
        self.console.debug(f"Executing: {' '.join(cmd)}" + (f" (cwd={cwd})" if cwd else ""))

        try:
            proc = subprocess.Popen(
                cmd,
                cwd=cwd,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                bufsize=1,
            )
        except OSError as e:
            raise ProcessExecutionError(
                f"Failed to execute process: {e}",
                command=cmd,
                details={"cwd": cwd or "."},
            ) from e

        try:
            with proc.stdout:
                for line in proc.stdout:
                    self.console.info(self.prefix + line.rstrip("\r\n"))
            return proc.wait()
        except KeyboardInterrupt as e:
            # the child is left as-is; nothing already written is rolled back
            raise ProcessExecutionError(
                "Process was interrupted",
                command=cmd,
                interrupted=True,
            ) from e
