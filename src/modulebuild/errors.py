# errors.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import ClassVar, List, Optional


@dataclass(eq=False)
class BuildError(Exception):
    """
    Structured build error with enough context for:
      - clean CLI output
      - deciding whether a step failure is fatal
      - debugging without full tracebacks
    """
    message: str
    module: Optional[str] = None
    step: Optional[str] = None
    details: dict = field(default_factory=dict)

    kind: ClassVar[str] = "build_error"

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.module:
            lines.append(f"module={self.module}")
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


class ConfigurationError(BuildError):
    """Required field missing, conflicting options, or an unresolvable compiler backend."""
    kind = "configuration_error"


class ValidationError(BuildError, ValueError):
    """Input that can be skipped with a warning (e.g. a module with nothing to build)."""
    kind = "validation_error"


@dataclass(eq=False)
class ProcessExecutionError(BuildError):
    """The process could not be launched, or waiting for it was interrupted."""
    command: List[str] = field(default_factory=list)
    interrupted: bool = False

    kind: ClassVar[str] = "process_execution_error"


@dataclass(eq=False)
class ToolFailure(BuildError):
    """A tool ran and reported failure (non-zero exit code or compiler errors)."""
    exit_code: Optional[int] = None

    kind: ClassVar[str] = "tool_failure"

    def __str__(self) -> str:
        text = super().__str__()
        if self.exit_code is not None:
            text += f"\nexit_code={self.exit_code}"
        return text
