# steps/context.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from ..classpath import ClassPath
from ..compilers import CompilerBackend
from ..config import BuildConfig, java_executable
from ..process import ProcessExecutor
from ..ui.console import Console


@dataclass
class StepContext:
    """What a step needs besides its module and its merged settings."""
    config: BuildConfig
    console: Console
    executor: ProcessExecutor
    module_classpath: ClassPath = field(default_factory=ClassPath.empty)
    sourcepath: List[str] = field(default_factory=list)
    backend: Optional[CompilerBackend] = None

    @property
    def java(self) -> str:
        return java_executable(self.config.java_home)
