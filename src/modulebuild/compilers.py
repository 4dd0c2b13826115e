# compilers.py
from __future__ import annotations

import os
import re
import shutil
import subprocess
import zipfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

from .config import BuildConfig, java_executable
from .errors import ConfigurationError, ProcessExecutionError
from .ui.console import Console


# ---------------------------------------------------------------------
# Diagnostics
# ---------------------------------------------------------------------

class Severity(Enum):
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Diagnostic:
    severity: Severity
    message: str
    source: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        where = ""
        if self.source:
            where = f" ({self.source}" + (f":{self.line}" if self.line is not None else "") + ")"
        return f"{self.severity.name}: {self.message}{where}"


@dataclass(frozen=True)
class CompileResult:
    success: bool
    diagnostics: List[Diagnostic] = field(default_factory=list)


def route_diagnostics(diagnostics: Iterable[Diagnostic], console: Console, prefix: str = "") -> int:
    """Send every diagnostic to its console channel. Returns how many errors were seen."""
    errors = 0
    for d in diagnostics:
        text = f"{prefix}{d}"
        if d.severity is Severity.ERROR:
            errors += 1
            console.error(text)
        elif d.severity is Severity.WARNING:
            console.warn(text)
        else:
            console.info(text)
    return errors


# ---------------------------------------------------------------------
# Output parsers
# ---------------------------------------------------------------------

_JAVAC_LOCATED = re.compile(r"^(?P<source>.+?):(?P<line>\d+): (?P<kind>error|warning): (?P<msg>.*)$")
_JAVAC_BARE = re.compile(r"^(?P<kind>error|warning): (?P<msg>.*)$")
_JAVAC_SUMMARY = re.compile(r"^\d+ (error|warning)s?$")


def parse_javac_output(text: str) -> List[Diagnostic]:
    """
    Turn javac's console output into diagnostics.

    Lines that don't start a new diagnostic (source excerpt, caret, symbol
    details) are appended to the previous one.
    """
    diags: List[Diagnostic] = []
    for raw in text.splitlines():
        line = raw.rstrip()
        if not line or _JAVAC_SUMMARY.match(line):
            continue
        m = _JAVAC_LOCATED.match(line)
        if m:
            diags.append(Diagnostic(
                severity=Severity(m.group("kind")),
                message=m.group("msg"),
                source=m.group("source"),
                line=int(m.group("line")),
            ))
            continue
        m = _JAVAC_BARE.match(line)
        if m:
            diags.append(Diagnostic(severity=Severity(m.group("kind")), message=m.group("msg")))
            continue
        if line.startswith("Note: "):
            diags.append(Diagnostic(severity=Severity.INFO, message=line[len("Note: "):]))
            continue
        if diags:
            prev = diags[-1]
            diags[-1] = Diagnostic(prev.severity, prev.message + "\n" + line, prev.source, prev.line)
        else:
            diags.append(Diagnostic(severity=Severity.INFO, message=line))
    return diags


_ECJ_HEADER = re.compile(r"^\d+\. (?P<kind>ERROR|WARNING|INFO) in (?P<source>.+?)(?: \(at line (?P<line>\d+)\))?$")
_ECJ_SUMMARY = re.compile(r"^\d+ problems? \(.*\)$")


def parse_ecj_output(text: str) -> List[Diagnostic]:
    """Parse ECJ's numbered problem blocks separated by '----------' lines."""
    diags: List[Diagnostic] = []
    header = None
    body: List[str] = []

    def flush() -> None:
        if header is None:
            return
        line_no = header.group("line")
        diags.append(Diagnostic(
            severity=Severity[header.group("kind")],
            message="\n".join(body).strip() or header.group(0),
            source=header.group("source"),
            line=int(line_no) if line_no else None,
        ))

    for raw in text.splitlines():
        line = raw.rstrip()
        if line.startswith("----------"):
            flush()
            header, body = None, []
            continue
        m = _ECJ_HEADER.match(line)
        if m:
            flush()
            header, body = m, []
            continue
        if header is not None:
            body.append(line)
        elif line and not _ECJ_SUMMARY.match(line):
            diags.append(Diagnostic(severity=Severity.INFO, message=line))
    flush()
    return diags


# ---------------------------------------------------------------------
# Backends
# ---------------------------------------------------------------------

class CompilerBackend(ABC):
    """compile(options, source_files) -> CompileResult"""

    name: str = "abstract"
    # whether "-properties <file>" is understood
    accepts_properties_file: bool = False

    @abstractmethod
    def compile(self, options: Sequence[str], source_files: Sequence[Path]) -> CompileResult:
        raise NotImplementedError

    def _run(self, command: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                command,
                text=True,
                capture_output=True,
                errors="replace",
                check=False,
            )
        except OSError as e:
            raise ProcessExecutionError(
                f"Failed to launch {self.name}: {e}",
                command=command,
            ) from e
        except KeyboardInterrupt as e:
            raise ProcessExecutionError(
                f"{self.name} was interrupted",
                command=command,
                interrupted=True,
            ) from e


class JavacBackend(CompilerBackend):
    """The JDK's javac, found next to the configured java home or on PATH."""

    name = "javac"

    def __init__(self, javac_path: str):
        self.javac_path = javac_path

    @classmethod
    def from_config(cls, config: BuildConfig) -> "JavacBackend":
        exe = "javac.exe" if os.name == "nt" else "javac"
        for home in (config.java_home, os.environ.get("JAVA_HOME")):
            if home:
                candidate = Path(home) / "bin" / exe
                if candidate.exists():
                    return cls(str(candidate))
        found = shutil.which("javac")
        if found:
            return cls(found)
        raise ConfigurationError(
            "No system Java compiler found. Ensure you are running with a JDK, not a JRE.",
            details={"java_home": config.java_home or os.environ.get("JAVA_HOME", "")},
        )

    def compile(self, options: Sequence[str], source_files: Sequence[Path]) -> CompileResult:
        command = [self.javac_path, *options, *[str(f) for f in source_files]]
        proc = self._run(command)
        diags = parse_javac_output((proc.stdout or "") + (proc.stderr or ""))
        return CompileResult(success=proc.returncode == 0, diagnostics=diags)


ECJ_MAIN_CLASS = "org.eclipse.jdt.internal.compiler.batch.Main"
ECJ_COORDINATES = "org.eclipse.jdt:ecj"
_ECJ_CLASS_ENTRY = ECJ_MAIN_CLASS.replace(".", "/") + ".class"


def _contains_ecj(artifact: Path) -> bool:
    if artifact.is_dir():
        return (artifact / _ECJ_CLASS_ENTRY).is_file()
    if artifact.is_file() and zipfile.is_zipfile(artifact):
        try:
            with zipfile.ZipFile(artifact) as zf:
                return _ECJ_CLASS_ENTRY in zf.namelist()
        except (OSError, zipfile.BadZipFile):
            return False
    return False


class EcjBackend(CompilerBackend):
    """
    The Eclipse batch compiler, run through the java launcher.

    The compiler jar is not assumed to be installed; it is looked up among
    the build's declared compiler_artifacts.
    """

    name = "ecj"
    accepts_properties_file = True

    def __init__(self, ecj_artifact: str, java: str = "java"):
        self.ecj_artifact = ecj_artifact
        self.java = java

    @classmethod
    def from_config(cls, config: BuildConfig) -> "EcjBackend":
        for entry in config.compiler_artifacts:
            artifact = config.resolve_path(entry)
            if artifact is not None and _contains_ecj(artifact):
                return cls(str(artifact), java=java_executable(config.java_home))
        raise ConfigurationError(
            "ECJ compiler not found. Add the ECJ artifact to compiler_artifacts.",
            details={
                "dependency": ECJ_COORDINATES,
                "main_class": ECJ_MAIN_CLASS,
                "searched": ", ".join(config.compiler_artifacts) or "(none)",
            },
        )

    def compile(self, options: Sequence[str], source_files: Sequence[Path]) -> CompileResult:
        command = [
            self.java, "-cp", self.ecj_artifact, ECJ_MAIN_CLASS,
            *options, *[str(f) for f in source_files],
        ]
        proc = self._run(command)
        diags = parse_ecj_output((proc.stdout or "") + (proc.stderr or ""))
        success = proc.returncode == 0 and not any(d.severity is Severity.ERROR for d in diags)
        return CompileResult(success=success, diagnostics=diags)


# ---------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------

BackendFactory = Callable[[BuildConfig], CompilerBackend]

_BACKENDS: Dict[str, BackendFactory] = {
    "javac": JavacBackend.from_config,
    "ecj": EcjBackend.from_config,
}


def register_backend(name: str, factory: BackendFactory) -> None:
    _BACKENDS[name.strip().lower()] = factory


def unregister_backend(name: str) -> None:
    _BACKENDS.pop(name.strip().lower(), None)


def available_backends() -> List[str]:
    return sorted(_BACKENDS)


def resolve_backend(name: str, config: BuildConfig) -> CompilerBackend:
    """Look up and construct the backend once, at the start of a run."""
    key = (name or "").strip().lower()
    factory = _BACKENDS.get(key)
    if factory is None:
        raise ConfigurationError(
            f"Unsupported compiler type: {name!r}",
            details={"available": ", ".join(available_backends())},
        )
    return factory(config)
