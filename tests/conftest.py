"""Pytest configuration and fixtures for modulebuild tests."""

from pathlib import Path
from typing import List, Optional, Sequence

import pytest

from modulebuild.compilers import CompileResult, CompilerBackend, Diagnostic, Severity
from modulebuild.ui.console import Console


class FakeExecutor:
    """Records every command instead of forking; returns the queued exit codes."""

    def __init__(self, exit_codes: Optional[List[int]] = None):
        self.commands: List[tuple] = []
        self.working_directories: List[Optional[str]] = []
        self.exit_codes = list(exit_codes or [])

    def run(self, command, working_directory=None) -> int:
        self.commands.append(tuple(command))
        self.working_directories.append(working_directory)
        return self.exit_codes.pop(0) if self.exit_codes else 0


class FakeBackend(CompilerBackend):
    """
    In-process compiler: writes one `<Name>.class` per source file into the
    `-d` directory, or fails when a source contains the text FAIL.

    With -proc:only it writes `<Name>_Gen.java` into the `-s` directory
    instead, for each source mentioning @Generate.
    """

    name = "fake"
    accepts_properties_file = True

    def __init__(self):
        self.calls: List[tuple] = []

    def compile(self, options: Sequence[str], source_files: Sequence[Path]) -> CompileResult:
        options = list(options)
        self.calls.append((options, [Path(f) for f in source_files]))
        processing_only = "-proc:only" in options
        if processing_only:
            out = Path(options[options.index("-s") + 1])
        else:
            out = Path(options[options.index("-d") + 1])

        diagnostics = []
        for f in source_files:
            text = Path(f).read_text(encoding="utf-8")
            if "FAIL" in text:
                diagnostics.append(Diagnostic(Severity.ERROR, "cannot find symbol", str(f), 1))
                continue
            if processing_only:
                if "@Generate" in text:
                    stem = Path(f).stem + "_Gen"
                    (out / (stem + ".java")).write_text(f"class {stem} {{}}", encoding="utf-8")
                continue
            (out / (Path(f).stem + ".class")).write_bytes(b"\xca\xfe\xba\xbe")
        return CompileResult(success=not diagnostics, diagnostics=diagnostics)


@pytest.fixture
def console():
    """Console writing to sys.stdout/sys.stderr, so capsys sees everything."""
    return Console()


@pytest.fixture
def debug_console():
    return Console(debug=True)


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def java_tree(tmp_path):
    """
    Helper that writes a java source file under tmp_path:

        java_tree("core/src/com/example/A.java", "class A {}")
    """
    def write(relative: str, content: str) -> Path:
        p = tmp_path / relative
        p.parent.mkdir(parents=True, exist_ok=True)
        p.write_text(content, encoding="utf-8")
        return p

    return write
