"""Tests for compiler output parsing and the backend registry."""

import os
import subprocess
import zipfile

import pytest

from modulebuild.compilers import (
    ECJ_COORDINATES,
    ECJ_MAIN_CLASS,
    EcjBackend,
    JavacBackend,
    Severity,
    available_backends,
    parse_ecj_output,
    parse_javac_output,
    register_backend,
    resolve_backend,
    route_diagnostics,
    unregister_backend,
)
from modulebuild.config import BuildConfig
from modulebuild.errors import ConfigurationError, ProcessExecutionError


JAVAC_OUTPUT = """\
/src/com/example/B.java:3: error: cannot find symbol
    Shared s;
    ^
  symbol:   class Shared
/src/com/example/B.java:7: warning: [deprecation] foo() in A has been deprecated
Note: Some input files use unchecked or unsafe operations.
1 error
1 warning
"""

ECJ_OUTPUT = """\
----------
1. ERROR in /src/com/example/B.java (at line 3)
\tShared s;
\t^^^^^^
Shared cannot be resolved to a type
----------
2. WARNING in /src/com/example/C.java (at line 10)
\tint unused;
The value of the local variable unused is not used
----------
2 problems (1 error, 1 warning)
"""


class TestJavacParser:

    def test_located_diagnostics(self):
        diags = parse_javac_output(JAVAC_OUTPUT)
        assert [d.severity for d in diags] == [Severity.ERROR, Severity.WARNING, Severity.INFO]

        error = diags[0]
        assert error.source == "/src/com/example/B.java"
        assert error.line == 3
        assert error.message.startswith("cannot find symbol")
        # excerpt, caret and symbol lines stay with their diagnostic
        assert "symbol:   class Shared" in error.message

        assert diags[2].message == "Some input files use unchecked or unsafe operations."

    def test_bare_diagnostics(self):
        diags = parse_javac_output("error: invalid source release: 99\n")
        assert len(diags) == 1
        assert diags[0].severity is Severity.ERROR
        assert diags[0].source is None

    def test_empty_output(self):
        assert parse_javac_output("") == []


class TestEcjParser:

    def test_problem_blocks(self):
        diags = parse_ecj_output(ECJ_OUTPUT)
        assert len(diags) == 2
        assert diags[0].severity is Severity.ERROR
        assert diags[0].source == "/src/com/example/B.java"
        assert diags[0].line == 3
        assert "Shared cannot be resolved to a type" in diags[0].message
        assert diags[1].severity is Severity.WARNING
        assert diags[1].line == 10


class TestRouting:

    def test_route_diagnostics_uses_channels(self, console, capsys):
        errors = route_diagnostics(parse_javac_output(JAVAC_OUTPUT), console, prefix="[b] ")
        assert errors == 1
        captured = capsys.readouterr()
        assert "ERROR: [b] ERROR: cannot find symbol" in captured.err
        assert "WARNING: [b] WARNING: [deprecation]" in captured.err
        assert "[b] INFO: Some input files" in captured.out


class TestRegistry:

    def test_builtin_backends(self):
        assert {"javac", "ecj"} <= set(available_backends())

    def test_unknown_backend(self):
        with pytest.raises(ConfigurationError, match="Unsupported compiler type"):
            resolve_backend("tcc", BuildConfig())

    def test_register_and_resolve_is_case_insensitive(self, backend):
        register_backend("Fake", lambda config: backend)
        try:
            assert resolve_backend(" FAKE ", BuildConfig()) is backend
        finally:
            unregister_backend("fake")
        assert "fake" not in available_backends()


class TestJavacBackend:

    def test_found_under_java_home(self, tmp_path):
        exe = "javac.exe" if os.name == "nt" else "javac"
        (tmp_path / "bin").mkdir()
        (tmp_path / "bin" / exe).write_text("")
        backend = JavacBackend.from_config(BuildConfig(java_home=str(tmp_path)))
        assert backend.javac_path == str(tmp_path / "bin" / exe)
        assert not backend.accepts_properties_file

    def test_missing_jdk(self, monkeypatch):
        monkeypatch.delenv("JAVA_HOME", raising=False)
        monkeypatch.setattr("modulebuild.compilers.shutil.which", lambda name: None)
        with pytest.raises(ConfigurationError, match="JDK"):
            JavacBackend.from_config(BuildConfig())

    def test_interrupt_is_reported_as_process_error(self, tmp_path, monkeypatch):
        def interrupted(*args, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(subprocess, "run", interrupted)
        source = tmp_path / "A.java"
        with pytest.raises(ProcessExecutionError) as exc_info:
            JavacBackend("javac").compile(["-d", str(tmp_path)], [source])
        assert exc_info.value.interrupted
        assert exc_info.value.command == ["javac", "-d", str(tmp_path), str(source)]
        assert isinstance(exc_info.value.__cause__, KeyboardInterrupt)

    def test_launch_failure_is_not_an_interrupt(self, tmp_path):
        with pytest.raises(ProcessExecutionError) as exc_info:
            JavacBackend(str(tmp_path / "no-such-javac")).compile([], [])
        assert not exc_info.value.interrupted


class TestEcjBackend:

    def test_found_among_compiler_artifacts(self, tmp_path):
        jar = tmp_path / "ecj-3.33.jar"
        with zipfile.ZipFile(jar, "w") as zf:
            zf.writestr(ECJ_MAIN_CLASS.replace(".", "/") + ".class", b"")
        other = tmp_path / "other.jar"
        with zipfile.ZipFile(other, "w") as zf:
            zf.writestr("x/Y.class", b"")

        config = BuildConfig(compiler_artifacts=[str(other), "missing.jar", str(jar)], base_dir=str(tmp_path))
        backend = EcjBackend.from_config(config)
        assert backend.ecj_artifact == str(jar)
        assert backend.accepts_properties_file

    def test_not_found_lists_coordinates(self, tmp_path):
        with pytest.raises(ConfigurationError) as exc_info:
            EcjBackend.from_config(BuildConfig(base_dir=str(tmp_path)))
        assert exc_info.value.details["dependency"] == ECJ_COORDINATES
        assert "org.eclipse.jdt:ecj" in str(exc_info.value)
