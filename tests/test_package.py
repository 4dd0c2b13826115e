"""Tests for web archive packaging."""

import zipfile

import pytest

from modulebuild.config import BuildConfig
from modulebuild.errors import ConfigurationError, ToolFailure
from modulebuild.model import Module, PackageSettings, ResolvedModule
from modulebuild.steps import StepContext
from modulebuild.steps import package as package_step
from modulebuild.steps.package import ArchiveLayout, FIXED_DATE_TIME


@pytest.fixture
def webapp(tmp_path):
    root = tmp_path / "webapp"
    (root / "WEB-INF").mkdir(parents=True)
    (root / "WEB-INF" / "web.xml").write_text("<web-app/>")
    (root / "index.html").write_text("<html/>")
    return root


@pytest.fixture
def classes(tmp_path):
    out = tmp_path / "classes"
    (out / "com" / "example").mkdir(parents=True)
    (out / "com" / "example" / "A.class").write_bytes(b"\xca\xfe")
    return out


def ctx_for(tmp_path, console, executor):
    return StepContext(config=BuildConfig(base_dir=str(tmp_path)), console=console, executor=executor)


def module_with_output(output):
    return ResolvedModule(
        module=Module(name="web"),
        source_directories=(),
        output_directory=str(output) if output else None,
        classpath_entries=(),
        settings={},
    )


class TestPackageStep:

    def test_archive_contains_descriptor_and_classes(self, tmp_path, webapp, classes, console, executor):
        settings = PackageSettings(enabled=True, source_directory="webapp", archive_file="target/app.war")
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(classes), settings)

        archive = tmp_path / "target" / "app.war"
        with zipfile.ZipFile(archive) as zf:
            names = zf.namelist()
            assert "WEB-INF/web.xml" in names
            assert "index.html" in names
            assert "WEB-INF/classes/com/example/A.class" in names
            assert zf.read("WEB-INF/classes/com/example/A.class") == b"\xca\xfe"
        assert not (tmp_path / "target" / "app.war.tmp").exists()

    def test_entries_are_normalized(self, tmp_path, webapp, classes, console, executor):
        settings = PackageSettings(enabled=True, source_directory="webapp", archive_file="app.war")
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(classes), settings)

        with zipfile.ZipFile(tmp_path / "app.war") as zf:
            infos = zf.infolist()
        dirs = [i.filename for i in infos if i.filename.endswith("/")]
        files = [i.filename for i in infos if not i.filename.endswith("/")]
        assert dirs == sorted(dirs)
        assert files == sorted(files)
        assert "WEB-INF/" in dirs
        assert "WEB-INF/classes/com/example/" in dirs
        assert all(i.date_time == FIXED_DATE_TIME for i in infos)

    def test_repeated_builds_are_byte_identical(self, tmp_path, webapp, classes, console, executor):
        settings = PackageSettings(enabled=True, source_directory="webapp", archive_file="app.war")
        ctx = ctx_for(tmp_path, console, executor)
        package_step.run_step(ctx, module_with_output(classes), settings)
        first = (tmp_path / "app.war").read_bytes()
        package_step.run_step(ctx, module_with_output(classes), settings)
        assert (tmp_path / "app.war").read_bytes() == first

    def test_classes_can_be_left_out(self, tmp_path, webapp, classes, console, executor):
        settings = PackageSettings(
            enabled=True, source_directory="webapp", archive_file="app.war", include_classes=False,
        )
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(classes), settings)
        with zipfile.ZipFile(tmp_path / "app.war") as zf:
            assert not any(n.startswith("WEB-INF/classes/") for n in zf.namelist())

    def test_libs_and_additional_content(self, tmp_path, webapp, console, executor, capsys):
        (tmp_path / "lib").mkdir()
        (tmp_path / "lib" / "dep.jar").write_bytes(b"jar")
        (tmp_path / "war").mkdir()
        (tmp_path / "war" / "app.nocache.js").write_text("js")
        # same name as a webapp file: the webapp copy wins
        (tmp_path / "war" / "index.html").write_text("other")

        settings = PackageSettings(
            enabled=True,
            source_directory="webapp",
            archive_file="app.war",
            additional_content_directories=["war", "missing"],
            lib_entries=["lib/dep.jar", "lib/nope.jar"],
        )
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(None), settings)

        with zipfile.ZipFile(tmp_path / "app.war") as zf:
            assert zf.read("WEB-INF/lib/dep.jar") == b"jar"
            assert zf.read("app.nocache.js") == b"js"
            assert zf.read("index.html") == b"<html/>"
        err = capsys.readouterr().err
        assert "Additional content directory does not exist: missing" in err
        assert "Library entry does not exist: lib/nope.jar" in err

    def test_missing_source_directory_warns_and_writes_nothing(self, tmp_path, console, executor, capsys):
        settings = PackageSettings(enabled=True, source_directory="nope", archive_file="app.war")
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(None), settings)
        assert not (tmp_path / "app.war").exists()
        assert "Package source directory does not exist" in capsys.readouterr().err

    def test_unset_source_directory_warns_and_writes_nothing(self, tmp_path, console, executor):
        settings = PackageSettings(enabled=True, archive_file="app.war")
        package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(None), settings)
        assert not (tmp_path / "app.war").exists()

    def test_missing_archive_file_is_a_configuration_error(self, tmp_path, webapp, console, executor):
        settings = PackageSettings(enabled=True, source_directory="webapp", fail_on_error=False)
        with pytest.raises(ConfigurationError, match="archive_file"):
            package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(None), settings)

    def test_write_failure_is_a_tool_failure(self, tmp_path, webapp, console, executor, monkeypatch):
        def boom(self, archive):
            raise OSError("read-only file system")

        monkeypatch.setattr(ArchiveLayout, "write", boom)
        settings = PackageSettings(enabled=True, source_directory="webapp", archive_file="app.war")
        with pytest.raises(ToolFailure, match="Failed to write archive"):
            package_step.run_step(ctx_for(tmp_path, console, executor), module_with_output(None), settings)


class TestArchiveLayout:

    def test_first_entry_wins(self, tmp_path, debug_console, capsys):
        a = tmp_path / "a.txt"
        b = tmp_path / "b.txt"
        a.write_text("a")
        b.write_text("b")
        layout = ArchiveLayout(debug_console)
        layout.add_file(a, "x/f.txt")
        layout.add_file(b, "x/f.txt")
        assert layout.files == {"x/f.txt": a}
        assert "Duplicate archive entry ignored: x/f.txt" in capsys.readouterr().err

    def test_directories_include_every_parent(self, tmp_path):
        f = tmp_path / "f"
        f.write_text("")
        layout = ArchiveLayout()
        layout.add_file(f, "a/b/c/f")
        layout.add_file(f, "a/g")
        assert layout.directories() == ["a/", "a/b/", "a/b/c/"]
