"""Tests for ClassPath construction, combination and rendering."""

import os
from pathlib import Path

import pytest

from modulebuild import classpath as classpath_module
from modulebuild.classpath import ClassPath


class TestClassPathConstruction:

    def test_of_drops_none_and_empty_entries(self):
        cp = ClassPath.of(["a", None, "", "b"])
        assert cp.entries == ("a", "b")
        assert str(cp) == f"a{os.pathsep}b"

    def test_of_nothing_is_empty(self):
        assert ClassPath.of(None).is_empty()
        assert ClassPath.of([]).is_empty()
        assert ClassPath.of([None, ""]) is ClassPath.empty()
        assert not ClassPath.empty()
        assert str(ClassPath.empty()) == ""

    def test_of_preserves_order(self):
        assert ClassPath.of(["z", "a", "m"]).entries == ("z", "a", "m")

    def test_of_paths_uses_absolute_form(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        cp = ClassPath.of_paths([Path("lib/x.jar"), None])
        assert cp.entries == (str(tmp_path / "lib" / "x.jar"),)

    def test_equality_is_by_rendered_path(self):
        assert ClassPath.of(["a", "b"]) == ClassPath.of(["a"]).append(ClassPath.of(["b"]))
        assert hash(ClassPath.of(["a"])) == hash(ClassPath.of(["a"]))
        assert ClassPath.of(["a"]) != ClassPath.of(["b"])


class TestClassPathAppend:

    def test_append_concatenates(self):
        cp = ClassPath.of(["a"]).append(ClassPath.of(["b", "c"]))
        assert str(cp) == os.pathsep.join(["a", "b", "c"])
        assert len(cp) == 3

    def test_append_empty_or_none_returns_self(self):
        cp = ClassPath.of(["a"])
        assert cp.append(None) is cp
        assert cp.append(ClassPath.empty()) is cp

    def test_empty_append_returns_other(self):
        other = ClassPath.of(["b"])
        assert ClassPath.empty().append(other) is other

    def test_append_never_deduplicates(self):
        cp = ClassPath.of(["a"]).append(ClassPath.of(["a"]))
        assert cp.entries == ("a", "a")

    def test_append_leaves_operands_unchanged(self):
        left = ClassPath.of(["a"])
        right = ClassPath.of(["b"])
        left.append(right)
        assert left.entries == ("a",)
        assert right.entries == ("b",)


class TestClassPathArgs:

    def test_empty_path_contributes_no_args(self):
        assert ClassPath.empty().args("-cp") == []

    def test_args_renders_flag_and_path(self):
        cp = ClassPath.of(["a", "b"])
        assert cp.args("-classpath") == ["-classpath", f"a{os.pathsep}b"]

    def test_no_arg_file_off_windows(self, monkeypatch):
        monkeypatch.setattr(classpath_module, "_is_windows", lambda: False)
        cp = ClassPath.of(["a", "b"])
        assert cp.args("-cp", allow_arg_file=True) == ["-cp", str(cp)]

    def test_arg_file_on_windows_with_several_entries(self, monkeypatch, tmp_path):
        monkeypatch.setattr(classpath_module, "_is_windows", lambda: True)
        monkeypatch.setattr(classpath_module.tempfile, "tempdir", str(tmp_path))
        cp = ClassPath.of(["C:\\lib\\a.jar", "C:\\lib\\b.jar"])

        flag, value = cp.args("-cp", allow_arg_file=True)
        assert flag == "-cp"
        assert value.startswith("@")
        arg_file = Path(value[1:])
        assert arg_file.parent == tmp_path
        assert arg_file.read_text() == '"' + str(cp).replace("\\", "\\\\") + '"'
        assert arg_file in classpath_module._ARG_FILES

        # callers that cannot expand @files always get the literal path
        assert cp.args("-sourcepath") == ["-sourcepath", str(cp)]

    def test_single_entry_never_uses_arg_file(self, monkeypatch):
        monkeypatch.setattr(classpath_module, "_is_windows", lambda: True)
        cp = ClassPath.of(["C:\\lib\\a.jar"])
        assert cp.args("-cp", allow_arg_file=True) == ["-cp", "C:\\lib\\a.jar"]

    def test_arg_file_failure_falls_back_to_literal(self, monkeypatch):
        monkeypatch.setattr(classpath_module, "_is_windows", lambda: True)
        cp = ClassPath.of(["a", "b"])

        def boom(self):
            raise OSError("disk full")

        monkeypatch.setattr(ClassPath, "_create_arg_file", boom)
        assert cp.args("-cp", allow_arg_file=True) == ["-cp", str(cp)]

    def test_cleanup_removes_arg_files(self, tmp_path, monkeypatch):
        f = tmp_path / "x.argfile"
        f.write_text("x")
        monkeypatch.setattr(classpath_module, "_ARG_FILES", [f])
        classpath_module._cleanup_arg_files()
        assert not f.exists()
        assert classpath_module._ARG_FILES == []


@pytest.mark.parametrize("entries", [["only"], ["a", "b", "c"]])
def test_entries_round_trip_through_rendering(entries):
    assert str(ClassPath.of(entries)).split(os.pathsep) == entries
