# classpath.py
from __future__ import annotations

import atexit
import locale
import os
import tempfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple


# Argument files written during this interpreter's lifetime; removed at exit.
_ARG_FILES: List[Path] = []


def _cleanup_arg_files() -> None:
    for p in _ARG_FILES:
        try:
            p.unlink(missing_ok=True)
        except OSError:
            # best-effort; the OS temp dir gets cleaned eventually
            continue
    _ARG_FILES.clear()


atexit.register(_cleanup_arg_files)


def _is_windows() -> bool:
    return os.name == "nt"


class ClassPath:
    """
    An immutable, ordered class path.

    Entries are joined with the platform path separator (":" or ";").
    Null and empty entries are dropped on construction; `append` never
    de-duplicates.

    On Windows the command line length is limited, so a class path with more
    than one entry prefers to be passed through an argument file
    (`@file`) when the caller allows it.
    """

    __slots__ = ("_entries", "_path", "_prefer_arg_file")

    def __init__(self, entries: Sequence[str] = (), prefer_arg_file: bool = False):
        self._entries: Tuple[str, ...] = tuple(entries)
        self._path = os.pathsep.join(self._entries)
        self._prefer_arg_file = prefer_arg_file

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def of(cls, entries: Optional[Iterable[Optional[str]]]) -> "ClassPath":
        """Build from path strings, silently dropping None/empty entries."""
        if not entries:
            return EMPTY
        filtered = [str(e) for e in entries if e is not None and str(e) != ""]
        if not filtered:
            return EMPTY
        return cls(filtered, prefer_arg_file=len(filtered) > 1 and _is_windows())

    @classmethod
    def of_paths(cls, paths: Optional[Iterable[Optional[os.PathLike]]]) -> "ClassPath":
        """Build from filesystem paths; each entry is made absolute."""
        if not paths:
            return EMPTY
        return cls.of([str(Path(p).absolute()) for p in paths if p is not None])

    @classmethod
    def empty(cls) -> "ClassPath":
        return EMPTY

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def entries(self) -> Tuple[str, ...]:
        return self._entries

    def is_empty(self) -> bool:
        return self._path == ""

    def __bool__(self) -> bool:
        return not self.is_empty()

    def __len__(self) -> int:
        return len(self._entries)

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"ClassPath({self._path!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClassPath):
            return NotImplemented
        return self._path == other._path

    def __hash__(self) -> int:
        return hash(self._path)

    # ------------------------------------------------------------------
    # Combination / rendering
    # ------------------------------------------------------------------

    def append(self, other: Optional["ClassPath"]) -> "ClassPath":
        """Return a class path with `other`'s entries after this one's."""
        if other is None or other.is_empty():
            return self
        if self.is_empty():
            return other
        return ClassPath(
            self._entries + other._entries,
            prefer_arg_file=self._prefer_arg_file or other._prefer_arg_file,
        )

    def args(self, flag: str, allow_arg_file: bool = False) -> List[str]:
        """
        Return the args to append to a command line for the given flag
        (e.g. "-cp", "-classpath", "-sourcepath"), or [] if empty.
        """
        if self.is_empty():
            return []
        return [flag, self._path_arg(allow_arg_file)]

    def _path_arg(self, allow_arg_file: bool) -> str:
        if self._prefer_arg_file and allow_arg_file:
            try:
                return "@" + str(self._create_arg_file())
            except OSError:
                return self._path
        return self._path

    def _create_arg_file(self) -> Path:
        fd, name = tempfile.mkstemp(prefix="modulebuild-classpath-", suffix=".argfile")
        arg_file = Path(name)
        _ARG_FILES.append(arg_file)
        content = '"' + self._path.replace("\\", "\\\\") + '"'
        with os.fdopen(fd, "w", encoding=locale.getpreferredencoding(False)) as f:
            f.write(content)
        return arg_file


EMPTY = ClassPath()
