# sources.py
from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from .model import ResolvedModule
from .ui.console import Console


SOURCE_EXTENSION = ".java"


def validate_directories(
    dirs: Optional[Iterable[str]],
    base_dir: Optional[str] = None,
    console: Optional[Console] = None,
) -> List[str]:
    """Absolute paths of the given directories that exist; missing ones are warned about."""
    valid: List[str] = []
    for d in dirs or []:
        if not d:
            continue
        p = Path(d).expanduser()
        if not p.is_absolute():
            p = Path(base_dir or os.getcwd()) / p
        if p.is_dir():
            valid.append(os.path.abspath(p))
        elif console is not None:
            console.warn(f"Directory does not exist: {d}")
    return valid


def collect_sources(dirs: Optional[Iterable[str]], extension: str = SOURCE_EXTENSION) -> List[Path]:
    """
    Recursively collect files ending with `extension` under each directory.

    Missing directories contribute nothing. Files come back in traversal
    order (no canonical sort).
    """
    files: List[Path] = []
    for d in dirs or []:
        root = Path(d)
        if not root.is_dir():
            continue
        for dirpath, _dirnames, filenames in os.walk(root):
            for name in filenames:
                if name.endswith(extension):
                    files.append(Path(dirpath) / name)
    return files


def collect_shared_sourcepath(
    modules: Sequence[ResolvedModule],
    console: Optional[Console] = None,
) -> List[str]:
    """
    The sourcepath shared by every compile: all modules' existing source
    directories, de-duplicated by canonical path, in module declaration order.
    """
    seen = set()
    out: List[str] = []
    for m in modules:
        for d in validate_directories(m.source_directories):
            key = os.path.realpath(d)
            if key in seen:
                continue
            seen.add(key)
            out.append(d)
            if console is not None:
                console.info(f"Sourcepath entry: {d}")
    return out
