# steps/package.py
from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..errors import ConfigurationError, ToolFailure
from ..model import PackageSettings, ResolvedModule
from ..ui.console import Console
from .context import StepContext


STEP = "package"

CLASSES_PREFIX = "WEB-INF/classes/"
LIB_PREFIX = "WEB-INF/lib/"

# earliest timestamp a zip entry can carry; keeps archives byte-stable
FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _iter_files_under(root: Path) -> Iterable[Path]:
    # deterministic traversal
    for p in sorted(root.rglob("*")):
        if p.is_file():
            yield p


def _relpath(p: Path, root: Path) -> str:
    return p.relative_to(root).as_posix()


class ArchiveLayout:
    """
    Collects archive entries (name -> file on disk) before anything is
    written. The first file added under a name wins.
    """

    def __init__(self, console: Optional[Console] = None):
        self.console = console
        self.files: Dict[str, Path] = {}

    def add_tree(self, root: Path, prefix: str = "") -> None:
        for f in _iter_files_under(root):
            self.add_file(f, prefix + _relpath(f, root))

    def add_file(self, path: Path, name: str) -> None:
        if name in self.files:
            if self.console is not None:
                self.console.debug(f"Duplicate archive entry ignored: {name} ({path})")
            return
        self.files[name] = path

    def directories(self) -> List[str]:
        dirs = set()
        for name in self.files:
            parts = name.split("/")[:-1]
            for i in range(1, len(parts) + 1):
                dirs.add("/".join(parts[:i]) + "/")
        return sorted(dirs)

    def write(self, archive: Path) -> int:
        """Write a normalized zip: sorted entries, explicit directories, fixed timestamps."""
        archive.parent.mkdir(parents=True, exist_ok=True)
        tmp = archive.with_name(archive.name + ".tmp")
        try:
            with zipfile.ZipFile(tmp, mode="w", compression=zipfile.ZIP_DEFLATED) as zf:
                for d in self.directories():
                    info = zipfile.ZipInfo(d, date_time=FIXED_DATE_TIME)
                    info.external_attr = (0o40755 << 16) | 0x10
                    zf.writestr(info, b"")
                for name in sorted(self.files):
                    info = zipfile.ZipInfo(name, date_time=FIXED_DATE_TIME)
                    info.compress_type = zipfile.ZIP_DEFLATED
                    info.external_attr = 0o644 << 16
                    zf.writestr(info, self.files[name].read_bytes())
            tmp.replace(archive)
        finally:
            if tmp.exists():
                tmp.unlink(missing_ok=True)
        return len(self.files)


def plan_archive(
    ctx: StepContext,
    module: ResolvedModule,
    settings: PackageSettings,
    source_dir: Path,
) -> ArchiveLayout:
    name = module.name
    layout = ArchiveLayout(ctx.console)
    layout.add_tree(source_dir)

    for extra in settings.additional_content_directories or []:
        d = ctx.config.resolve_path(extra)
        if d is not None and d.is_dir():
            layout.add_tree(d)
        else:
            ctx.console.warn(f"[{name}] Additional content directory does not exist: {extra}")

    if settings.include_classes and module.output_directory:
        classes = Path(module.output_directory)
        if classes.is_dir():
            layout.add_tree(classes, CLASSES_PREFIX)
        else:
            ctx.console.warn(f"[{name}] Output directory does not exist, no classes packaged: {classes}")

    for lib in settings.lib_entries or []:
        f = ctx.config.resolve_path(lib)
        if f is not None and f.is_file():
            layout.add_file(f, LIB_PREFIX + f.name)
        else:
            ctx.console.warn(f"[{name}] Library entry does not exist: {lib}")

    return layout


def run_step(ctx: StepContext, module: ResolvedModule, settings: PackageSettings) -> None:
    """Write the module's web archive. Not forked: plain zip writing."""
    name = module.name

    archive = ctx.config.resolve_path(settings.archive_file)
    if archive is None:
        raise ConfigurationError(
            "Package step requires archive_file", module=name, step=STEP
        )

    source_dir = ctx.config.resolve_path(settings.source_directory)
    if source_dir is None or not source_dir.is_dir():
        ctx.console.warn(
            f"[{name}] Package source directory does not exist: "
            f"{settings.source_directory}, skipping package."
        )
        return

    layout = plan_archive(ctx, module, settings, source_dir)
    try:
        count = layout.write(archive)
    except OSError as e:
        raise ToolFailure(
            f"Failed to write archive {archive}: {e}", module=name, step=STEP
        ) from e
    ctx.console.info(f"[{name}] Packaged {count} file(s) -> {archive}")
