# resolver.py
from __future__ import annotations

from typing import Dict, List, Optional

from .config import BuildConfig
from .errors import ConfigurationError, ValidationError
from .model import (
    Module,
    ResolvedModule,
    StepKind,
    StepSettings,
    merge_settings,
)
from .sources import validate_directories
from .ui.console import Console


def merged_settings(config: BuildConfig, module: Module) -> Dict[StepKind, Optional[StepSettings]]:
    """merge(global default, module override) for every step kind."""
    return {
        kind: merge_settings(config.defaults.get(kind), module.settings(kind))
        for kind in StepKind
    }


def resolve_module(config: BuildConfig, module: Module) -> ResolvedModule:
    """
    Merge settings and absolutize paths for one module.

    Raises ValidationError when the module has nothing to build: no existing
    source directory, no output directory and packaging disabled.
    """
    settings = merged_settings(config, module)
    existing_sources = validate_directories(module.source_directories, config.base_dir)
    output_dir = config.resolve_path(module.output_directory)
    package = settings[StepKind.PACKAGE]
    packaging = package is not None and package.enabled

    if not existing_sources and output_dir is None and not packaging:
        raise ValidationError(
            f"Module '{module.display_name}' has no source directories, "
            "no output directory and no packaging step",
            module=module.display_name,
        )

    return ResolvedModule(
        module=module,
        source_directories=tuple(
            str(config.resolve_path(d)) for d in module.source_directories if d
        ),
        output_directory=str(output_dir) if output_dir is not None else None,
        classpath_entries=tuple(
            str(config.resolve_path(e)) for e in module.classpath_entries if e
        ),
        settings=settings,
    )


def resolve_modules(config: BuildConfig, console: Console) -> List[ResolvedModule]:
    """Buildable modules in declaration order; the rest are skipped with a warning."""
    names = [m.name for m in config.modules if m.name]
    dupes = sorted({n for n in names if names.count(n) > 1})
    if dupes:
        raise ConfigurationError(f"Duplicate module names found: {dupes}")

    resolved: List[ResolvedModule] = []
    for module in config.modules:
        try:
            resolved.append(resolve_module(config, module))
        except ValidationError as e:
            console.warn(f"{e.message}, skipping.")
    return resolved
