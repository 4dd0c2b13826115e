# steps/annotations.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from ..classpath import ClassPath
from ..compilers import route_diagnostics
from ..errors import ConfigurationError, ToolFailure
from ..model import AnnotationSettings, ResolvedModule
from ..sources import collect_sources, validate_directories
from .context import StepContext


STEP = "annotations"


def generated_sources_dir(module: ResolvedModule, settings: Optional[AnnotationSettings]) -> Optional[Path]:
    """
    Where processors write generated sources: the configured directory, else
    generated-sources/apt next to the module's output directory.
    """
    if settings is not None and settings.generated_sources_directory:
        return Path(settings.generated_sources_directory)
    if not module.output_directory:
        return None
    return Path(module.output_directory).parent / "generated-sources" / "apt"


def build_options(
    settings: AnnotationSettings,
    generated_dir: Path,
    sourcepath: Sequence[str],
    module_classpath: ClassPath,
    *,
    default_source: Optional[str] = None,
    default_target: Optional[str] = None,
) -> List[str]:
    """Options for a processing-only compiler run; no class files are written."""
    options: List[str] = []

    src = settings.source or default_source
    tgt = settings.target or default_target
    if src:
        options += ["-source", src]
    if tgt:
        options += ["-target", tgt]

    options += ["-proc:only", "-s", str(generated_dir)]

    cp = module_classpath.append(ClassPath.of(settings.classpath_entries))
    options += cp.args("-classpath")
    options += ClassPath.of(list(sourcepath)).args("-sourcepath")
    options += ClassPath.of(settings.processor_path_entries).args("-processorpath")

    if settings.processors:
        options += ["-processor", ",".join(settings.processors)]
    if not settings.show_warnings:
        options.append("-nowarn")
    if settings.compiler_arguments:
        options.extend(settings.compiler_arguments)

    return options


def run_step(ctx: StepContext, module: ResolvedModule, settings: AnnotationSettings) -> None:
    """Run annotation processors over the module's sources."""
    name = module.name
    if ctx.backend is None:
        raise ConfigurationError("No compiler backend resolved", module=name, step=STEP)

    generated = generated_sources_dir(module, settings)
    if generated is None:
        raise ConfigurationError(
            "Annotation processing requires generated_sources_directory or an output_directory",
            module=name,
            step=STEP,
        )
    generated = ctx.config.resolve_path(str(generated))

    source_files = collect_sources(validate_directories(module.source_directories, console=ctx.console))
    if not source_files:
        ctx.console.info(f"[{name}] No Java source files found, skipping annotation processing.")
        return

    try:
        generated.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ToolFailure(
            f"Failed to create generated sources directory: {generated}", module=name, step=STEP
        ) from e

    options = build_options(
        settings,
        generated,
        ctx.sourcepath,
        ctx.module_classpath,
        default_source=ctx.config.default_source,
        default_target=ctx.config.default_target,
    )
    ctx.console.info(f"[{name}] Processing annotations in {len(source_files)} source file(s) -> {generated}")
    ctx.console.debug(f"[{name}] {ctx.backend.name} options: {options}")

    result = ctx.backend.compile(options, source_files)
    errors = route_diagnostics(result.diagnostics, ctx.console, prefix=f"[{name}] ")
    if not result.success:
        raise ToolFailure(
            "Annotation processing failed. See above for errors.",
            module=name,
            step=STEP,
            details={"errors": errors},
        )
    ctx.console.info(f"[{name}] Annotation processing successful.")
