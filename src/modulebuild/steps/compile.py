# steps/compile.py
from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Sequence

from ..classpath import ClassPath
from ..errors import ConfigurationError, ToolFailure
from ..model import CompileSettings, ResolvedModule, StepKind
from ..sources import collect_sources, validate_directories
from ..compilers import route_diagnostics
from .annotations import generated_sources_dir
from .context import StepContext


STEP = "compile"


def build_options(
    module: ResolvedModule,
    settings: CompileSettings,
    sourcepath: Sequence[str],
    module_classpath: ClassPath,
    *,
    default_source: Optional[str] = None,
    default_target: Optional[str] = None,
    accepts_properties_file: bool = True,
    console=None,
) -> List[str]:
    """
    Compiler options for one module. Source files are not included; they
    are handed to the backend separately.
    """
    options: List[str] = []

    src = settings.source or default_source
    tgt = settings.target or default_target
    if src:
        options += ["-source", src]
    if tgt:
        options += ["-target", tgt]

    # output goes to this module's own directory only
    if module.output_directory:
        options += ["-d", module.output_directory]

    cp = module_classpath.append(ClassPath.of(settings.classpath_entries))
    options += cp.args("-classpath")

    # other modules' sources, so circular references resolve before they are compiled
    options += ClassPath.of(list(sourcepath)).args("-sourcepath")

    if settings.properties_file:
        props = Path(settings.properties_file)
        if not props.is_file():
            if console is not None:
                console.warn(f"Compiler properties file does not exist: {props}")
        elif not accepts_properties_file:
            if console is not None:
                console.warn(f"Compiler properties file ignored, backend does not support it: {props}")
        else:
            options += ["-properties", str(props.absolute())]

    if settings.encoding:
        options += ["-encoding", settings.encoding]
    if settings.nowarn:
        options.append("-nowarn")
    if not settings.debug:
        options.append("-g:none")
    if settings.compiler_arguments:
        options.extend(settings.compiler_arguments)

    return options


def run_step(ctx: StepContext, module: ResolvedModule, settings: CompileSettings) -> None:
    """Compile the module's own sources into its output directory."""
    name = module.name
    if ctx.backend is None:
        raise ConfigurationError("No compiler backend resolved", module=name, step=STEP)
    if not module.output_directory:
        raise ConfigurationError(
            "Compile step requires an output_directory", module=name, step=STEP
        )

    source_dirs = validate_directories(module.source_directories, console=ctx.console)
    if module.is_enabled(StepKind.ANNOTATIONS):
        generated = generated_sources_dir(module, module.settings_for(StepKind.ANNOTATIONS))
        generated = ctx.config.resolve_path(str(generated)) if generated is not None else None
        if generated is not None and generated.is_dir():
            source_dirs.append(str(generated))
    source_files = collect_sources(source_dirs)
    if not source_files:
        ctx.console.info(f"[{name}] No Java source files found, skipping compile.")
        return

    out = Path(module.output_directory)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ToolFailure(
            f"Failed to create output directory: {out}", module=name, step=STEP
        ) from e

    options = build_options(
        module,
        settings,
        ctx.sourcepath,
        ctx.module_classpath,
        default_source=ctx.config.default_source,
        default_target=ctx.config.default_target,
        accepts_properties_file=ctx.backend.accepts_properties_file,
        console=ctx.console,
    )
    ctx.console.info(
        f"[{name}] Compiling {len(source_files)} source file(s) with {ctx.backend.name} -> {out}"
    )
    ctx.console.debug(f"[{name}] {ctx.backend.name} options: {options}")

    result = ctx.backend.compile(options, source_files)
    # drain every diagnostic before deciding
    errors = route_diagnostics(result.diagnostics, ctx.console, prefix=f"[{name}] ")

    if not result.success:
        raise ToolFailure(
            f"Compilation failed with {ctx.backend.name}. See above for errors.",
            module=name,
            step=STEP,
            details={"errors": errors},
        )
    ctx.console.info(f"[{name}] Compilation successful.")
