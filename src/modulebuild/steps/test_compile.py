# steps/test_compile.py
from __future__ import annotations

from typing import List, Optional

from ..classpath import ClassPath
from ..compilers import route_diagnostics
from ..errors import ConfigurationError, ToolFailure
from ..model import ResolvedModule, TestCompileSettings
from ..sources import collect_sources, validate_directories
from .context import StepContext


STEP = "test_compile"


def build_options(
    settings: TestCompileSettings,
    output_dir: str,
    module_classpath: ClassPath,
    *,
    default_source: Optional[str] = None,
    default_target: Optional[str] = None,
) -> List[str]:
    options: List[str] = []

    src = settings.source or default_source
    tgt = settings.target or default_target
    if src:
        options += ["-source", src]
    if tgt:
        options += ["-target", tgt]

    options += ["-d", output_dir]

    # the module's own output is already on its classpath
    cp = module_classpath.append(ClassPath.of(settings.classpath_entries))
    options += cp.args("-classpath")

    if not settings.show_warnings:
        options.append("-nowarn")
    if settings.show_deprecation:
        options.append("-deprecation")
    if settings.compiler_arguments:
        options.extend(settings.compiler_arguments)

    return options


def run_step(ctx: StepContext, module: ResolvedModule, settings: TestCompileSettings) -> None:
    """Compile the module's test sources against its classpath."""
    name = module.name
    if ctx.backend is None:
        raise ConfigurationError("No compiler backend resolved", module=name, step=STEP)
    if not settings.output_directory:
        raise ConfigurationError(
            "Test compilation requires an output_directory", module=name, step=STEP
        )

    test_dirs = validate_directories(
        settings.source_directories or [], ctx.config.base_dir, console=ctx.console,
    )
    if not test_dirs:
        ctx.console.info(f"[{name}] No test source directories found, skipping test compilation.")
        return
    source_files = collect_sources(test_dirs)
    if not source_files:
        ctx.console.info(f"[{name}] No test source files found, skipping test compilation.")
        return

    out = ctx.config.resolve_path(settings.output_directory)
    try:
        out.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ToolFailure(
            f"Failed to create test output directory: {out}", module=name, step=STEP
        ) from e

    options = build_options(
        settings,
        str(out),
        ctx.module_classpath,
        default_source=ctx.config.default_source,
        default_target=ctx.config.default_target,
    )
    ctx.console.info(f"[{name}] Compiling {len(source_files)} test source file(s) -> {out}")
    ctx.console.debug(f"[{name}] {ctx.backend.name} options: {options}")

    result = ctx.backend.compile(options, source_files)
    errors = route_diagnostics(result.diagnostics, ctx.console, prefix=f"[{name}] ")
    if not result.success:
        raise ToolFailure(
            f"Test compilation failed with {ctx.backend.name}. See above for errors.",
            module=name,
            step=STEP,
            details={"errors": errors},
        )
    ctx.console.info(f"[{name}] Test compilation successful.")
