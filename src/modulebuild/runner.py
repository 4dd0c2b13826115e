# runner.py
from __future__ import annotations

from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from .classpath import ClassPath
from .cmdline import CommandLineBuilder
from .compilers import CompilerBackend, resolve_backend
from .config import BuildConfig, java_executable
from .errors import BuildError, ToolFailure
from .model import (
    BuildResult,
    ModuleResult,
    ModuleState,
    PIPELINE_ORDER,
    ResolvedModule,
    StepKind,
    StepOutcome,
)
from .process import ProcessExecutor
from .resolver import resolve_modules
from .sources import collect_shared_sourcepath
from .steps import STEP_RUNNERS, StepContext
from .ui.console import Console


# ----------------------------------------------------------------------
# Classpath composition
# ----------------------------------------------------------------------

def dependency_classpath(config: BuildConfig, console: Optional[Console] = None) -> ClassPath:
    """The externally supplied dependency classpath, existing entries only."""
    entries: List[str] = []
    for e in config.dependency_classpath:
        p = config.resolve_path(e)
        if p is not None and p.exists():
            entries.append(str(p))
            if console is not None:
                console.debug(f"Dependency classpath entry: {p}")
        elif console is not None:
            console.warn(f"Dependency classpath entry does not exist: {e}")
    return ClassPath.of(entries)


def module_classpath(
    modules: Sequence[ResolvedModule],
    dependencies: ClassPath,
    current: ResolvedModule,
) -> ClassPath:
    """
    All modules' output directories (declaration order), then the dependency
    classpath, then the module's own entries.

    Built from declared paths only; whether an output directory has been
    populated yet plays no part.
    """
    outputs = ClassPath.of([m.output_directory for m in modules])
    return outputs.append(dependencies).append(ClassPath.of(list(current.classpath_entries)))


# ----------------------------------------------------------------------
# Execution
# ----------------------------------------------------------------------

def _run_module(
    module: ResolvedModule,
    ctx: StepContext,
    result: ModuleResult,
    kinds: Tuple[StepKind, ...] = PIPELINE_ORDER,
) -> None:
    """Run the module's enabled steps among `kinds`, in order. Raises on a fatal failure."""
    console = ctx.console
    steps = list(module.steps(kinds))
    if not steps:
        if kinds == PIPELINE_ORDER:
            console.warn(f"Module '{module.name}' has no build steps enabled, skipping.")
        else:
            console.debug(f"Module '{module.name}' has no {_describe(kinds)} enabled, skipping.")
        result.state = ModuleState.SKIPPED
        return

    result.state = ModuleState.RUNNING
    for kind, settings in steps:
        console.print_step(module.name, kind.value)
        try:
            STEP_RUNNERS[kind](ctx, module, settings)
        except BuildError as e:
            if e.module is None:
                e.module = module.name
            if e.step is None:
                e.step = kind.value
            if kind.is_fatal(settings, e):
                result.steps.append((kind, StepOutcome.FAILED_FATAL))
                console.print_step_result(module.name, kind.value, StepOutcome.FAILED_FATAL.value)
                raise
            result.steps.append((kind, StepOutcome.FAILED_NONFATAL))
            console.warn(f"[{module.name}] {kind.value} failed (fail_on_error=false): {e.message}")
            continue
        result.steps.append((kind, StepOutcome.SUCCESS))
        console.print_step_result(module.name, kind.value, StepOutcome.SUCCESS.value)

    result.state = ModuleState.COMPLETED


def _describe(kinds: Tuple[StepKind, ...]) -> str:
    return "/".join(k.value for k in kinds)


def run_build(
    config: BuildConfig,
    console: Console,
    *,
    backend: Optional[CompilerBackend] = None,
    executor: Optional[ProcessExecutor] = None,
    kinds: Tuple[StepKind, ...] = PIPELINE_ORDER,
) -> BuildResult:
    """
    Build every resolved module, one at a time, in declaration order.

    `kinds` selects the steps to run; by default the build pipeline. Other
    goals (annotation processing, test compilation, the code server) are
    run by passing their kind alone.

    A fatal failure stops the run: the failing module is ABORTED, the ones
    after it stay PENDING, and the error is kept on the result. Files already
    written are left in place.
    """
    result = BuildResult()
    if config.skip:
        console.info("Skipping module build (skip=true)")
        return result

    try:
        resolved = resolve_modules(config, console)
    except BuildError as e:
        result.error = e
        console.print_error("Invalid build configuration", str(e))
        return result

    if not resolved:
        console.warn("No build modules configured, skipping.")
        return result

    if kinds != PIPELINE_ORDER and not any(m.is_enabled(k) for m in resolved for k in kinds):
        console.warn(f"No modules with {_describe(kinds)} enabled, skipping.")
        return result

    result.modules = [ModuleResult(name=m.name) for m in resolved]

    executor = executor or ProcessExecutor(console)
    try:
        needs_compiler = any(m.is_enabled(k) for m in resolved for k in kinds if k.uses_compiler)
        if backend is None and needs_compiler:
            backend = resolve_backend(config.compiler, config)
    except BuildError as e:
        result.error = e
        console.print_error("Compiler backend unavailable", str(e))
        return result

    sourcepath = collect_shared_sourcepath(resolved, console)
    dependencies = dependency_classpath(config, console)

    for module, module_result in zip(resolved, result.modules):
        console.print_module_start(module.name)
        ctx = StepContext(
            config=config,
            console=console,
            executor=executor,
            module_classpath=module_classpath(resolved, dependencies, module),
            sourcepath=sourcepath,
            backend=backend,
        )
        try:
            _run_module(module, ctx, module_result, kinds)
        except BuildError as e:
            module_result.state = ModuleState.ABORTED
            result.error = e
            console.print_error(f"Module '{module.name}' failed", str(e))
            break

    if not result.failed:
        console.info("Module build completed.")
    return result


# ----------------------------------------------------------------------
# Classpath file
# ----------------------------------------------------------------------

def write_classpath_file(config: BuildConfig, console: Console, output: str | Path) -> Path:
    """
    Write each module's classpath and the shared sourcepath to a text file,
    for IDEs and scripts that need the same view the build uses.
    """
    resolved = resolve_modules(config, console)
    dependencies = dependency_classpath(config, console)
    sourcepath = ClassPath.of(collect_shared_sourcepath(resolved))

    lines = [f"sourcepath={sourcepath}"]
    for m in resolved:
        lines.append(f"{m.name}={module_classpath(resolved, dependencies, m)}")

    out = Path(output)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text("\n".join(lines) + "\n", encoding="utf-8")
    console.info(f"Classpath written to {out}")
    return out


# ----------------------------------------------------------------------
# Arbitrary java process
# ----------------------------------------------------------------------

def run_java_process(
    config: BuildConfig,
    console: Console,
    main_class: str,
    *,
    classpath_entries: Optional[Sequence[str]] = None,
    include_dependency_classpath: bool = True,
    jvm_arguments: Optional[Sequence[str]] = None,
    system_properties: Optional[Mapping[str, Optional[str]]] = None,
    arguments: Optional[Sequence[str]] = None,
    working_directory: Optional[str] = None,
    fail_on_error: bool = True,
    executor: Optional[ProcessExecutor] = None,
) -> int:
    """Fork a java process for `main_class` with the build's classpath."""
    cp = dependency_classpath(config, console) if include_dependency_classpath else ClassPath.empty()
    cp = cp.append(ClassPath.of([str(config.resolve_path(e)) for e in classpath_entries or [] if e]))

    command = (
        java_executable(config.java_home),
        *CommandLineBuilder.for_main_class(main_class)
        .with_jvm_arguments(list(jvm_arguments or []))
        .with_system_properties(system_properties)
        .with_classpath(cp)
        .with_arguments(list(arguments or []))
        .build(),
    )
    cwd = config.resolve_path(working_directory) if working_directory else None
    console.info(f"Running {main_class}")
    console.debug(f"Command: {list(command)}")

    exit_code = (executor or ProcessExecutor(console)).run(command, cwd)
    if exit_code != 0:
        if fail_on_error:
            raise ToolFailure(
                f"Process {main_class} exited with code {exit_code}",
                step="exec",
                exit_code=exit_code,
            )
        console.warn(f"Process {main_class} exited with code {exit_code}")
    return exit_code
