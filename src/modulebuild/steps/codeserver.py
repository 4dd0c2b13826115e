# steps/codeserver.py
from __future__ import annotations

from typing import List, Optional, Sequence, Tuple

from ..classpath import ClassPath
from ..cmdline import CommandLineBuilder
from ..errors import ToolFailure
from ..model import CodeServerSettings, ResolvedModule, StepKind
from .context import StepContext


STEP = "code_server"


def build_arguments(
    settings: CodeServerSettings,
    source_directories: Sequence[str],
    modules: Sequence[str],
) -> List[str]:
    """Code server arguments: options, one -src per source directory, modules last."""
    args: List[str] = []

    if settings.work_dir:
        args += ["-workDir", settings.work_dir]
    if settings.launcher_dir:
        args += ["-launcherDir", settings.launcher_dir]
    if settings.bind_address:
        args += ["-bindAddress", settings.bind_address]
    if settings.port:
        args += ["-port", settings.port]
    if settings.log_level:
        args += ["-logLevel", settings.log_level]
    if settings.arguments:
        args.extend(settings.arguments)

    args.append("-allowMissingSrc")
    for d in source_directories:
        args += ["-src", d]

    args.extend(modules)
    return args


def build_command(
    module: ResolvedModule,
    settings: CodeServerSettings,
    modules: Sequence[str],
    module_classpath: ClassPath,
    java: str = "java",
) -> Tuple[str, ...]:
    cp = (
        module_classpath
        .append(ClassPath.of(settings.classpath_entries))
        .append(ClassPath.of(list(module.source_directories)))
    )
    builder = (
        CommandLineBuilder.for_main_class(settings.effective_main_class)
        .with_jvm_arguments(settings.jvm_arguments or [])
        .with_system_properties(settings.system_properties)
        .with_classpath(cp)
        .with_arguments(build_arguments(settings, module.source_directories, modules))
    )
    return (java, *builder.build())


def served_modules(module: ResolvedModule, settings: CodeServerSettings) -> List[str]:
    if settings.modules:
        return list(settings.modules)
    translate = module.settings_for(StepKind.TRANSLATE)
    modules: Optional[List[str]] = getattr(translate, "modules", None)
    return list(modules or [])


def run_step(ctx: StepContext, module: ResolvedModule, settings: CodeServerSettings) -> None:
    """Run the code server in the foreground until it exits."""
    name = module.name
    modules = served_modules(module, settings)
    if not modules:
        ctx.console.warn(f"[{name}] No translation modules specified, skipping code server.")
        return

    command = build_command(module, settings, modules, ctx.module_classpath, java=ctx.java)
    ctx.console.info(f"[{name}] Starting code server for {', '.join(modules)}")
    ctx.console.debug(f"[{name}] code server command: {list(command)}")

    exit_code = ctx.executor.run(command)
    if exit_code != 0:
        raise ToolFailure(
            f"Code server exited with code {exit_code}",
            module=name,
            step=STEP,
            exit_code=exit_code,
        )
    ctx.console.info(f"[{name}] Code server terminated.")
