# steps/translate.py
from __future__ import annotations

from typing import List, Tuple

from ..classpath import ClassPath
from ..cmdline import CommandLineBuilder
from ..errors import ToolFailure
from ..model import ResolvedModule, TranslateSettings
from .context import StepContext


STEP = "translate"


def build_arguments(settings: TranslateSettings) -> List[str]:
    """Translator program arguments; the translation modules come last."""
    args: List[str] = []

    if settings.fail_on_error:
        args.append("-failOnError")
    if settings.method_name_display_mode:
        args += ["-XmethodNameDisplayMode", settings.method_name_display_mode]
    if settings.war_directory:
        args += ["-war", settings.war_directory]
    if settings.strict:
        args.append("-strict")

    args += ["-style", settings.effective_style]
    args += ["-logLevel", settings.effective_log_level]

    if settings.local_workers:
        args += ["-localWorkers", settings.local_workers]
    if settings.optimize:
        args += ["-optimize", settings.optimize]
    if settings.work_dir:
        args += ["-workDir", settings.work_dir]
    if settings.extra_dir:
        args += ["-extra", settings.extra_dir]
    if settings.save_source:
        args.append("-saveSource")

    args.extend(settings.modules or [])
    return args


def build_command(
    module: ResolvedModule,
    settings: TranslateSettings,
    module_classpath: ClassPath,
    java: str = "java",
) -> Tuple[str, ...]:
    # the translator reads source, so the module's source dirs go on its classpath
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
        .with_arguments(build_arguments(settings))
    )
    return (java, *builder.build())


def run_step(ctx: StepContext, module: ResolvedModule, settings: TranslateSettings) -> None:
    name = module.name
    if not settings.modules:
        ctx.console.warn(f"[{name}] No translation modules specified, skipping translate.")
        return

    command = build_command(module, settings, ctx.module_classpath, java=ctx.java)
    ctx.console.debug(f"[{name}] translate command: {list(command)}")

    exit_code = ctx.executor.run(command)
    if exit_code != 0:
        raise ToolFailure(
            f"Translation exited with code {exit_code}",
            module=name,
            step=STEP,
            exit_code=exit_code,
        )
    ctx.console.info(f"[{name}] Translation successful.")
