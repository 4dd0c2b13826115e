# steps/document.py
from __future__ import annotations

from typing import List, Tuple

from ..classpath import ClassPath
from ..cmdline import CommandLineBuilder
from ..errors import ToolFailure
from ..model import DocumentSettings, ResolvedModule
from .context import StepContext


STEP = "document"


def build_arguments(settings: DocumentSettings) -> List[str]:
    args: List[str] = []

    if settings.generate_wsdl:
        args.append("-wsdl")
    if settings.create_xsd_imports:
        args.append("-createxsdimports")
    if settings.output_directory:
        args += ["-d", settings.output_directory]
    if settings.output_file:
        args += ["-o", settings.output_file]
    if settings.arguments:
        args.extend(settings.arguments)

    # service class must be last
    if settings.service_class:
        args.append(settings.service_class)
    return args


def build_command(
    module: ResolvedModule,
    settings: DocumentSettings,
    module_classpath: ClassPath,
    java: str = "java",
) -> Tuple[str, ...]:
    cp = module_classpath.append(ClassPath.of(settings.classpath_entries))
    builder = (
        CommandLineBuilder.for_main_class(settings.effective_main_class)
        .with_classpath(cp)
        .with_arguments(build_arguments(settings))
    )
    return (java, *builder.build())


def run_step(ctx: StepContext, module: ResolvedModule, settings: DocumentSettings) -> None:
    name = module.name
    if not settings.service_class:
        ctx.console.warn(f"[{name}] No service class specified, skipping document.")
        return

    command = build_command(module, settings, ctx.module_classpath, java=ctx.java)
    ctx.console.debug(f"[{name}] document command: {list(command)}")

    exit_code = ctx.executor.run(command)
    if exit_code != 0:
        raise ToolFailure(
            f"Service description generation failed with exit code {exit_code}",
            module=name,
            step=STEP,
            exit_code=exit_code,
        )
    ctx.console.info(f"[{name}] Service description generation successful.")
