# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from modulebuild.compilers import available_backends
from modulebuild.config import DEFAULT_BUILD_FILE, BuildConfig, load_build
from modulebuild.errors import BuildError, ProcessExecutionError
from modulebuild.model import StepKind
from modulebuild.runner import run_build, run_java_process, write_classpath_file
from modulebuild.ui.console import Console


def find_build_files() -> list[Path]:
    """
    Find all build files in the current directory.

    Returns:
        List of Path objects for build files
    """
    build_files = []
    current_dir = Path(".")

    default_build = current_dir / DEFAULT_BUILD_FILE
    if default_build.exists():
        build_files.append(default_build)

    for path in current_dir.glob("*_build.py"):
        if path != default_build:
            build_files.append(path)

    return sorted(build_files)


def discover_build_file(console: Console, build_arg: str | None) -> Path:
    """
    Discover the build file from argument or default.

    Raises:
        SystemExit: If no build file or more than one candidate is found
    """
    if build_arg:
        build_path = Path(build_arg)
        if not build_path.exists() and build_path.suffix != ".py":
            build_path = Path(str(build_path) + ".py")
        if not build_path.exists():
            console.print_error(
                "Build file not found",
                f"Could not find build file: {build_arg}",
                suggestion="Create a build file or specify a different path:\n  modulebuild build --file my_build.py",
            )
            sys.exit(1)
        return build_path

    build_files = find_build_files()

    if len(build_files) == 0:
        console.print_error(
            "No build file found",
            "Could not find any build files.",
            details=[
                "Looked for:",
                f"  {DEFAULT_BUILD_FILE}",
                "  *_build.py",
            ],
            suggestion=f"Create a build file:\n  {DEFAULT_BUILD_FILE}\n\nOr specify one explicitly:\n  modulebuild build --file my_build.py",
        )
        sys.exit(1)

    if len(build_files) > 1:
        file_list = "\n".join(f"  {f}" for f in build_files)
        console.print_error(
            "Multiple build files found",
            "Found multiple build files. Please specify which one to use:",
            details=[file_list],
            suggestion=f"Specify a build file explicitly:\n  modulebuild build --file {DEFAULT_BUILD_FILE}",
        )
        sys.exit(1)

    return build_files[0]


def _load(ctx, build_file: str | None, **overrides) -> tuple[Path, BuildConfig]:
    console: Console = ctx.obj["console"]
    path = discover_build_file(console, build_file)
    try:
        config = load_build(path)
    except Exception as e:
        console.print_error(
            "Failed to load build file",
            f"Could not load build definition from {path}",
            details=[str(e)],
        )
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)
    return path, config.with_overrides(**overrides)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show commands, stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """modulebuild: multi-module Java build orchestrator."""
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["console"] = Console(debug=debug)


def build_options(func):
    """Options shared by every command that runs build steps."""
    func = click.option("--skip/--no-skip", envvar="MODULEBUILD_SKIP", default=None, help="Skip the whole build")(func)
    func = click.option("--classpath", "extra_classpath", multiple=True, help="Extra dependency classpath entry (repeatable)")(func)
    func = click.option("--java-home", envvar="JAVA_HOME", default=None, help="JDK used for javac and forked tools")(func)
    func = click.option("--compiler", default=None, help="Compiler backend (overrides the build file)")(func)
    func = click.option("--file", "build_file", default=None, help=f"Build file path (defaults to {DEFAULT_BUILD_FILE} if present)")(func)
    return func


def _run_goal(ctx, build_file, compiler, java_home, extra_classpath, skip, kind: StepKind | None = None) -> None:
    console: Console = ctx.obj["console"]
    path, config = _load(ctx, build_file, compiler=compiler, java_home=java_home, skip=skip)
    if extra_classpath:
        config = config.with_overrides(
            dependency_classpath=list(config.dependency_classpath) + list(extra_classpath)
        )

    try:
        console.print_build_started(
            build_file=path.name,
            module_count=len(config.modules),
            compiler=config.compiler,
            goal=kind.value if kind is not None else None,
        )
        if kind is None:
            result = run_build(config, console)
        else:
            result = run_build(config, console, kinds=(kind,))
        console.print_results(result)
    except KeyboardInterrupt:
        console.info("\nInterrupted by user")
        sys.exit(130)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)

    if isinstance(result.error, ProcessExecutionError) and result.error.interrupted:
        sys.exit(130)
    if result.failed:
        sys.exit(1)


@cli.command()
@build_options
@click.pass_context
def build(ctx, build_file, compiler, java_home, extra_classpath, skip):
    """Build all modules of a build file."""
    _run_goal(ctx, build_file, compiler, java_home, extra_classpath, skip)


@cli.command(name="annotations")
@build_options
@click.pass_context
def process_annotations(ctx, build_file, compiler, java_home, extra_classpath, skip):
    """Run annotation processors into each module's generated sources directory."""
    _run_goal(ctx, build_file, compiler, java_home, extra_classpath, skip, StepKind.ANNOTATIONS)


@cli.command(name="test-compile")
@build_options
@click.pass_context
def compile_tests(ctx, build_file, compiler, java_home, extra_classpath, skip):
    """Compile each module's test sources."""
    _run_goal(ctx, build_file, compiler, java_home, extra_classpath, skip, StepKind.TEST_COMPILE)


@cli.command()
@build_options
@click.pass_context
def codeserver(ctx, build_file, compiler, java_home, extra_classpath, skip):
    """Run the development code server for each module that enables it."""
    _run_goal(ctx, build_file, compiler, java_home, extra_classpath, skip, StepKind.CODE_SERVER)


@cli.command()
@click.option("--file", "build_file", default=None, help=f"Build file path (defaults to {DEFAULT_BUILD_FILE} if present)")
@click.option("--output", "-o", default="target/classpath.txt", show_default=True, help="Where to write the classpath file")
@click.pass_context
def classpath(ctx, build_file, output):
    """Write every module's classpath and the shared sourcepath to a file."""
    console: Console = ctx.obj["console"]
    _path, config = _load(ctx, build_file)
    try:
        write_classpath_file(config, console, output)
    except BuildError as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command(name="exec", context_settings={"ignore_unknown_options": True})
@click.argument("main_class")
@click.argument("arguments", nargs=-1, type=click.UNPROCESSED)
@click.option("--file", "build_file", default=None, help=f"Build file path (defaults to {DEFAULT_BUILD_FILE} if present)")
@click.option("--cp", "classpath_entries", multiple=True, help="Extra classpath entry (repeatable)")
@click.option("--jvm-arg", "jvm_arguments", multiple=True, help="JVM argument (repeatable)")
@click.option("-D", "properties", multiple=True, help="System property key[=value] (repeatable)")
@click.option("--cwd", "working_directory", default=None, help="Working directory of the process")
@click.option("--project-classpath/--no-project-classpath", default=True, show_default=True,
              help="Put the build's dependency classpath on the process classpath")
@click.option("--fail-on-error/--no-fail-on-error", default=True, show_default=True)
@click.pass_context
def exec_(ctx, main_class, arguments, build_file, classpath_entries, jvm_arguments, properties,
          working_directory, project_classpath, fail_on_error):
    """Run MAIN_CLASS as a forked java process with the build's classpath."""
    console: Console = ctx.obj["console"]
    _path, config = _load(ctx, build_file)

    props = {}
    for p in properties:
        key, sep, value = p.partition("=")
        props[key] = value if sep else None

    try:
        run_java_process(
            config,
            console,
            main_class,
            classpath_entries=list(classpath_entries),
            include_dependency_classpath=project_classpath,
            jvm_arguments=list(jvm_arguments),
            system_properties=props,
            arguments=list(arguments),
            working_directory=working_directory,
            fail_on_error=fail_on_error,
        )
    except ProcessExecutionError as e:
        console.print_exception(e)
        sys.exit(130 if e.interrupted else 1)
    except BuildError as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
def backends():
    """List the available compiler backends."""
    for name in available_backends():
        click.echo(name)


def main() -> None:
    cli(obj={})


if __name__ == "__main__":
    main()
