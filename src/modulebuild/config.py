# config.py
from __future__ import annotations

import os
import runpy
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import List, Optional

from .errors import ConfigurationError
from .model import Module, StepDefaults


DEFAULT_BUILD_FILE = "modulebuild.py"


@dataclass(frozen=True)
class BuildConfig:
    """
    Everything a build run needs: declared modules (in declaration order),
    global step defaults and the externally supplied dependency classpath.
    """
    modules: List[Module] = field(default_factory=list)
    defaults: StepDefaults = field(default_factory=StepDefaults)
    dependency_classpath: List[str] = field(default_factory=list)

    # fallbacks for modules whose compile settings leave source/target unset
    default_source: Optional[str] = None
    default_target: Optional[str] = None

    compiler: str = "javac"
    compiler_artifacts: List[str] = field(default_factory=list)
    java_home: Optional[str] = None

    skip: bool = False
    base_dir: Optional[str] = None

    def resolve_path(self, path: Optional[str]) -> Optional[Path]:
        """Absolute path for `path`, relative paths taken from base_dir (or cwd)."""
        if path is None or str(path) == "":
            return None
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = Path(self.base_dir or os.getcwd()) / p
        return Path(os.path.abspath(p))

    def with_overrides(self, **changes) -> "BuildConfig":
        # None means "not given on the command line"
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


# ----------------------------------------------------------------------
# Build file loading (python file, like a workflow file)
# ----------------------------------------------------------------------

def load_build(path: str | Path) -> BuildConfig:
    """
    Load a build definition from a python file path.

    The file must define exactly one of:
      - build() -> BuildConfig
      - BUILD = BuildConfig(...)

    Relative paths inside the configuration resolve against the build file's
    directory unless the file sets base_dir itself.
    """
    build_path = Path(path).expanduser().resolve()
    if not build_path.exists():
        raise FileNotFoundError(f"Build file not found: {build_path}")
    if build_path.suffix != ".py":
        raise ValueError(f"Build file must be a .py file, got: {build_path.name}")

    module_name = f"modulebuild_file_{build_path.stem}"
    globals_dict = runpy.run_path(str(build_path), run_name=module_name)

    has_fn = "build" in globals_dict and callable(globals_dict["build"])
    has_const = "BUILD" in globals_dict
    if has_fn and has_const:
        raise ConfigurationError(
            "Build file defines both build() and BUILD; keep only one",
            details={"file": str(build_path)},
        )

    config = None
    if has_fn:
        config = globals_dict["build"]()
    elif has_const:
        config = globals_dict["BUILD"]

    if not isinstance(config, BuildConfig):
        raise TypeError(
            "Build file must return/define a BuildConfig. "
            "Define build() -> BuildConfig or BUILD = BuildConfig(...)."
        )

    if config.base_dir is None:
        config = replace(config, base_dir=str(build_path.parent))
    return config


def java_executable(java_home: Optional[str] = None) -> str:
    """Path of the java launcher: java_home, then $JAVA_HOME, then PATH lookup by name."""
    exe = "java.exe" if os.name == "nt" else "java"
    for home in (java_home, os.environ.get("JAVA_HOME")):
        if home:
            candidate = Path(home) / "bin" / exe
            if candidate.exists():
                return str(candidate.absolute())
    return "java"
