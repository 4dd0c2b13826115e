# model.py
from __future__ import annotations

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple, Type, TypeVar

from .errors import BuildError, ConfigurationError


def _plain(default: bool):
    """A boolean taken from the override as-is; never inherited from defaults."""
    return field(default=default, metadata={"inherit": False})


S = TypeVar("S", bound="StepSettings")


@dataclass(frozen=True)
class StepSettings:
    """
    Base for the per-step settings records.

    Every field is either a "layered" field (None means "unset", so the
    global default applies) or a plain boolean declared with `_plain(...)`,
    which is always taken from the override.
    """
    enabled: bool = _plain(False)

    @classmethod
    def merge(cls: Type[S], defaults: Optional[S], override: Optional[S]) -> Optional[S]:
        return merge_settings(defaults, override)


def merge_settings(defaults: Optional[S], override: Optional[S]) -> Optional[S]:
    """
    Layered override:
      - merge(None, None) -> None, merge(None, x) -> x, merge(x, None) -> x
      - plain booleans (incl. `enabled`) come from override unconditionally
      - every other field: override's value if not None, else defaults'
    """
    if defaults is None:
        return override
    if override is None:
        return defaults
    if type(defaults) is not type(override):
        raise TypeError(
            f"Cannot merge {type(defaults).__name__} defaults with {type(override).__name__} override"
        )

    values = {}
    for f in dataclasses.fields(override):
        ov = getattr(override, f.name)
        if f.metadata.get("inherit", True) is False:
            values[f.name] = ov
        else:
            values[f.name] = ov if ov is not None else getattr(defaults, f.name)
    return type(override)(**values)


# ---------------------------------------------------------------------
# Step settings
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class CompileSettings(StepSettings):
    """Source-to-bytecode compilation (javac / ecj)."""
    source: Optional[str] = None
    target: Optional[str] = None
    properties_file: Optional[str] = None   # ecj only
    encoding: Optional[str] = None
    nowarn: bool = _plain(True)
    debug: bool = _plain(True)
    compiler_arguments: Optional[List[str]] = None
    classpath_entries: Optional[List[str]] = None


DEFAULT_TRANSLATE_MAIN_CLASS = "com.google.gwt.dev.Compiler"
DEFAULT_TRANSLATE_STYLE = "OBF"
DEFAULT_TRANSLATE_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class TranslateSettings(StepSettings):
    """Source-to-JavaScript translation, run as a forked java process."""
    modules: Optional[List[str]] = None
    war_directory: Optional[str] = None
    style: Optional[str] = None
    log_level: Optional[str] = None
    local_workers: Optional[str] = None
    optimize: Optional[str] = None
    work_dir: Optional[str] = None
    extra_dir: Optional[str] = None
    save_source: bool = _plain(False)
    strict: bool = _plain(False)
    fail_on_error: bool = _plain(True)
    method_name_display_mode: Optional[str] = None
    classpath_entries: Optional[List[str]] = None
    jvm_arguments: Optional[List[str]] = None
    system_properties: Optional[Dict[str, Optional[str]]] = None
    main_class: Optional[str] = None

    @property
    def effective_style(self) -> str:
        return self.style or DEFAULT_TRANSLATE_STYLE

    @property
    def effective_log_level(self) -> str:
        return self.log_level or DEFAULT_TRANSLATE_LOG_LEVEL

    @property
    def effective_main_class(self) -> str:
        return self.main_class or DEFAULT_TRANSLATE_MAIN_CLASS


DEFAULT_DOCUMENT_MAIN_CLASS = "org.apache.cxf.tools.java2ws.JavaToWS"


@dataclass(frozen=True)
class DocumentSettings(StepSettings):
    """Service class -> WSDL generation, run as a forked java process."""
    service_class: Optional[str] = None
    output_directory: Optional[str] = None
    output_file: Optional[str] = None
    generate_wsdl: bool = _plain(True)
    create_xsd_imports: bool = _plain(False)
    classpath_entries: Optional[List[str]] = None
    arguments: Optional[List[str]] = None
    main_class: Optional[str] = None

    @property
    def effective_main_class(self) -> str:
        return self.main_class or DEFAULT_DOCUMENT_MAIN_CLASS


@dataclass(frozen=True)
class PackageSettings(StepSettings):
    """Web archive packaging."""
    source_directory: Optional[str] = None
    archive_file: Optional[str] = None
    include_classes: bool = _plain(True)
    fail_on_error: bool = _plain(True)
    additional_content_directories: Optional[List[str]] = None
    lib_entries: Optional[List[str]] = None


@dataclass(frozen=True)
class AnnotationSettings(StepSettings):
    """
    Annotation processing only (-proc:only); generated sources go to their
    own directory and are picked up by the module's next compile.
    """
    processors: Optional[List[str]] = None
    processor_path_entries: Optional[List[str]] = None
    generated_sources_directory: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    show_warnings: bool = _plain(False)
    compiler_arguments: Optional[List[str]] = None
    classpath_entries: Optional[List[str]] = None


@dataclass(frozen=True)
class TestCompileSettings(StepSettings):
    """Test sources compiled against the module classpath into their own directory."""
    __test__ = False  # not a pytest test class

    source_directories: Optional[List[str]] = None
    output_directory: Optional[str] = None
    source: Optional[str] = None
    target: Optional[str] = None
    show_warnings: bool = _plain(False)
    show_deprecation: bool = _plain(False)
    compiler_arguments: Optional[List[str]] = None
    classpath_entries: Optional[List[str]] = None


DEFAULT_CODE_SERVER_MAIN_CLASS = "com.google.gwt.dev.codeserver.CodeServer"


@dataclass(frozen=True)
class CodeServerSettings(StepSettings):
    """
    Development-mode translation server, forked per module. Falls back to
    the translate step's modules when `modules` is unset.
    """
    modules: Optional[List[str]] = None
    work_dir: Optional[str] = None
    launcher_dir: Optional[str] = None
    bind_address: Optional[str] = None
    port: Optional[str] = None
    log_level: Optional[str] = None
    arguments: Optional[List[str]] = None
    classpath_entries: Optional[List[str]] = None
    jvm_arguments: Optional[List[str]] = None
    system_properties: Optional[Dict[str, Optional[str]]] = None
    main_class: Optional[str] = None
    fail_on_error: bool = _plain(True)

    @property
    def effective_main_class(self) -> str:
        return self.main_class or DEFAULT_CODE_SERVER_MAIN_CLASS


# ---------------------------------------------------------------------
# Step kinds (fixed pipeline order)
# ---------------------------------------------------------------------

class FailurePolicy(Enum):
    ALWAYS_FATAL = "always_fatal"
    FAIL_ON_ERROR = "fail_on_error"


class StepKind(Enum):
    """
    The value doubles as the attribute name on `Module` and `StepDefaults`.

    COMPILE..PACKAGE form the build pipeline; the others are separate goals
    run on request.
    """
    COMPILE = "compile"
    TRANSLATE = "translate"
    DOCUMENT = "document"
    PACKAGE = "package"
    ANNOTATIONS = "annotations"
    TEST_COMPILE = "test_compile"
    CODE_SERVER = "code_server"

    @property
    def settings_type(self) -> Type[StepSettings]:
        return _SETTINGS_TYPES[self]

    @property
    def policy(self) -> FailurePolicy:
        if self in (StepKind.COMPILE, StepKind.DOCUMENT, StepKind.ANNOTATIONS, StepKind.TEST_COMPILE):
            return FailurePolicy.ALWAYS_FATAL
        return FailurePolicy.FAIL_ON_ERROR

    @property
    def uses_compiler(self) -> bool:
        return self in (StepKind.COMPILE, StepKind.ANNOTATIONS, StepKind.TEST_COMPILE)

    def is_fatal(self, settings: StepSettings, error: BuildError) -> bool:
        """Whether `error` raised by this step aborts the whole run."""
        if isinstance(error, ConfigurationError):
            return True
        if self.policy is FailurePolicy.ALWAYS_FATAL:
            return True
        return bool(getattr(settings, "fail_on_error", True))


_SETTINGS_TYPES: Dict[StepKind, Type[StepSettings]] = {
    StepKind.COMPILE: CompileSettings,
    StepKind.TRANSLATE: TranslateSettings,
    StepKind.DOCUMENT: DocumentSettings,
    StepKind.PACKAGE: PackageSettings,
    StepKind.ANNOTATIONS: AnnotationSettings,
    StepKind.TEST_COMPILE: TestCompileSettings,
    StepKind.CODE_SERVER: CodeServerSettings,
}

PIPELINE_ORDER: Tuple[StepKind, ...] = (
    StepKind.COMPILE, StepKind.TRANSLATE, StepKind.DOCUMENT, StepKind.PACKAGE,
)


# ---------------------------------------------------------------------
# Modules
# ---------------------------------------------------------------------

@dataclass(frozen=True)
class StepDefaults:
    """Global defaults, merged under every module's own step settings."""
    compile: Optional[CompileSettings] = None
    translate: Optional[TranslateSettings] = None
    document: Optional[DocumentSettings] = None
    package: Optional[PackageSettings] = None
    annotations: Optional[AnnotationSettings] = None
    test_compile: Optional[TestCompileSettings] = None
    code_server: Optional[CodeServerSettings] = None

    def get(self, kind: StepKind) -> Optional[StepSettings]:
        return getattr(self, kind.value)


@dataclass(frozen=True)
class Module:
    """
    A build module: sources, an output directory, extra classpath entries
    and one optional settings record per step kind.
    """
    name: Optional[str] = None
    source_directories: List[str] = field(default_factory=list)
    output_directory: Optional[str] = None
    classpath_entries: List[str] = field(default_factory=list)

    compile: Optional[CompileSettings] = None
    translate: Optional[TranslateSettings] = None
    document: Optional[DocumentSettings] = None
    package: Optional[PackageSettings] = None
    annotations: Optional[AnnotationSettings] = None
    test_compile: Optional[TestCompileSettings] = None
    code_server: Optional[CodeServerSettings] = None

    @property
    def display_name(self) -> str:
        if self.name:
            return self.name
        if self.output_directory:
            return Path(self.output_directory).name
        return "unnamed"

    def settings(self, kind: StepKind) -> Optional[StepSettings]:
        return getattr(self, kind.value)

    def is_enabled(self, kind: StepKind) -> bool:
        s = self.settings(kind)
        return s is not None and s.enabled


@dataclass(frozen=True)
class ResolvedModule:
    """A module after path resolution and settings merge; read-only for the run."""
    module: Module
    source_directories: Tuple[str, ...]
    output_directory: Optional[str]
    classpath_entries: Tuple[str, ...]
    settings: Dict[StepKind, Optional[StepSettings]]

    @property
    def name(self) -> str:
        return self.module.display_name

    def settings_for(self, kind: StepKind) -> Optional[StepSettings]:
        return self.settings.get(kind)

    def is_enabled(self, kind: StepKind) -> bool:
        s = self.settings.get(kind)
        return s is not None and s.enabled

    def steps(self, kinds: Tuple[StepKind, ...] = PIPELINE_ORDER) -> Iterator[Tuple[StepKind, StepSettings]]:
        """Enabled steps among `kinds`, in the given order."""
        for kind in kinds:
            s = self.settings.get(kind)
            if s is not None and s.enabled:
                yield kind, s


# ---------------------------------------------------------------------
# Run state
# ---------------------------------------------------------------------

class ModuleState(Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"
    SKIPPED = "skipped"


class StepOutcome(Enum):
    SUCCESS = "success"
    FAILED_FATAL = "failed"
    FAILED_NONFATAL = "failed (ignored)"


@dataclass
class ModuleResult:
    name: str
    state: ModuleState = ModuleState.PENDING
    steps: List[Tuple[StepKind, StepOutcome]] = field(default_factory=list)

    def outcome(self, kind: StepKind) -> Optional[StepOutcome]:
        for k, o in self.steps:
            if k is kind:
                return o
        return None


@dataclass
class BuildResult:
    """One ModuleResult per declared module, in declaration order."""
    modules: List[ModuleResult] = field(default_factory=list)
    error: Optional[BuildError] = None

    def module(self, name: str) -> Optional[ModuleResult]:
        for m in self.modules:
            if m.name == name:
                return m
        return None

    @property
    def failed(self) -> bool:
        return self.error is not None or any(
            m.state is ModuleState.ABORTED for m in self.modules
        )
