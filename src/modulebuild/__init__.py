from .classpath import ClassPath
from .cmdline import CommandLineBuilder
from .config import BuildConfig, load_build
from .dsl import (
    annotation_step,
    code_server_step,
    compile_step,
    defaults,
    document_step,
    module,
    package_step,
    project,
    test_compile_step,
    translate_step,
)
from .model import (
    AnnotationSettings,
    CodeServerSettings,
    CompileSettings,
    DocumentSettings,
    Module,
    PackageSettings,
    StepDefaults,
    StepKind,
    TestCompileSettings,
    TranslateSettings,
)
from .runner import run_build

__all__ = [
    "ClassPath", "CommandLineBuilder", "BuildConfig", "load_build",
    "annotation_step", "code_server_step", "compile_step", "defaults", "document_step", "module",
    "package_step", "project", "test_compile_step", "translate_step",
    "AnnotationSettings", "CodeServerSettings", "CompileSettings", "DocumentSettings", "Module",
    "PackageSettings", "StepDefaults", "StepKind", "TestCompileSettings", "TranslateSettings", "run_build",
]
