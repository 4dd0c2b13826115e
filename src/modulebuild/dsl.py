# dsl.py
from __future__ import annotations

from typing import Dict, List, Optional

from .config import BuildConfig
from .model import (
    AnnotationSettings,
    CodeServerSettings,
    CompileSettings,
    DocumentSettings,
    Module,
    PackageSettings,
    StepDefaults,
    TestCompileSettings,
    TranslateSettings,
)


# ---------------------------------------------------------------------
# Step helpers
# ---------------------------------------------------------------------

def compile_step(*, enabled: bool = True, **settings) -> CompileSettings:
    """compile_step(source="21", encoding="UTF-8")"""
    return CompileSettings(enabled=enabled, **settings)


def translate_step(*modules: str, enabled: bool = True, **settings) -> TranslateSettings:
    """translate_step("com.example.App", war_directory="war")"""
    if modules:
        settings["modules"] = list(modules) + list(settings.get("modules") or [])
    return TranslateSettings(enabled=enabled, **settings)


def document_step(service_class: Optional[str] = None, *, enabled: bool = True, **settings) -> DocumentSettings:
    """document_step("com.example.ServiceImpl", output_file="Service.wsdl")"""
    return DocumentSettings(enabled=enabled, service_class=service_class, **settings)


def package_step(
    source_directory: Optional[str] = None,
    archive_file: Optional[str] = None,
    *,
    enabled: bool = True,
    **settings,
) -> PackageSettings:
    """package_step("war", "target/app.war", lib_entries=[...])"""
    return PackageSettings(
        enabled=enabled,
        source_directory=source_directory,
        archive_file=archive_file,
        **settings,
    )


def annotation_step(*processors: str, enabled: bool = True, **settings) -> AnnotationSettings:
    """annotation_step("com.example.Processor", processor_path_entries=["lib/proc.jar"])"""
    if processors:
        settings["processors"] = list(processors) + list(settings.get("processors") or [])
    return AnnotationSettings(enabled=enabled, **settings)


def test_compile_step(
    *source_directories: str,
    output: Optional[str] = None,
    enabled: bool = True,
    **settings,
) -> TestCompileSettings:
    """test_compile_step("core/test", output="core/target/test-classes")"""
    if source_directories:
        settings["source_directories"] = list(source_directories)
    return TestCompileSettings(enabled=enabled, output_directory=output, **settings)


test_compile_step.__test__ = False  # not a pytest test function


def code_server_step(*modules: str, enabled: bool = True, **settings) -> CodeServerSettings:
    """code_server_step(port="9876", launcher_dir="war")"""
    if modules:
        settings["modules"] = list(modules) + list(settings.get("modules") or [])
    return CodeServerSettings(enabled=enabled, **settings)


# ---------------------------------------------------------------------
# Module / project helpers
# ---------------------------------------------------------------------

def module(
    name: Optional[str],
    *,
    sources: Optional[List[str]] = None,
    output: Optional[str] = None,
    classpath: Optional[List[str]] = None,
    compile: Optional[CompileSettings] = None,
    translate: Optional[TranslateSettings] = None,
    document: Optional[DocumentSettings] = None,
    package: Optional[PackageSettings] = None,
    annotations: Optional[AnnotationSettings] = None,
    test_compile: Optional[TestCompileSettings] = None,
    code_server: Optional[CodeServerSettings] = None,
) -> Module:
    return Module(
        name=name,
        source_directories=list(sources or []),
        output_directory=output,
        classpath_entries=list(classpath or []),
        compile=compile,
        translate=translate,
        document=document,
        package=package,
        annotations=annotations,
        test_compile=test_compile,
        code_server=code_server,
    )


def defaults(
    *,
    compile: Optional[CompileSettings] = None,
    translate: Optional[TranslateSettings] = None,
    document: Optional[DocumentSettings] = None,
    package: Optional[PackageSettings] = None,
    annotations: Optional[AnnotationSettings] = None,
    test_compile: Optional[TestCompileSettings] = None,
    code_server: Optional[CodeServerSettings] = None,
) -> StepDefaults:
    """Global step settings; module settings override them field by field."""
    return StepDefaults(
        compile=compile,
        translate=translate,
        document=document,
        package=package,
        annotations=annotations,
        test_compile=test_compile,
        code_server=code_server,
    )


def project(
    *modules: Module,
    defaults: Optional[StepDefaults] = None,
    dependency_classpath: Optional[List[str]] = None,
    **options,
) -> BuildConfig:
    """
    Build definition helper. In a build file:

        from modulebuild.dsl import project, module, compile_step

        def build():
            return project(
                module("core", sources=["core/src"], output="core/classes",
                       compile=compile_step()),
                default_source="21",
            )
    """
    return BuildConfig(
        modules=list(modules),
        defaults=defaults or StepDefaults(),
        dependency_classpath=list(dependency_classpath or []),
        **options,
    )


def system_properties(**props: Optional[str]) -> Dict[str, Optional[str]]:
    """Keyword form for property maps whose keys are valid identifiers."""
    return {k: (None if v is None else str(v)) for k, v in props.items()}
