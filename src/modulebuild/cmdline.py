# cmdline.py
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .classpath import ClassPath
from .errors import ValidationError


def _flatten(values: Tuple) -> List[str]:
    # allow both with_arguments("-a", "-b") and with_arguments(["-a", "-b"])
    out: List[str] = []
    for v in values:
        if v is None:
            continue
        if isinstance(v, (list, tuple)):
            out.extend(str(x) for x in v if x is not None)
        else:
            out.append(str(v))
    return out


class CommandLineBuilder:
    """
    Builds the argument list of a forked Java process.

    The result is always ordered:
      JVM arguments, system properties (-Dkey=value), -cp <classpath>,
      main class, program arguments
    no matter in which order the setters were called.

    Example:
        CommandLineBuilder.for_main_class("com.google.gwt.dev.Compiler") \\
            .with_jvm_arguments("-Xmx1g") \\
            .with_classpath(cp) \\
            .with_arguments("-war", war_dir, "com.example.App") \\
            .build()
    """

    def __init__(self, main_class: str):
        if not main_class:
            raise ValidationError("main class must not be None or empty")
        self._main_class = main_class
        self._jvm_arguments: List[str] = []
        self._system_properties: Dict[str, Optional[str]] = {}
        self._classpath: ClassPath = ClassPath.empty()
        self._arguments: List[str] = []

    @classmethod
    def for_main_class(cls, main_class: str) -> "CommandLineBuilder":
        return cls(main_class)

    @property
    def main_class(self) -> str:
        return self._main_class

    def with_jvm_arguments(self, *jvm_arguments) -> "CommandLineBuilder":
        self._jvm_arguments.extend(_flatten(jvm_arguments))
        return self

    def with_system_properties(self, properties: Optional[Mapping[str, Optional[str]]]) -> "CommandLineBuilder":
        if properties:
            self._system_properties.update(properties)
        return self

    def with_classpath(self, classpath: Optional[ClassPath]) -> "CommandLineBuilder":
        """Replaces any previously configured classpath."""
        self._classpath = classpath if classpath is not None else ClassPath.empty()
        return self

    def with_classpath_entries(self, entries: Optional[Iterable[Optional[str]]]) -> "CommandLineBuilder":
        """Replaces any previously configured classpath."""
        self._classpath = ClassPath.of(list(entries) if entries is not None else None)
        return self

    def with_arguments(self, *arguments) -> "CommandLineBuilder":
        self._arguments.extend(_flatten(arguments))
        return self

    def build(self) -> Tuple[str, ...]:
        command: List[str] = list(self._jvm_arguments)

        for key, value in self._system_properties.items():
            formatted = format_system_property(key, value)
            if formatted:
                command.append(formatted)

        # the java launcher expands @argfiles, so long class paths may go through one
        command.extend(self._classpath.args("-cp", allow_arg_file=True))

        command.append(self._main_class)
        command.extend(self._arguments)
        return tuple(command)


def format_system_property(key: Optional[str], value: Optional[str]) -> Optional[str]:
    if not key:
        return None
    if value is not None and str(value) != "":
        return f"-D{key}={value}"
    return f"-D{key}"
