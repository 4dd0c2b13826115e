from typing import Callable, Dict

from ..model import StepKind
from . import annotations, codeserver, compile, document, package, test_compile, translate
from .context import StepContext

StepRunner = Callable[..., None]

STEP_RUNNERS: Dict[StepKind, StepRunner] = {
    StepKind.COMPILE: compile.run_step,
    StepKind.TRANSLATE: translate.run_step,
    StepKind.DOCUMENT: document.run_step,
    StepKind.PACKAGE: package.run_step,
    StepKind.ANNOTATIONS: annotations.run_step,
    StepKind.TEST_COMPILE: test_compile.run_step,
    StepKind.CODE_SERVER: codeserver.run_step,
}

__all__ = ["STEP_RUNNERS", "StepContext", "StepRunner"]
