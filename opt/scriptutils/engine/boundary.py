from __future__ import annotations

import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger("scriptutils.boundary")

# Interpreter-level invariant violations. These are bugs, never reported as a
# clean one-line message.
RUNTIME_FAULTS: tuple[type[BaseException], ...] = (
    ArithmeticError,
    AssertionError,
    AttributeError,
    ImportError,
    LookupError,
    MemoryError,
    NameError,
    NotImplementedError,
    RecursionError,
    SystemError,
    TypeError,
)


class OutcomeKind(enum.Enum):
    COMPLETED = "completed"
    ERROR = "error"
    FAULT = "fault"


@dataclass(frozen=True)
class ExitOutcome:
    kind: OutcomeKind
    status: int = 0
    message: Optional[str] = None
    fault: Optional[BaseException] = None

    @classmethod
    def success(cls) -> "ExitOutcome":
        return cls(OutcomeKind.COMPLETED, 0)

    @classmethod
    def exit(cls, status: int) -> "ExitOutcome":
        return cls(OutcomeKind.COMPLETED, int(status))

    @classmethod
    def error(cls, message: str) -> "ExitOutcome":
        return cls(OutcomeKind.ERROR, 1, message=message)

    @classmethod
    def from_fault(cls, exc: BaseException) -> "ExitOutcome":
        return cls(OutcomeKind.FAULT, 1, fault=exc)


def is_runtime_fault(exc: BaseException) -> bool:
    if not isinstance(exc, Exception):
        return True
    return isinstance(exc, RUNTIME_FAULTS)


def classify(exc: BaseException) -> ExitOutcome:
    if isinstance(exc, SystemExit):
        # A delegated command object ended the process itself; keep its status.
        code = exc.code
        if code is None:
            return ExitOutcome.success()
        if isinstance(code, int):
            return ExitOutcome.exit(code)
        return ExitOutcome.error(str(code))
    if is_runtime_fault(exc):
        return ExitOutcome.from_fault(exc)
    return ExitOutcome.error(str(exc) or type(exc).__name__)


def guard(fn: Callable[[], ExitOutcome]) -> ExitOutcome:
    """
    Run fn and turn anything it raises into an outcome.

    Wraps the outermost call only. A fault outcome carries the original
    exception so the caller can re-raise it with its traceback intact.
    """
    try:
        return fn()
    except BaseException as e:  # noqa: BLE001
        outcome = classify(e)
        if outcome.kind is OutcomeKind.ERROR:
            logger.debug("Classified error", exc_info=e)
        return outcome
