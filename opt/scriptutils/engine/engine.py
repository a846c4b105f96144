from __future__ import annotations

import logging
import sys
from typing import Optional

from .actions import resolve_action
from .boundary import ExitOutcome, OutcomeKind, guard
from .config import find_home, load_config
from .dispatch import Dispatcher

logger = logging.getLogger("scriptutils")


def setup_logging(level: str) -> None:
    # stdout is reserved for tool output (export-env is sourced by shells)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )


def run(argv: list[str]) -> ExitOutcome:
    root = find_home(argv[0] if argv else None)
    cfg = load_config(root)
    setup_logging(cfg.log_level)
    logger.debug("Install root %s", root)
    inv = resolve_action(argv)
    return Dispatcher(cfg).dispatch(inv)


def terminate(outcome: ExitOutcome) -> int:
    """
    Turn the outcome of a run into a process status.

    Faults are re-raised as the original exception so the interpreter
    reports them with the full traceback.
    """
    if outcome.kind is OutcomeKind.FAULT and outcome.fault is not None:
        raise outcome.fault
    if outcome.message:
        sys.stderr.write(outcome.message + "\n")
    return outcome.status


def main(argv: Optional[list[str]] = None) -> int:
    args = list(sys.argv if argv is None else argv)
    return terminate(guard(lambda: run(args)))


if __name__ == "__main__":
    raise SystemExit(main())
