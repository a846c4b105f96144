from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

from scriptutils.engine.errors import ScriptUtilsError
from scriptutils.engine.forward import is_executable, run_program

logger = logging.getLogger("scriptutils.startcbinary")

BINARY_SUFFIX = "-bin"


def find_binary(program: str, root: Path) -> Optional[Path]:
    """
    The real executable wrapped by `program` is `<program>-bin`.

    A program given with a directory part is looked up next to itself,
    a bare name in the install's bin64 and bin directories.
    """
    if "/" in program:
        candidates = [Path(program + BINARY_SUFFIX)]
    else:
        candidates = [root / d / (program + BINARY_SUFFIX) for d in ("bin64", "bin")]
    for c in candidates:
        if is_executable(c):
            return c
    return None


def launch_env(root: Path) -> dict[str, str]:
    env = dict(os.environ)
    env["VESPA_HOME"] = str(root)
    lib = str(root / "lib64")
    current = env.get("LD_LIBRARY_PATH", "")
    if lib not in current.split(":"):
        env["LD_LIBRARY_PATH"] = f"{lib}:{current}" if current else lib
    return env


class Module:
    name = "startcbinary"
    commands = ["start-c-binary"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def is_candidate(self, program: str) -> bool:
        return find_binary(program, self._cfg.root) is not None

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command != "start-c-binary":
            raise ValueError(f"startcbinary module cannot handle: {command}")
        if not args:
            raise ScriptUtilsError("start-c-binary: missing program name")

        program = args[0]
        binary = find_binary(program, self._cfg.root)
        if binary is None:
            raise ScriptUtilsError(f"start-c-binary: no executable {program}{BINARY_SUFFIX} found")
        logger.info("Starting %s", binary)
        return run_program(binary, args[1:], argv0=os.path.basename(program), env=launch_env(self._cfg.root))
