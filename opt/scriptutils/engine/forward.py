from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from .errors import ScriptUtilsError

logger = logging.getLogger("scriptutils.forward")


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def run_program(program: Path, args: list[str], *, argv0: Optional[str] = None, env: Optional[dict[str, str]] = None) -> int:
    """
    Run program in the foreground and return its exit status.

    stdin/stdout/stderr are inherited. A child killed by a signal returns
    128 + signal number, as a shell would report it.
    """
    if not is_executable(program):
        raise ScriptUtilsError(f"cannot run {program}: not an executable file")

    cmd = [argv0 or str(program), *args]
    logger.debug("Running %s %s", program, args)
    proc = subprocess.run(cmd, executable=str(program), env=env, check=False)
    if proc.returncode < 0:
        return 128 - proc.returncode
    return proc.returncode


class ForwardingCommand:
    """
    Command object for a subcommand implemented by a separate program
    under libexec/vespa.
    """

    def __init__(self, name: str, root: Path, *, env: Optional[dict[str, str]] = None) -> None:
        self.name = name
        self.program = root / "libexec" / "vespa" / f"{name}-impl"
        self.env = env

    def execute(self, args: list[str]) -> int:
        return run_program(self.program, args, argv0=self.name, env=self.env)
