from __future__ import annotations

import sys
from typing import Any, Optional

from scriptutils.engine.forward import ForwardingCommand

DEFAULT_LOG = "logs/vespa/vespa.log"


def new_logfmt_cmd(cfg: Any) -> ForwardingCommand:
    return ForwardingCommand("vespa-logfmt", cfg.root)


class Module:
    name = "logfmt"
    commands = ["vespa-logfmt"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command != "vespa-logfmt":
            raise ValueError(f"logfmt module cannot handle: {command}")

        # Nothing piped in and no arguments: format the node's own log
        if not args and sys.stdin.isatty():
            args = [str(self._cfg.root / DEFAULT_LOG)]
        return new_logfmt_cmd(self._cfg).execute(args)
