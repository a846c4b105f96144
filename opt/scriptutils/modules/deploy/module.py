from __future__ import annotations

import os
from typing import Any, Optional

from scriptutils.engine.forward import ForwardingCommand


def new_deploy_cmd(cfg: Any) -> ForwardingCommand:
    return ForwardingCommand("vespa-deploy", cfg.root)


def with_default_server(args: list[str]) -> list[str]:
    """
    Point the deploy at the first configured config server unless -c is given.
    """
    if "-c" in args:
        return args
    servers = os.environ.get("VESPA_CONFIGSERVERS", "").replace(",", " ").split()
    if not servers:
        return args
    return ["-c", servers[0], *args]


class Module:
    name = "deploy"
    commands = ["vespa-deploy"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command != "vespa-deploy":
            raise ValueError(f"deploy module cannot handle: {command}")
        return new_deploy_cmd(self._cfg).execute(with_default_server(args))
