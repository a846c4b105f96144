from __future__ import annotations

from typing import Optional

from scriptutils.engine.forward import ForwardingCommand


class Module:
    name = "clusterstate"
    commands = ["vespa-get-cluster-state", "vespa-get-node-state", "vespa-set-node-state"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command not in self.commands:
            raise ValueError(f"clusterstate module cannot handle: {command}")
        return ForwardingCommand(command, self._cfg.root).execute(args)
