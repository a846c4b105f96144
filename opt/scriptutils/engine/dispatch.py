from __future__ import annotations

import logging
import sys
from typing import Callable, Optional

from .actions import KNOWN_LABELS, Action, Invocation
from .boundary import ExitOutcome
from .config import ScriptUtilsConfig
from .errors import ModuleLoadError
from .module_loader import LoadedModule, load_module

logger = logging.getLogger("scriptutils.dispatch")

Handler = Callable[[Invocation], ExitOutcome]
Loader = Callable[[str], LoadedModule]

LAUNCHER_MODULE = "startcbinary"
LAUNCHER_COMMAND = Action.NATIVE_BINARY_LAUNCH.value


class Dispatcher:
    """
    Runs exactly one handler per invocation.

    Subsystems are loaded lazily, so only the module backing the selected
    action is ever imported. Failures are not handled here; they unwind to
    the boundary around the whole run.
    """

    def __init__(self, cfg: ScriptUtilsConfig, loader: Optional[Loader] = None) -> None:
        self.cfg = cfg
        self._loader: Loader = loader or (lambda name: load_module(cfg.modules_dir, name))
        self._modules: dict[str, LoadedModule] = {}
        self._table: dict[Action, Handler] = {
            Action.NATIVE_BINARY_LAUNCH: self._launch,
            Action.EXPORT_ENV: self._implicit("environment"),
            Action.SECURITY_ENV: self._implicit("environment"),
            Action.IPV6_CHECK: self._ipv6_check,
            Action.DEPLOY: self._delegate("deploy"),
            Action.LOG_FORMAT: self._delegate("logfmt"),
            Action.GET_CLUSTER_STATE: self._delegate("clusterstate"),
            Action.GET_NODE_STATE: self._delegate("clusterstate"),
            Action.SET_NODE_STATE: self._delegate("clusterstate"),
            Action.FIX_CONFIGSERVER_DIRS: self._implicit("configserver"),
            Action.LAUNCHER_FALLBACK: self._launcher_fallback,
            Action.UNKNOWN: self._unknown,
        }

    def dispatch(self, inv: Invocation) -> ExitOutcome:
        logger.debug("Dispatching %s as %s", inv.label, inv.action.name)
        return self._table[inv.action](inv)

    def module(self, name: str, command: str) -> LoadedModule:
        """
        The loaded subsystem `name`, which must declare `command`.
        """
        lm = self._modules.get(name)
        if lm is None:
            lm = self._loader(name)
            lm.instance.register(self.cfg)
            self._modules[name] = lm
        if command not in (lm.instance.commands or []):
            raise ModuleLoadError(f"Module {lm.name} does not provide {command} (commands: {lm.instance.commands})")
        return lm

    # ---- handlers ----
    def _delegate(self, name: str) -> Handler:
        # The subsystem owns its exit status; it is passed through unchanged.
        def handler(inv: Invocation) -> ExitOutcome:
            status = self.module(name, inv.action.value).instance.run(inv.action.value, inv.argv[1:])
            return ExitOutcome.exit(status or 0)

        return handler

    def _implicit(self, name: str) -> Handler:
        def handler(inv: Invocation) -> ExitOutcome:
            self.module(name, inv.action.value).instance.run(inv.action.value, inv.argv[1:])
            return ExitOutcome.success()

        return handler

    def _ipv6_check(self, inv: Invocation) -> ExitOutcome:
        status = self.module("ipv6", inv.action.value).instance.run(inv.action.value, inv.argv[1:])
        return ExitOutcome.exit(0 if status == 0 else 1)

    def _launch(self, inv: Invocation) -> ExitOutcome:
        launcher = self.module(LAUNCHER_MODULE, LAUNCHER_COMMAND).instance
        return ExitOutcome.exit(launcher.run(inv.action.value, inv.argv[1:]) or 0)

    def _launcher_fallback(self, inv: Invocation) -> ExitOutcome:
        launcher = self.module(LAUNCHER_MODULE, LAUNCHER_COMMAND).instance
        return ExitOutcome.exit(launcher.run(LAUNCHER_COMMAND, inv.argv) or 0)

    def _unknown(self, inv: Invocation) -> ExitOutcome:
        launcher = self.module(LAUNCHER_MODULE, LAUNCHER_COMMAND).instance
        if launcher.is_candidate(inv.argv[0]):
            return self._table[Action.LAUNCHER_FALLBACK](inv)

        # Not an error: existing callers rely on status 0 here.
        sys.stderr.write(f"unknown action '{inv.label}'\n")
        sys.stderr.write(f"actions: {', '.join(KNOWN_LABELS)}\n")
        return ExitOutcome.success()
