from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

from scriptutils.engine.identity import resolve_service_identity
from scriptutils.engine.permissions import PathSet, PermissionPolicy, PermissionReconciler

DIR_MODE = 0o755
FILE_MODE = 0o644

# ZooKeeper state of the config server. The conf/zookeeper entries are legacy;
# remove them once the config is only written to var/zookeeper/conf.
ZOOKEEPER_PATHS = PathSet(
    directories=(
        "conf/zookeeper",
        "var/zookeeper",
        "var/zookeeper/conf",
        "var/zookeeper/version-2",
    ),
    files=(
        "conf/zookeeper/zookeeper.cfg",
        "var/zookeeper/conf/zookeeper.cfg",
        "var/zookeeper/myid",
    ),
)


def make_fix_policy(cfg: Any) -> PermissionPolicy:
    ident = resolve_service_identity(cfg.vespa_user)
    return PermissionPolicy.for_identity(ident, dir_mode=DIR_MODE, file_mode=FILE_MODE)


def fix_dirs_and_files(policy: PermissionPolicy, root: Path) -> None:
    PermissionReconciler(policy).apply(ZOOKEEPER_PATHS, root)


class Module:
    name = "configserver"
    commands = ["fix-configserver-dirs"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command != "fix-configserver-dirs":
            raise ValueError(f"configserver module cannot handle: {command}")
        fix_dirs_and_files(make_fix_policy(self._cfg), self._cfg.root)
        return None
