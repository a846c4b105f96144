from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .errors import PathTypeError
from .identity import Identity

logger = logging.getLogger("scriptutils.permissions")


@dataclass(frozen=True)
class PermissionPolicy:
    # None leaves ownership as it is; modes are still applied
    uid: Optional[int]
    gid: Optional[int]
    dir_mode: int
    file_mode: int

    @classmethod
    def for_identity(cls, ident: Identity, *, dir_mode: int, file_mode: int) -> "PermissionPolicy":
        if not ident.known:
            return cls(uid=None, gid=None, dir_mode=dir_mode, file_mode=file_mode)
        return cls(uid=ident.uid, gid=ident.gid, dir_mode=dir_mode, file_mode=file_mode)


@dataclass(frozen=True)
class PathSet:
    """
    Locations relative to an install root.

    Directories are reconciled with everything below them, files one by one.
    """

    directories: tuple[str, ...]
    files: tuple[str, ...]


def _raise(err: OSError) -> None:
    raise err


class PermissionReconciler:
    """
    Brings ownership and mode bits of existing paths to the policy's values.

    Every node is set to an absolute target, so applying twice is the same
    as applying once. Missing paths are skipped; nothing is created.
    A declared path that is a symlink is resolved to its target. Symlinks
    found below a declared directory are left alone; a dangling declared
    symlink counts as missing.
    """

    def __init__(self, policy: PermissionPolicy) -> None:
        self.policy = policy

    def apply(self, paths: PathSet, root: Path) -> None:
        for d in paths.directories:
            self.fix_dir(root / d)
        for f in paths.files:
            self.fix_file(root / f)

    def fix_dir(self, path: Path) -> None:
        if not path.exists():
            logger.info("Skipping missing directory %s", path)
            return
        if not path.is_dir():
            raise PathTypeError(f"expected a directory: {path}")
        path = Path(os.path.realpath(path))

        # Symlinked subdirectories show up in dirnames but are not descended into
        for dirpath, _dirnames, filenames in os.walk(path, onerror=_raise):
            self._fix_node(dirpath, self.policy.dir_mode)
            for name in filenames:
                p = os.path.join(dirpath, name)
                if os.path.islink(p):
                    logger.debug("Not following symlink %s", p)
                    continue
                self._fix_node(p, self.policy.file_mode)

    def fix_file(self, path: Path) -> None:
        if not path.exists():
            logger.info("Skipping missing file %s", path)
            return
        if path.is_dir():
            raise PathTypeError(f"expected a file, found a directory: {path}")
        self._fix_node(os.path.realpath(path), self.policy.file_mode)

    def _fix_node(self, path: str, mode: int) -> None:
        st = os.lstat(path)
        owner = (self.policy.uid, self.policy.gid)
        if None not in owner and (st.st_uid, st.st_gid) != owner:
            logger.debug("chown %d:%d %s", self.policy.uid, self.policy.gid, path)
            os.chown(path, self.policy.uid, self.policy.gid)
        if stat.S_IMODE(st.st_mode) != mode:
            logger.debug("chmod %o %s", mode, path)
            os.chmod(path, mode)
