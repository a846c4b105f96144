from __future__ import annotations

import json
import logging
import os
import shlex
import sys
from pathlib import Path
from typing import Any, Optional

from scriptutils.engine.errors import ScriptUtilsError

logger = logging.getLogger("scriptutils.environment")

DEFAULT_ENV_FILE = "conf/vespa/default-env.txt"

# None means: emit an unset statement
EnvChanges = dict[str, Optional[str]]


def read_default_env(path: Path, environ: dict[str, str]) -> EnvChanges:
    """
    Parse default-env.txt.

    Each line is `<action> <VAR> [value]` where action is one of:
      - fallback: set VAR unless the environment already has it
      - override: always set VAR
      - unset:    remove VAR
    """
    changes: EnvChanges = {}
    if not path.exists():
        return changes
    for lineno, line in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        parts = line.split(None, 2)
        if len(parts) < 2:
            raise ScriptUtilsError(f"{path}:{lineno}: expected '<action> <variable> [value]'")
        action, var = parts[0], parts[1]
        value = parts[2] if len(parts) > 2 else ""
        if action == "fallback":
            if not environ.get(var):
                changes[var] = value
        elif action == "override":
            changes[var] = value
        elif action == "unset":
            changes[var] = None
        else:
            logger.warning("%s:%d: unknown action '%s'", path, lineno, action)
    return changes


def default_env(root: Path, user: str, environ: dict[str, str]) -> EnvChanges:
    changes = read_default_env(root / DEFAULT_ENV_FILE, environ)
    changes["VESPA_HOME"] = str(root)
    if not environ.get("VESPA_USER") and "VESPA_USER" not in changes:
        changes["VESPA_USER"] = user

    bin_dir = str(root / "bin")
    path = changes.get("PATH") or environ.get("PATH", "")
    if bin_dir not in path.split(":"):
        changes["PATH"] = f"{bin_dir}:{path}" if path else bin_dir
    return changes


def security_env(environ: dict[str, str]) -> EnvChanges:
    changes: EnvChanges = {}
    cfg_file = environ.get("VESPA_TLS_CONFIG_FILE", "")
    if not cfg_file:
        return changes

    try:
        tls = json.loads(Path(cfg_file).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ScriptUtilsError(f"invalid TLS config {cfg_file}: {e}") from e
    if not isinstance(tls, dict):
        raise ScriptUtilsError(f"invalid TLS config {cfg_file}: expected an object")

    files: dict[str, Any] = tls.get("files") or {}
    if not isinstance(files, dict):
        raise ScriptUtilsError(f"invalid TLS config {cfg_file}: 'files' must be an object")
    changes["VESPA_TLS_ENABLED"] = "1"
    for key, var in (
        ("ca-certificates", "VESPA_TLS_CA_CERT"),
        ("certificates", "VESPA_TLS_CERT"),
        ("private-key", "VESPA_TLS_PRIVATE_KEY"),
    ):
        if files.get(key):
            changes[var] = str(files[key])
    if tls.get("disable-hostname-validation"):
        changes["VESPA_TLS_HOSTNAME_VALIDATION_DISABLED"] = "1"

    mixed = environ.get("VESPA_TLS_INSECURE_MIXED_MODE", "")
    if mixed:
        changes["VESPA_TLS_INSECURE_MIXED_MODE"] = mixed
        if mixed == "plaintext_client_mixed_server":
            # Clients keep talking plaintext until the servers are switched over
            changes["VESPA_TLS_ENABLED"] = None
    return changes


def to_sh(changes: EnvChanges) -> str:
    out: list[str] = []
    for var, value in changes.items():
        if value is None:
            out.append(f"unset {var}")
        else:
            out.append(f"{var}={shlex.quote(value)}")
            out.append(f"export {var}")
    return "".join(line + "\n" for line in out)


class Module:
    name = "environment"
    commands = ["export-env", "security-env"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        environ = dict(os.environ)
        if command == "export-env":
            changes = default_env(self._cfg.root, self._cfg.vespa_user, environ)
        elif command == "security-env":
            changes = security_env(environ)
        else:
            raise ValueError(f"environment module cannot handle: {command}")
        sys.stdout.write(to_sh(changes))
        sys.stdout.flush()
        return None
