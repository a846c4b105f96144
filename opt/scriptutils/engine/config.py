from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import yaml

from .errors import ConfigError

DEFAULT_HOME = "/opt/vespa"
CONFIG_FILE = "conf/vespa/script-utils.yaml"
BUILTIN_MODULES_DIR = Path(__file__).resolve().parent.parent / "modules"

# Directories an installed executable may live in, relative to the home.
_BIN_DIRS = (("bin",), ("bin64",), ("sbin",), ("libexec", "vespa"))


@dataclass(frozen=True)
class ScriptUtilsConfig:
    root: Path
    log_level: str
    vespa_user: str
    hostname: str
    modules_dir: Path


def _executable_path(argv0: str) -> Optional[Path]:
    # A bare name was found through PATH, not in the working directory
    if os.sep not in argv0:
        found = shutil.which(argv0)
        if found is None:
            return None
        argv0 = found
    return Path(os.path.realpath(argv0))


def find_home(argv0: Optional[str] = None) -> Path:
    """
    VESPA_HOME if set, else the install root the executable lives in,
    else the default location. The result is exported as VESPA_HOME.
    """
    home = os.environ.get("VESPA_HOME")
    exe = _executable_path(argv0) if not home and argv0 else None
    if exe is not None:
        for parts in _BIN_DIRS:
            parent = exe.parent
            if parent.parts[-len(parts):] == parts:
                home = str(Path(*parent.parts[: -len(parts)]))
                break
    if not home:
        home = DEFAULT_HOME
    os.environ["VESPA_HOME"] = home
    return Path(home)


def load_config(root: Path) -> ScriptUtilsConfig:
    cfg_path = root / CONFIG_FILE
    raw: dict[str, Any] = {}
    if cfg_path.exists():
        try:
            raw = yaml.safe_load(cfg_path.read_text(encoding="utf-8")) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"invalid config file {cfg_path}: {e}") from e

    section = raw.get("script_utils", {}) if isinstance(raw, dict) else {}
    if not isinstance(section, dict):
        section = {}

    log_level = str(section.get("log_level", "warning"))
    vespa_user = str(section.get("vespa_user", "vespa"))
    hostname = str(section.get("hostname", "") or "")
    modules_dir = section.get("modules_dir")

    # Env overrides, same names the start scripts use
    log_level = os.environ.get("VESPA_SCRIPT_UTILS_LOG_LEVEL", log_level)
    vespa_user = os.environ.get("VESPA_USER", vespa_user) or "vespa"
    hostname = os.environ.get("VESPA_HOSTNAME", hostname)

    return ScriptUtilsConfig(
        root=root,
        log_level=log_level.upper(),
        vespa_user=vespa_user,
        hostname=hostname,
        modules_dir=Path(modules_dir) if modules_dir else BUILTIN_MODULES_DIR,
    )
