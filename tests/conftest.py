from __future__ import annotations

import types
from pathlib import Path
from typing import Optional

import pytest

from scriptutils.engine.config import BUILTIN_MODULES_DIR, ScriptUtilsConfig
from scriptutils.engine.module_loader import LoadedModule, load_module


class FakeSubsystem:
    """Records calls instead of doing work."""

    def __init__(self, name: str, status: Optional[int] = None, candidate: bool = False) -> None:
        self.name = name
        self.commands = list(SUBSYSTEMS[name])
        self.status = status
        self.candidate = candidate
        self.calls: list[tuple[str, list[str]]] = []
        self.asked: list[str] = []
        self.registered = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self.registered = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        self.calls.append((command, list(args)))
        return self.status

    def is_candidate(self, program: str) -> bool:
        self.asked.append(program)
        return self.candidate


# Commands each builtin subsystem declares
SUBSYSTEMS = {
    "startcbinary": ("start-c-binary",),
    "environment": ("export-env", "security-env"),
    "ipv6": ("ipv6-only",),
    "deploy": ("vespa-deploy",),
    "logfmt": ("vespa-logfmt",),
    "clusterstate": ("vespa-get-cluster-state", "vespa-get-node-state", "vespa-set-node-state"),
    "configserver": ("fix-configserver-dirs",),
}


@pytest.fixture
def cfg(tmp_path: Path) -> ScriptUtilsConfig:
    return ScriptUtilsConfig(
        root=tmp_path,
        log_level="WARNING",
        vespa_user="vespa",
        hostname="node1.example.com",
        modules_dir=BUILTIN_MODULES_DIR,
    )


@pytest.fixture
def fakes() -> dict[str, FakeSubsystem]:
    return {name: FakeSubsystem(name) for name in SUBSYSTEMS}


@pytest.fixture
def fake_loader(fakes):
    def loader(name: str) -> LoadedModule:
        return LoadedModule(name=name, instance=fakes[name], py_module=types.ModuleType(name))

    return loader


@pytest.fixture
def load_builtin(cfg):
    def loader(name: str) -> LoadedModule:
        lm = load_module(BUILTIN_MODULES_DIR, name)
        lm.instance.register(cfg)
        return lm

    return loader


@pytest.fixture
def vespa_env(monkeypatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("VESPA_HOME", str(tmp_path))
    monkeypatch.setenv("VESPA_HOSTNAME", "node1.example.com")
    for var in ("VESPA_USER", "VESPA_SCRIPT_UTILS_LOG_LEVEL", "VESPA_TLS_CONFIG_FILE", "VESPA_TLS_INSECURE_MIXED_MODE"):
        monkeypatch.delenv(var, raising=False)
    return tmp_path
