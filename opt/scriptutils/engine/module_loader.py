from __future__ import annotations

import importlib.util
from dataclasses import dataclass
from pathlib import Path
from types import ModuleType
from typing import Any, Optional, Protocol

from .errors import ModuleLoadError


class SubsystemContract(Protocol):
    name: str
    # Action labels this subsystem runs; the dispatcher refuses any other
    commands: list[str]

    def register(self, cfg: Any) -> None: ...
    def run(self, command: str, args: list[str]) -> Optional[int]: ...


@dataclass(frozen=True)
class LoadedModule:
    name: str
    instance: SubsystemContract
    py_module: ModuleType


def _check_contract(module_name: str, inst: Any) -> None:
    name = getattr(inst, "name", None)
    if name != module_name:
        raise ModuleLoadError(f"Module in {module_name}/ declares name {name!r}")
    for attr in ("register", "run"):
        if not callable(getattr(inst, attr, None)):
            raise ModuleLoadError(f"Module {module_name} missing {attr}()")

    commands = getattr(inst, "commands", None)
    if not commands or not isinstance(commands, list) or not all(isinstance(c, str) for c in commands):
        raise ModuleLoadError(f"Module {module_name} must list the actions it runs in commands")


def load_module_from_path(module_name: str, module_py_path: Path) -> LoadedModule:
    """
    Import `module_py_path` and instantiate its `Module` class.

    The file is loaded by path, so a modules directory outside the package
    works the same as the builtin one.
    """
    if not module_py_path.exists():
        raise ModuleLoadError(f"Subsystem module missing: {module_name} ({module_py_path})")

    spec = importlib.util.spec_from_file_location(f"scriptutils.modules.{module_name}", str(module_py_path))
    if spec is None or spec.loader is None:
        raise ModuleLoadError(f"Cannot import {module_py_path}")

    py_mod = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(py_mod)  # type: ignore[call-arg]

    cls = getattr(py_mod, "Module", None)
    if cls is None:
        raise ModuleLoadError(f"No Module class in {module_py_path}")

    inst = cls()
    _check_contract(module_name, inst)
    return LoadedModule(name=module_name, instance=inst, py_module=py_mod)


def load_module(modules_dir: Path, module_name: str) -> LoadedModule:
    return load_module_from_path(module_name, modules_dir / module_name / "module.py")
