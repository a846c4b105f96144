from __future__ import annotations

import io
import os
from pathlib import Path

import pytest

from scriptutils.engine.errors import ScriptUtilsError

RECORDER = """#!/bin/sh
for a in "$@"; do printf '%s\\n' "$a"; done > "{out}"
printf 'VESPA_HOME=%s\\nLD_LIBRARY_PATH=%s\\n' "$VESPA_HOME" "$LD_LIBRARY_PATH" >> "{out}.env"
exit {status}
"""


def _program(path: Path, out: Path, status: int = 0) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(RECORDER.format(out=out, status=status))
    os.chmod(path, 0o755)
    return path


def _recorded(out: Path) -> list[str]:
    return out.read_text().splitlines()


class _Tty(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def out(tmp_path: Path) -> Path:
    return tmp_path / "recorded.txt"


def test_start_c_binary_runs_wrapped_binary(load_builtin, tmp_path, out):
    _program(tmp_path / "bin64" / "vespa-proton-bin", out, status=7)
    launcher = load_builtin("startcbinary").instance

    assert launcher.run("start-c-binary", ["vespa-proton", "-c", "cfg-id"]) == 7
    assert _recorded(out) == ["-c", "cfg-id"]
    env = _recorded(Path(f"{out}.env"))
    assert env[0] == f"VESPA_HOME={tmp_path}"
    assert env[1].startswith(f"LD_LIBRARY_PATH={tmp_path / 'lib64'}")


def test_is_candidate(load_builtin, tmp_path, out):
    _program(tmp_path / "bin" / "vespa-storaged-bin", out)
    _program(tmp_path / "elsewhere" / "tool-bin", out)
    launcher = load_builtin("startcbinary").instance

    assert launcher.is_candidate("vespa-storaged")
    assert launcher.is_candidate(str(tmp_path / "elsewhere" / "tool"))
    assert not launcher.is_candidate("foo")
    assert not launcher.is_candidate(str(tmp_path / "elsewhere" / "foo"))


def test_non_executable_binary_is_not_a_candidate(load_builtin, tmp_path):
    p = tmp_path / "bin64" / "plain-bin"
    p.parent.mkdir()
    p.write_text("")
    os.chmod(p, 0o644)
    assert not load_builtin("startcbinary").instance.is_candidate("plain")


def test_start_c_binary_needs_a_program(load_builtin):
    with pytest.raises(ScriptUtilsError):
        load_builtin("startcbinary").instance.run("start-c-binary", [])


def test_start_c_binary_unknown_program(load_builtin):
    with pytest.raises(ScriptUtilsError, match="no-such-bin"):
        load_builtin("startcbinary").instance.run("start-c-binary", ["no-such"])


def test_deploy_forwards_arguments_and_status(load_builtin, tmp_path, out, monkeypatch):
    monkeypatch.delenv("VESPA_CONFIGSERVERS", raising=False)
    _program(tmp_path / "libexec/vespa/vespa-deploy-impl", out, status=3)
    assert load_builtin("deploy").instance.run("vespa-deploy", ["prepare", "app.zip"]) == 3
    assert _recorded(out) == ["prepare", "app.zip"]


def test_deploy_defaults_to_first_config_server(load_builtin, tmp_path, out, monkeypatch):
    monkeypatch.setenv("VESPA_CONFIGSERVERS", "cfg1.example.com,cfg2.example.com")
    _program(tmp_path / "libexec/vespa/vespa-deploy-impl", out)
    load_builtin("deploy").instance.run("vespa-deploy", ["activate"])
    assert _recorded(out) == ["-c", "cfg1.example.com", "activate"]


def test_deploy_explicit_server_wins(load_builtin, tmp_path, out, monkeypatch):
    monkeypatch.setenv("VESPA_CONFIGSERVERS", "cfg1.example.com")
    _program(tmp_path / "libexec/vespa/vespa-deploy-impl", out)
    load_builtin("deploy").instance.run("vespa-deploy", ["-c", "other", "activate"])
    assert _recorded(out) == ["-c", "other", "activate"]


def test_missing_backing_program(load_builtin):
    with pytest.raises(ScriptUtilsError):
        load_builtin("deploy").instance.run("vespa-deploy", ["prepare"])


def test_logfmt_defaults_to_node_log_on_a_terminal(load_builtin, tmp_path, out, monkeypatch):
    _program(tmp_path / "libexec/vespa/vespa-logfmt-impl", out)
    monkeypatch.setattr("sys.stdin", _Tty())
    assert load_builtin("logfmt").instance.run("vespa-logfmt", []) == 0
    assert _recorded(out) == [str(tmp_path / "logs/vespa/vespa.log")]


def test_logfmt_keeps_explicit_arguments(load_builtin, tmp_path, out, monkeypatch):
    _program(tmp_path / "libexec/vespa/vespa-logfmt-impl", out)
    monkeypatch.setattr("sys.stdin", _Tty())
    load_builtin("logfmt").instance.run("vespa-logfmt", ["-l", "all", "x.log"])
    assert _recorded(out) == ["-l", "all", "x.log"]


@pytest.mark.parametrize("command", ["vespa-get-cluster-state", "vespa-get-node-state", "vespa-set-node-state"])
def test_clusterstate_commands(load_builtin, tmp_path, out, command):
    _program(tmp_path / "libexec/vespa" / f"{command}-impl", out, status=2)
    assert load_builtin("clusterstate").instance.run(command, ["-c", "music"]) == 2
    assert _recorded(out) == ["-c", "music"]
