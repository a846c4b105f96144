from __future__ import annotations

import enum
import os
from dataclasses import dataclass
from typing import Optional

MULTIPLEXER_NAME = "script-utils"


class Action(enum.Enum):
    NATIVE_BINARY_LAUNCH = "start-c-binary"
    EXPORT_ENV = "export-env"
    SECURITY_ENV = "security-env"
    IPV6_CHECK = "ipv6-only"
    DEPLOY = "vespa-deploy"
    LOG_FORMAT = "vespa-logfmt"
    GET_CLUSTER_STATE = "vespa-get-cluster-state"
    GET_NODE_STATE = "vespa-get-node-state"
    SET_NODE_STATE = "vespa-set-node-state"
    FIX_CONFIGSERVER_DIRS = "fix-configserver-dirs"
    # Never resolved from a label; reached through the unknown path.
    LAUNCHER_FALLBACK = "<launcher-fallback>"
    UNKNOWN = "<unknown>"

    @classmethod
    def from_label(cls, label: str) -> "Action":
        return _BY_LABEL.get(label, cls.UNKNOWN)


_BY_LABEL: dict[str, Action] = {
    a.value: a for a in Action if a not in (Action.LAUNCHER_FALLBACK, Action.UNKNOWN)
}

KNOWN_LABELS: tuple[str, ...] = tuple(_BY_LABEL)


@dataclass(frozen=True)
class Invocation:
    """
    A resolved invocation.

    argv is what the handler sees: argv[0] is the label the tool was
    invoked as, the rest are the handler's own arguments.
    """

    action: Action
    label: str
    argv: list[str]


def resolve_action(argv: list[str], multiplexer: Optional[str] = None) -> Invocation:
    multiplexer = multiplexer or MULTIPLEXER_NAME
    argv = list(argv) or [multiplexer]
    label = os.path.basename(argv[0])
    if label == multiplexer and len(argv) > 1:
        argv = argv[1:]
        label = argv[0]
    return Invocation(action=Action.from_label(label), label=label, argv=argv)
