from __future__ import annotations

import logging
import socket
from typing import Optional

logger = logging.getLogger("scriptutils.ipv6")


def has_only_ipv6(hostname: str) -> bool:
    """
    True if the host resolves to IPv6 addresses only.
    """
    try:
        infos = socket.getaddrinfo(hostname, None)
    except socket.gaierror as e:
        logger.warning("Could not resolve %s: %s", hostname, e)
        return False
    families = {info[0] for info in infos}
    return socket.AF_INET6 in families and socket.AF_INET not in families


class Module:
    name = "ipv6"
    commands = ["ipv6-only"]

    def __init__(self) -> None:
        self._cfg = None

    def register(self, cfg) -> None:  # noqa: ANN001
        self._cfg = cfg

    def run(self, command: str, args: list[str]) -> Optional[int]:
        if command != "ipv6-only":
            raise ValueError(f"ipv6 module cannot handle: {command}")
        hostname = self._cfg.hostname or socket.getfqdn()
        return 0 if has_only_ipv6(hostname) else 1
