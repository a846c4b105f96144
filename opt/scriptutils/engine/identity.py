from __future__ import annotations

import logging
import pwd
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("scriptutils.identity")


@dataclass(frozen=True)
class Identity:
    """
    Numeric owner of the service's runtime files.

    Resolved from the service account name; the group is the account's
    primary group. Both unset means ownership is not touched.
    """

    uid: Optional[int] = None
    gid: Optional[int] = None

    @property
    def known(self) -> bool:
        return self.uid is not None and self.gid is not None


def resolve_service_identity(user: str) -> Identity:
    try:
        entry = pwd.getpwnam(user)
    except KeyError:
        logger.warning("Could not find user %s, leaving file ownership unchanged", user)
        return Identity()
    return Identity(uid=entry.pw_uid, gid=entry.pw_gid)
