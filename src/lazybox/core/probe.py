"""Platform-specific stat lookups: owner/group names and creation time.

Everything here is best effort. Unknown ids resolve to "" and platforms
without a birth time report None.
"""

from __future__ import annotations

import os
import stat
from datetime import datetime, timezone
from functools import lru_cache
from typing import Optional

# Owner/group lookups need pwd/grp (POSIX). creation_time falls back to st_ctime
# only on nt, where it is the creation time.
try:
    import grp
    import pwd
except ImportError:  # pragma: no cover - Windows
    grp = None
    pwd = None


@lru_cache(maxsize=256)
def owner_name(uid: int) -> str:
    if pwd is None:
        return ""
    try:
        return pwd.getpwuid(uid).pw_name
    except (KeyError, OverflowError):
        return ""


@lru_cache(maxsize=256)
def group_name(gid: int) -> str:
    if grp is None:
        return ""
    try:
        return grp.getgrgid(gid).gr_name
    except (KeyError, OverflowError):
        return ""


def owner_group(st: os.stat_result) -> tuple[str, str]:
    uid = getattr(st, "st_uid", None)
    gid = getattr(st, "st_gid", None)
    owner = owner_name(uid) if uid is not None else ""
    group = group_name(gid) if gid is not None else ""
    return owner, group


def creation_time(st: os.stat_result) -> Optional[datetime]:
    """Birth time where the platform records one.

    st_ctime is the inode change time on Linux, so it is not used there.
    """

    birth = getattr(st, "st_birthtime", None)
    if birth is None and os.name == "nt":
        birth = st.st_ctime
    if birth is None:
        return None
    return datetime.fromtimestamp(birth, tz=timezone.utc)


def modification_time(st: os.stat_result) -> datetime:
    return datetime.fromtimestamp(st.st_mtime, tz=timezone.utc)


def mode_string(st: os.stat_result) -> str:
    return stat.filemode(st.st_mode)
