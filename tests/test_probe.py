import os
import stat
from datetime import timezone
from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

from lazybox.core import probe


def test_owner_group_resolves_current_user(tmp_path: Path) -> None:
    f = tmp_path / "f.txt"
    f.write_text("x", encoding="utf-8")
    st = os.lstat(f)

    owner, group = probe.owner_group(st)

    try:
        expected_owner = probe.pwd.getpwuid(st.st_uid).pw_name
    except KeyError:
        expected_owner = ""
    assert owner == expected_owner
    assert isinstance(group, str)


def test_unknown_ids_resolve_to_empty_strings() -> None:
    probe.owner_name.cache_clear()
    probe.group_name.cache_clear()
    with patch.object(probe.pwd, "getpwuid", side_effect=KeyError("uid")), patch.object(
        probe.grp, "getgrgid", side_effect=KeyError("gid")
    ):
        assert probe.owner_group(SimpleNamespace(st_uid=4242424, st_gid=4242424)) == ("", "")
    probe.owner_name.cache_clear()
    probe.group_name.cache_clear()


def test_creation_time_uses_birth_time_when_present() -> None:
    st = SimpleNamespace(st_birthtime=0.0, st_ctime=5.0)
    created = probe.creation_time(st)
    assert created is not None
    assert created.tzinfo is timezone.utc
    assert created.year == 1970


def test_creation_time_absent_without_birth_time() -> None:
    st = SimpleNamespace(st_ctime=5.0)
    with patch.object(probe.os, "name", "posix"):
        assert probe.creation_time(st) is None


def test_creation_time_falls_back_to_ctime_on_nt() -> None:
    st = SimpleNamespace(st_ctime=0.0)
    with patch.object(probe.os, "name", "nt"):
        created = probe.creation_time(st)
    assert created is not None
    assert created.year == 1970


def test_mode_string_and_modification_time(tmp_path: Path) -> None:
    d = tmp_path / "d"
    d.mkdir()
    st = os.lstat(d)

    assert probe.mode_string(st) == stat.filemode(st.st_mode)
    assert probe.mode_string(st).startswith("d")
    assert probe.modification_time(st).tzinfo is timezone.utc
