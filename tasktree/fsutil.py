"""Filesystem helpers: atomic writes and tasktree root discovery."""

from __future__ import annotations

import contextlib
import os
import stat
import tempfile

from .errors import LegacyMetadataError, NotInTasktreeError
from .spec import LEGACY_FILE_NAME, SPEC_FILE_NAME


def atomic_write_file(path: str | os.PathLike, data: bytes | str, perm: int) -> None:
    """Write data to path through a synced temp file and an atomic rename."""
    path = os.fspath(path)
    if isinstance(data, str):
        data = data.encode("utf-8")
    directory = os.path.dirname(path) or "."
    fd, temp_path = tempfile.mkstemp(prefix=".tasktree-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(data)
            os.fchmod(handle.fileno(), perm)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.remove(temp_path)

    with contextlib.suppress(OSError):
        dir_fd = os.open(directory, os.O_RDONLY)
        try:
            os.fsync(dir_fd)
        finally:
            os.close(dir_fd)


def resolve_tasktree_root(start: str | os.PathLike) -> str:
    """Walk up from start to the nearest directory holding Tasktree.yml."""
    current = os.path.abspath(start)
    while True:
        try:
            info = os.stat(os.path.join(current, SPEC_FILE_NAME))
        except FileNotFoundError:
            pass
        else:
            if not stat.S_ISDIR(info.st_mode):
                return current

        legacy_path = os.path.join(current, LEGACY_FILE_NAME)
        try:
            legacy_info = os.stat(legacy_path)
        except OSError:
            pass
        else:
            if not stat.S_ISDIR(legacy_info.st_mode):
                raise LegacyMetadataError(legacy_path)

        parent = os.path.dirname(current)
        if parent == current:
            raise NotInTasktreeError(os.fspath(start))
        current = parent


def exists(path: str | os.PathLike) -> bool:
    """True if path exists; other stat failures are raised."""
    try:
        os.stat(path)
    except FileNotFoundError:
        return False
    return True


def is_within(root: str | os.PathLike, target: str | os.PathLike) -> bool:
    """True if target is root itself or lies beneath it."""
    rel = os.path.relpath(os.path.abspath(target), os.path.abspath(root))
    if rel == ".":
        return True
    return not rel.startswith("..")