"""Opening and syncing files with the flags the storage engine needs."""

from __future__ import annotations

import enum
import os
import sys
from typing import BinaryIO


class OpenFlag(enum.IntFlag):
    """Options for :func:`open_existing_file`."""

    NONE = 0
    SYNC = 1
    READ_ONLY = 2


def _datasync_flag() -> int:
    if sys.platform.startswith(("dragonfly", "freebsd", "win32")):
        return getattr(os, "O_SYNC", 0)
    return getattr(os, "O_DSYNC", getattr(os, "O_SYNC", 0))


_DATASYNC_FLAG = _datasync_flag()
_BINARY_FLAG = getattr(os, "O_BINARY", 0)


def _open(filename: str | os.PathLike, flags: int, mode: int = 0o666) -> BinaryIO:
    fd = os.open(filename, flags | _BINARY_FLAG, mode)
    readonly = (flags & (os.O_RDWR | os.O_WRONLY)) == 0
    try:
        return os.fdopen(fd, "rb" if readonly else "r+b", buffering=0)
    except BaseException:
        os.close(fd)
        raise


def open_existing_file(filename: str | os.PathLike, flags: int) -> BinaryIO:
    """Open a file that must already exist; read-write unless READ_ONLY is set."""
    open_flags = os.O_RDONLY if flags & OpenFlag.READ_ONLY else os.O_RDWR
    if flags & OpenFlag.SYNC:
        open_flags |= _DATASYNC_FLAG
    return _open(filename, open_flags, 0)


def create_synced_file(filename: str | os.PathLike, sync: bool) -> BinaryIO:
    """Create a new file, failing if it already exists."""
    flags = os.O_RDWR | os.O_CREAT | os.O_EXCL
    if sync:
        flags |= _DATASYNC_FLAG
    return _open(filename, flags)


def open_synced_file(filename: str | os.PathLike, sync: bool) -> BinaryIO:
    """Open a file read-write, creating it if it does not exist."""
    flags = os.O_RDWR | os.O_CREAT
    if sync:
        flags |= _DATASYNC_FLAG
    return _open(filename, flags)


def open_trunc_file(filename: str | os.PathLike, sync: bool) -> BinaryIO:
    """Open a file read-write, creating or truncating it."""
    flags = os.O_RDWR | os.O_CREAT | os.O_TRUNC
    if sync:
        flags |= _DATASYNC_FLAG
    return _open(filename, flags)


def file_sync(f: BinaryIO) -> None:
    """Flush a file's contents to stable storage."""
    f.flush()
    os.fsync(f.fileno())