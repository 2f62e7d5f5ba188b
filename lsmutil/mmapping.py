"""Memory-mapping files for read access and, optionally, for writing."""

from __future__ import annotations

import mmap
import os
import sys
from typing import BinaryIO


def mmap_file(f: BinaryIO, writable: bool, size: int) -> mmap.mmap:
    """Map the first ``size`` bytes of an open file into memory.

    On Windows a file shorter than ``size`` is extended first. Elsewhere a
    mapping cannot reach past the end of the file, so it is cut to the
    file's length. An empty region raises :class:`ValueError`.
    """
    fd = f.fileno()
    file_size = os.fstat(fd).st_size
    if sys.platform == "win32":
        if file_size < size:
            os.ftruncate(fd, size)
        length = size
    else:
        length = min(size, file_size)
    if length <= 0:
        raise ValueError(f"cannot map an empty region (requested {size} bytes, file has {file_size})")
    access = mmap.ACCESS_WRITE if writable else mmap.ACCESS_READ
    return mmap.mmap(fd, length, access=access)


def munmap(buf: mmap.mmap) -> None:
    """Release a mapping made by :func:`mmap_file`."""
    buf.close()


def madvise(buf: mmap.mmap, readahead: bool) -> None:
    """Tell the kernel whether pages will be read in order or at random.

    Platforms without madvise ignore the advice.
    """
    if not hasattr(buf, "madvise"):
        return
    name = "MADV_NORMAL" if readahead else "MADV_RANDOM"
    advice = getattr(mmap, name, None)
    if advice is None:
        return
    buf.madvise(advice)