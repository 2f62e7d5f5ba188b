import pytest

from lsmutil.files import (
    OpenFlag,
    create_synced_file,
    file_sync,
    open_existing_file,
    open_synced_file,
    open_trunc_file,
)


def test_create_then_read_back(tmp_path):
    path = tmp_path / "000000.vlog"
    with create_synced_file(path, True) as f:
        f.write(b"payload")
        file_sync(f)
    with open_existing_file(path, OpenFlag.READ_ONLY) as f:
        assert f.read() == b"payload"


def test_create_fails_if_exists(tmp_path):
    path = tmp_path / "a"
    path.write_bytes(b"x")
    with pytest.raises(FileExistsError):
        create_synced_file(path, False)


def test_open_existing_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_existing_file(tmp_path / "missing", OpenFlag.NONE)


def test_open_existing_read_write(tmp_path):
    path = tmp_path / "rw"
    path.write_bytes(b"abc")
    with open_existing_file(path, OpenFlag.SYNC) as f:
        f.seek(0, 2)
        f.write(b"def")
    assert path.read_bytes() == b"abcdef"


def test_read_only_rejects_writes(tmp_path):
    path = tmp_path / "ro"
    path.write_bytes(b"abc")
    with open_existing_file(path, OpenFlag.READ_ONLY) as f:
        with pytest.raises(OSError):
            f.write(b"zz")
    assert path.read_bytes() == b"abc"


def test_open_synced_keeps_content(tmp_path):
    path = tmp_path / "keep"
    with open_synced_file(path, False) as f:
        f.write(b"first")
    with open_synced_file(path, True) as f:
        assert f.read() == b"first"


def test_open_trunc_discards_content(tmp_path):
    path = tmp_path / "trunc"
    path.write_bytes(b"old data")
    with open_trunc_file(path, False) as f:
        assert f.read() == b""
        f.write(b"new")
    assert path.read_bytes() == b"new"


def test_file_sync_persists(tmp_path):
    path = tmp_path / "sync"
    with open_trunc_file(path, False) as f:
        f.write(b"durable")
        file_sync(f)
        assert path.read_bytes() == b"durable"