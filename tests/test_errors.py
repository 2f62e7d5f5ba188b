import pytest

from lsmutil.errors import (
    AssertionFailure,
    WrappedError,
    assert_true,
    assert_truef,
    check,
    check2,
    wrap,
    wrapf,
)


def test_wrap_none_is_none():
    assert wrap(None) is None
    assert wrapf(None, "ctx %d", 1) is None


def test_wrap_keeps_cause():
    cause = ValueError("boom")
    wrapped = wrap(cause)
    assert isinstance(wrapped, WrappedError)
    assert wrapped.cause is cause
    assert wrapped.__cause__ is cause
    assert str(wrapped).endswith("boom")


def test_wrapf_formats_message():
    cause = OSError("disk gone")
    wrapped = wrapf(cause, "Unable to open %r as %s", "f.vlog", "RDONLY")
    assert wrapped.message == "Unable to open 'f.vlog' as RDONLY"
    assert str(wrapped) == "Unable to open 'f.vlog' as RDONLY: disk gone"


def test_check_raises_wrapped():
    cause = KeyError("missing")
    with pytest.raises(WrappedError) as info:
        check(cause)
    assert info.value.cause is cause


def test_check2_uses_second_value():
    cause = RuntimeError("bad")
    with pytest.raises(WrappedError) as info:
        check2(42, cause)
    assert info.value.cause is cause
    assert check2(42, None) is None


def test_assert_true():
    assert assert_true(True) is None
    with pytest.raises(AssertionFailure, match="Assert failed"):
        assert_true(False)


def test_assert_truef_message():
    with pytest.raises(AssertionFailure, match="fid to move: 7"):
        assert_truef(False, "fid to move: %d. Current max fid: %d", 7, 3)
    assert assert_truef(True, "never %d", 1) is None