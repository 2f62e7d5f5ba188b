"""Error helpers: fatal checks, assertions and error wrapping."""

from __future__ import annotations


class AssertionFailure(Exception):
    """Raised when an internal invariant does not hold."""


class WrappedError(Exception):
    """An error carrying an extra message in front of the error that caused it."""

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message, cause)
        self.message = message
        self.cause = cause
        self.__cause__ = cause

    def __str__(self) -> str:
        return f"{self.message}: {self.cause}"


def wrap(err: BaseException | None) -> WrappedError | None:
    """Wrap an error from outside code; ``None`` stays ``None``."""
    if err is None:
        return None
    return WrappedError("", err)


def wrapf(err: BaseException | None, fmt: str, *args: object) -> WrappedError | None:
    """Wrap an error with a printf-style message; ``None`` stays ``None``."""
    if err is None:
        return None
    message = fmt % args if args else fmt
    return WrappedError(message, err)


def check(err: BaseException | None) -> None:
    """Raise the wrapped error if ``err`` is set."""
    if err is not None:
        wrapped = wrap(err)
        raise wrapped from err


def check2(value: object, err: BaseException | None) -> None:
    """Like :func:`check`, ignoring the first value of a (value, error) pair."""
    check(err)


def assert_true(condition: bool) -> None:
    """Raise :class:`AssertionFailure` unless ``condition`` holds."""
    if not condition:
        raise AssertionFailure("Assert failed")


def assert_truef(condition: bool, fmt: str, *args: object) -> None:
    """Raise :class:`AssertionFailure` with a formatted message unless ``condition`` holds."""
    if not condition:
        raise AssertionFailure(fmt % args if args else fmt)