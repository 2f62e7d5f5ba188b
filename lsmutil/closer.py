"""Coordination helpers for background workers: Closer and Throttle."""

from __future__ import annotations

import threading


class Closer:
    """A shutdown signal paired with a count of running workers to wait for."""

    def __init__(self, initial: int = 0) -> None:
        self._closed = threading.Event()
        self._cond = threading.Condition()
        self._count = 0
        self.add_running(initial)

    def add_running(self, delta: int) -> None:
        """Add ``delta`` to the number of running workers."""
        with self._cond:
            count = self._count + delta
            if count < 0:
                raise ValueError("negative count of running workers")
            self._count = count
            if count == 0:
                self._cond.notify_all()

    def signal(self) -> None:
        """Tell the workers to shut down. Signalling twice is an error."""
        with self._cond:
            if self._closed.is_set():
                raise RuntimeError("closer already signalled")
            self._closed.set()

    def has_been_closed(self) -> threading.Event:
        """Return the event that is set once :meth:`signal` has been called."""
        return self._closed

    def done(self) -> None:
        """Mark one worker as finished."""
        self.add_running(-1)

    def wait(self) -> None:
        """Block until every running worker has called :meth:`done`."""
        with self._cond:
            self._cond.wait_for(lambda: self._count == 0)

    def signal_and_wait(self) -> None:
        """Signal shutdown, then wait for the workers to finish."""
        self.signal()
        self.wait()


class Throttle:
    """Lets at most ``max_workers`` workers run at a time and collects their errors."""

    def __init__(self, max_workers: int) -> None:
        if max_workers <= 0:
            raise ValueError("max_workers must be positive")
        self._max = max_workers
        self._cond = threading.Condition()
        self._active = 0
        self._errors: list[BaseException] = []
        self._finished = False
        self._finish_err: BaseException | None = None

    def do(self) -> None:
        """Reserve a worker slot, blocking while all are taken.

        Raises the error of a previously finished worker if one is pending.
        """
        with self._cond:
            while True:
                if self._finished:
                    raise RuntimeError("throttle already finished")
                if self._errors:
                    raise self._errors.pop(0)
                if self._active < self._max:
                    self._active += 1
                    return
                self._cond.wait()

    def done(self, err: BaseException | None = None) -> None:
        """Release a worker slot, reporting the worker's error if any."""
        with self._cond:
            if self._active == 0:
                raise RuntimeError("Throttle Do Done mismatch")
            if err is not None:
                self._errors.append(err)
            self._active -= 1
            self._cond.notify_all()

    def finish(self) -> None:
        """Wait for all workers and raise the first error they reported.

        Later calls do not wait again and raise the same error.
        """
        with self._cond:
            if not self._finished:
                self._cond.wait_for(lambda: self._active == 0)
                self._finished = True
                self._finish_err = self._errors[0] if self._errors else None
                self._errors.clear()
                self._cond.notify_all()
            err = self._finish_err
        if err is not None:
            raise err