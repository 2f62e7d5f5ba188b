"""Tracking the lowest index that has not finished yet."""

from __future__ import annotations

import heapq
import logging
import queue
import threading
from dataclasses import dataclass, field

from lsmutil.closer import Closer
from lsmutil.errors import assert_true, assert_truef

_log = logging.getLogger(__name__)

_QUEUE_SIZE = 100
_POLL_INTERVAL = 0.05


@dataclass(frozen=True)
class _Mark:
    index: int = 0
    waiter: threading.Event | None = None
    indices: tuple[int, ...] = field(default_factory=tuple)
    done: bool = False


class WaterMark:
    """Keeps track of the minimum unfinished index.

    An index becomes done once :meth:`done` has been called for it as many
    times as :meth:`begin`, and at least once. It may also become done through
    :meth:`set_done_until`, if that call is not mixed with begin/done calls.
    Every index must begin in order, or waiters on later indices may block
    for good.
    """

    def __init__(self, name: str = "") -> None:
        self.name = name
        self._done_until = 0
        self._last_index = 0
        self._lock = threading.Lock()
        self._marks: queue.Queue[_Mark] = queue.Queue(maxsize=_QUEUE_SIZE)
        self._thread: threading.Thread | None = None

    def init(self, closer: Closer) -> None:
        """Start the background worker; it calls ``closer.done()`` when it stops."""
        self._thread = threading.Thread(
            target=self._process, args=(closer,), name=f"watermark-{self.name}", daemon=True
        )
        self._thread.start()

    def begin(self, index: int) -> None:
        """Record that work on ``index`` has started."""
        with self._lock:
            self._last_index = index
        self._marks.put(_Mark(index=index, done=False))

    def begin_many(self, indices: list[int]) -> None:
        """Like :meth:`begin`, for several indices at once."""
        indices = tuple(indices)
        last = indices[-1]
        with self._lock:
            self._last_index = last
        self._marks.put(_Mark(index=0, indices=indices, done=False))

    def done(self, index: int) -> None:
        """Record that work on ``index`` has finished."""
        self._marks.put(_Mark(index=index, done=True))

    def done_many(self, indices: list[int]) -> None:
        """Like :meth:`done`, for several indices at once."""
        self._marks.put(_Mark(index=0, indices=tuple(indices), done=True))

    def done_until(self) -> int:
        """The largest index such that it and every index below it are done."""
        with self._lock:
            return self._done_until

    def set_done_until(self, val: int) -> None:
        """Declare every index up to ``val`` done."""
        with self._lock:
            self._done_until = val

    def last_index(self) -> int:
        """The last index passed to :meth:`begin` or :meth:`begin_many`."""
        with self._lock:
            return self._last_index

    def wait_for_mark(self, index: int, timeout: float | None = None) -> None:
        """Block until ``index`` is done.

        Raises :class:`TimeoutError` if ``timeout`` seconds pass first.
        """
        if self.done_until() >= index:
            return
        waiter = threading.Event()
        self._marks.put(_Mark(index=index, waiter=waiter))
        if not waiter.wait(timeout):
            raise TimeoutError(f"watermark {self.name!r} did not reach {index}")

    def _compare_and_swap(self, old: int, new: int) -> bool:
        with self._lock:
            if self._done_until != old:
                return False
            self._done_until = new
            return True

    def _process(self, closer: Closer) -> None:
        indices: list[int] = []
        pending: dict[int, int] = {}
        waiters: dict[int, list[threading.Event]] = {}
        loop = 0

        def process_one(index: int, done: bool) -> None:
            nonlocal loop
            if index not in pending:
                heapq.heappush(indices, index)
            pending[index] = pending.get(index, 0) + (-1 if done else 1)

            loop += 1
            if indices and loop % 10000 == 0:
                smallest = indices[0]
                _log.debug(
                    "WaterMark %s: Done entry %4d. Size: %4d Watermark: %-4d Looking for: %-4d. Value: %d",
                    self.name, index, len(indices), self.done_until(), smallest, pending[smallest],
                )

            done_until = self.done_until()
            assert_truef(
                done_until <= index, "Name: %s doneUntil: %d. Index: %d", self.name, done_until, index
            )

            until = done_until
            loops = 0
            while indices:
                smallest = indices[0]
                if pending[smallest] > 0:
                    break
                # An index done more often than begun is still popped.
                heapq.heappop(indices)
                del pending[smallest]
                until = smallest
                loops += 1

            if until != done_until:
                for i in range(done_until + 1, until + 1):
                    for event in waiters.pop(i, ()):
                        event.set()
                assert_true(self._compare_and_swap(done_until, until))
                _log.debug("%s: Done until %d. Loops: %d", self.name, until, loops)

        closed = closer.has_been_closed()
        try:
            while not closed.is_set():
                try:
                    mark = self._marks.get(timeout=_POLL_INTERVAL)
                except queue.Empty:
                    continue
                if mark.waiter is not None:
                    if self.done_until() >= mark.index:
                        mark.waiter.set()
                    else:
                        waiters.setdefault(mark.index, []).append(mark.waiter)
                    continue
                if mark.index > 0:
                    process_one(mark.index, mark.done)
                for index in mark.indices:
                    process_one(index, mark.done)
        finally:
            closer.done()