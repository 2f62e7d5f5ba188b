import threading
import time

import pytest

from lsmutil.closer import Closer, Throttle


def test_wait_returns_after_all_workers_done():
    closer = Closer(3)
    finished = []
    lock = threading.Lock()

    def worker(n):
        time.sleep(0.01)
        with lock:
            finished.append(n)
        closer.done()

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(3)]
    for t in threads:
        t.start()
    assert closer.wait() is None
    assert sorted(finished) == [0, 1, 2]
    for t in threads:
        t.join()
    # All initial counts were consumed, so one more done() must fail.
    with pytest.raises(ValueError):
        closer.done()


def test_signal_sets_event():
    closer = Closer(0)
    event = closer.has_been_closed()
    assert not event.is_set()
    closer.signal()
    assert event.is_set()


def test_double_signal_raises():
    closer = Closer(0)
    closer.signal()
    with pytest.raises(RuntimeError):
        closer.signal()


def test_done_below_zero_raises():
    closer = Closer(1)
    closer.done()
    with pytest.raises(ValueError):
        closer.done()


def test_add_running_then_signal_and_wait():
    closer = Closer(0)
    closer.add_running(1)
    events = []

    def worker():
        closer.has_been_closed().wait()
        events.append("stopped")
        closer.done()

    t = threading.Thread(target=worker)
    t.start()
    closer.signal_and_wait()
    t.join()
    assert events == ["stopped"]
    assert closer.has_been_closed().is_set()
    with pytest.raises(ValueError):
        closer.done()


def test_throttle_limits_concurrency():
    throttle = Throttle(2)
    lock = threading.Lock()
    state = {"active": 0, "peak": 0, "completed": 0}

    def work():
        with lock:
            state["active"] += 1
            state["peak"] = max(state["peak"], state["active"])
        time.sleep(0.01)
        with lock:
            state["active"] -= 1
            state["completed"] += 1
        throttle.done(None)

    jobs = 6
    for _ in range(jobs):
        throttle.do()
        threading.Thread(target=work).start()
    assert throttle.finish() is None
    assert state["peak"] <= 2
    assert state["completed"] == jobs


def test_finish_raises_worker_error_every_time():
    throttle = Throttle(2)
    throttle.do()
    throttle.done(ValueError("boom"))
    with pytest.raises(ValueError, match="boom"):
        throttle.finish()
    with pytest.raises(ValueError, match="boom"):
        throttle.finish()


def test_do_raises_pending_error_and_consumes_it():
    throttle = Throttle(2)
    throttle.do()
    throttle.done(KeyError("first"))
    with pytest.raises(KeyError):
        throttle.do()
    assert throttle.finish() is None


def test_done_without_do_raises():
    throttle = Throttle(1)
    with pytest.raises(RuntimeError, match="mismatch"):
        throttle.done(None)


def test_do_after_finish_raises():
    throttle = Throttle(1)
    throttle.finish()
    with pytest.raises(RuntimeError):
        throttle.do()