"""Process-wide counters for reads, writes and storage sizes."""

from __future__ import annotations

import threading

_registry: dict[str, IntVar | MapVar] = {}
_registry_lock = threading.Lock()


def _publish(name: str, var: IntVar | MapVar) -> None:
    with _registry_lock:
        if name in _registry:
            raise ValueError(f"Reuse of exported var name: {name}")
        _registry[name] = var


class IntVar:
    """A named integer counter."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._value = 0
        self._lock = threading.Lock()
        _publish(name, self)

    def add(self, delta: int) -> None:
        """Add ``delta`` to the counter."""
        with self._lock:
            self._value += delta

    @property
    def value(self) -> int:
        """The current count."""
        with self._lock:
            return self._value

    def _snapshot(self) -> int:
        return self.value


class MapVar:
    """A named set of integer counters keyed by string."""

    def __init__(self, name: str) -> None:
        self.name = name
        self._values: dict[str, int] = {}
        self._lock = threading.Lock()
        _publish(name, self)

    def add(self, key: str, delta: int) -> None:
        """Add ``delta`` to the counter under ``key``, starting it at zero."""
        with self._lock:
            self._values[key] = self._values.get(key, 0) + delta

    def get(self, key: str) -> int | None:
        """Return the counter under ``key``, or ``None`` if it was never set."""
        with self._lock:
            return self._values.get(key)

    def _snapshot(self) -> dict[str, int]:
        with self._lock:
            return dict(self._values)


def snapshot() -> dict[str, int | dict[str, int]]:
    """Return a copy of every published counter, by name."""
    with _registry_lock:
        items = list(_registry.items())
    return {name: var._snapshot() for name, var in items}


NUM_READS = IntVar("lsm_disk_reads_total")
NUM_WRITES = IntVar("lsm_disk_writes_total")
NUM_BYTES_READ = IntVar("lsm_read_bytes")
NUM_BYTES_WRITTEN = IntVar("lsm_written_bytes")
NUM_LSM_GETS = MapVar("lsm_level_gets_total")
NUM_LSM_BLOOM_HITS = MapVar("lsm_bloom_hits_total")
NUM_GETS = IntVar("lsm_gets_total")
NUM_PUTS = IntVar("lsm_puts_total")
NUM_BLOCKED_PUTS = IntVar("lsm_blocked_puts_total")
NUM_MEMTABLE_GETS = IntVar("lsm_memtable_gets_total")
LSM_SIZE = MapVar("lsm_size_bytes")
VLOG_SIZE = MapVar("lsm_vlog_size_bytes")
PENDING_WRITES = MapVar("lsm_pending_writes_total")