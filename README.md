# lsmutil

Small, dependency-free building blocks for an LSM-tree key-value store.

## Modules

- `lsmutil.keys` — versioned keys. `key_with_ts(key, ts)` appends an 8-byte
  big-endian timestamp, stored inverted so that newer versions sort first.
  `parse_ts` reads it back (0 for keys of 8 bytes or fewer), `parse_key` strips
  it, `same_key` compares user keys, and `compare_keys` orders two versioned keys
  by user key, then by the timestamp suffix. `fixed_duration(seconds)` formats a
  duration such as `01h02m03s`, `05m07s` or `09s`.
- `lsmutil.iterator` — `ValueStruct` (`meta`, `user_meta`, `expires_at`,
  `value`, and an unserialized `version`) with `encode()`, the class method
  `decode(b)` and `encoded_size()`; the abstract `Iterator` interface
  (`next`, `rewind`, `seek`, `key`, `value`, `valid`, `close`); and
  `MergeIterator(iters, reversed)`, which merges sorted iterators forwards or in
  reverse, yields each key once, and takes the entry from the iterator listed
  first when keys are equal. Closing a `MergeIterator` closes every iterator it
  holds; a failure is raised as `WrappedError`.
- `lsmutil.watermark` — `WaterMark(name)` tracks the largest index at and below
  which every begun index is done. Start its background thread with
  `init(closer)`, then call `begin`/`begin_many` and `done`/`done_many`.
  `done_until()`, `set_done_until(val)` and `last_index()` read and set its
  state, and `wait_for_mark(index, timeout)` blocks until the index is reached,
  raising `TimeoutError` if the timeout passes first.
- `lsmutil.closer` — `Closer(initial)` pairs a shutdown event
  (`signal`, `has_been_closed`) with a count of running workers
  (`add_running`, `done`, `wait`, `signal_and_wait`). `Throttle(max_workers)`
  lets at most that many workers hold a slot (`do`, `done(err)`); `do` raises an
  error reported by an earlier worker, and `finish()` waits for all workers and
  raises the first error reported, again on every later call.
- `lsmutil.files` — `open_existing_file(filename, flags)` with `OpenFlag.SYNC`
  and `OpenFlag.READ_ONLY`, `create_synced_file` (fails if the file exists),
  `open_synced_file`, `open_trunc_file`, and `file_sync`. Files are returned
  unbuffered in binary mode; the sync options open them with O_DSYNC where the
  platform has it, O_SYNC otherwise.
- `lsmutil.mmapping` — `mmap_file(f, writable, size)` maps a file read-only or
  read-write. On Windows a shorter file is extended to `size`; elsewhere the
  mapping is cut to the file's length, and an empty region raises `ValueError`.
  `munmap(buf)` releases it and `madvise(buf, readahead)` passes access hints
  where the platform supports them.
- `lsmutil.metrics` — process-wide counters: `IntVar` and `MapVar`, the
  predefined counters such as `NUM_READS`, `NUM_BYTES_WRITTEN`, `LSM_SIZE` and
  `VLOG_SIZE`, and `snapshot()`, which returns every counter by name.
- `lsmutil.errors` — `check`, `check2`, `wrap` and `wrapf` (raising or returning
  `WrappedError`), and `assert_true` and `assert_truef` (raising
  `AssertionFailure`).

## Examples

```python
from lsmutil.iterator import Iterator, MergeIterator, ValueStruct
from lsmutil.keys import compare_keys, key_with_ts, parse_key, parse_ts

k = key_with_ts(b"apple", 7)
assert parse_key(k) == b"apple"
assert parse_ts(k) == 7


class ListIterator(Iterator):
    def __init__(self, pairs):
        self.keys = [key_with_ts(key, 0) for key, _ in pairs]
        self.vals = [val for _, val in pairs]
        self.pos = 0

    def next(self):
        self.pos += 1

    def rewind(self):
        self.pos = 0

    def seek(self, key):
        target = key_with_ts(key, 0)
        self.pos = next(
            (n for n, k in enumerate(self.keys) if compare_keys(k, target) >= 0),
            len(self.keys),
        )

    def key(self):
        return self.keys[self.pos]

    def value(self):
        return ValueStruct(value=self.vals[self.pos])

    def valid(self):
        return 0 <= self.pos < len(self.keys)

    def close(self):
        pass


merged = MergeIterator(
    [ListIterator([(b"a", b"1"), (b"c", b"3")]), ListIterator([(b"a", b"x"), (b"b", b"2")])],
    False,
)
merged.rewind()
while merged.valid():
    print(parse_key(merged.key()), merged.value().value)  # a 1, b 2, c 3
    merged.next()
merged.close()
```

```python
from lsmutil.closer import Closer
from lsmutil.watermark import WaterMark

closer = Closer(1)
mark = WaterMark("txn")
mark.init(closer)
mark.begin(1)
mark.done(1)
mark.wait_for_mark(1, timeout=1.0)
assert mark.done_until() == 1
closer.signal_and_wait()
```

## What this package does not do

It is a toolkit, not a database. There is no key-value store to open, no
value log, no sorted tables or levels, no transactions, no garbage collection
and no command-line tool; those are left to code built on these pieces.

## Running the tests

```
pip install -e .[test]
pytest
```