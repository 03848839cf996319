"""Ready-made accessors for MultiIOScope.

Counters are read without any locking; if the application mutates them
concurrently, synchronizing those reads is the application's job.
"""

from collections.abc import Callable

import psutil
from beartype import beartype

from perfscope._core import CounterRef

_IO_KINDS = ("read", "write", "total")


@beartype
def counter_reader(counter: CounterRef) -> Callable[[], int]:
    """Accessor over a single counter reference."""
    return lambda: counter.value


@beartype
def sum_readers(*readers: Callable[[], int]) -> Callable[[], int]:
    """Accessor returning the sum of several accessors.

    Example:
        reader = sum_readers(counter_reader(a), process_io_reader("write"))
    """
    assert readers, "sum_readers needs at least one reader"
    return lambda: sum(read() for read in readers)


@beartype
def sum_counters(*counters: CounterRef) -> Callable[[], int]:
    """Accessor returning the sum of several counter references.

    Typical use is one counter per worker thread, summed into a single
    stage-level total.
    """
    assert counters, "sum_counters needs at least one counter"
    return lambda: sum(counter.value for counter in counters)


@beartype
def process_io_reader(kind: str = "total", pid: int | None = None) -> Callable[[], int]:
    """Accessor over the OS cumulative I/O byte counters of a process.

    Args:
        kind: "read" (read_bytes), "write" (write_bytes) or "total" (both)
        pid: Process to observe; the current process when None

    Not every platform exposes per-process I/O counters (macOS does not);
    there the psutil error propagates when the reader is built.
    """
    if kind not in _IO_KINDS:
        raise ValueError(f"Unknown I/O counter kind: {kind!r}. Expected one of {_IO_KINDS}")

    process = psutil.Process(pid)
    process.io_counters()

    def read() -> int:
        counters = process.io_counters()
        if kind == "read":
            return counters.read_bytes
        if kind == "write":
            return counters.write_bytes
        return counters.read_bytes + counters.write_bytes

    return read
