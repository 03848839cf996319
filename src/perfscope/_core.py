"""Core instrumentation scopes.

Design by Contract:
- Byte deltas use unsigned 64-bit wraparound (end < begin yields a large
  count, never a negative number or an exception)
- I/O scopes finalize exactly once, by finish() or at end of lifetime,
  whichever comes first
- Elapsed time MUST be non-negative (crash if negative)
- Measurement sources are borrowed, never owned; they must stay valid until
  the scope is finalized (caller precondition, not checked)

All classes use beartype for runtime type enforcement.
"""

import sys
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from beartype import beartype
from loguru import logger

from perfscope import _clock, _output

U64_MOD = 1 << 64
MIB = 1024.0 * 1024.0
LABEL_WIDTH = 28

Reader = Callable[[], int]


@runtime_checkable
class CounterRef(Protocol):
    """Anything exposing a readable integer ``value``.

    ``ctypes.c_uint64`` and ``multiprocessing.Value("Q")`` both qualify.
    """

    value: int


@beartype
@dataclass(frozen=True)
class IOBytesDelta:
    """Difference between two snapshots of a byte counter.

    ``end >= begin`` is expected but not enforced. When a counter wraps (or
    a source goes backwards) ``bytes()`` follows unsigned 64-bit arithmetic
    and returns a very large value; this is accepted, not corrected.
    """

    begin: int = 0
    end: int = 0

    def bytes(self) -> int:
        return (self.end - self.begin) % U64_MOD

    def mib(self) -> float:
        return self.bytes() / MIB


def format_io_report(label: str, delta: IOBytesDelta) -> str:
    return f"[io] {label}: {delta.bytes()} B ({delta.mib():g} MiB)\n"


def format_time_report(label: str, elapsed_ms: float) -> str:
    return f"  [time] {label:<{LABEL_WIDTH}}{elapsed_ms:g} ms\n"


def check_elapsed(elapsed_ms: float) -> float:
    assert elapsed_ms >= 0, (
        f"Elapsed time cannot be negative: {elapsed_ms:.6f}ms. "
        f"Monotonic clock went backwards or timing bug."
    )
    return elapsed_ms


class _ByteScope(ABC):
    """Shared Active -> Finalized state machine for the I/O scopes."""

    _source: Any

    def __init__(self, source: Any, label: str) -> None:
        self._source = source
        self._label = label
        self._begin = self._read() if source is not None else 0
        self._finished = False
        self._last = IOBytesDelta()

    @abstractmethod
    def _read(self) -> int:
        """Current value of the measurement source."""

    @property
    def label(self) -> str:
        return self._label

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def delta(self) -> IOBytesDelta | None:
        """Cached delta, or None while the scope is still active."""
        return self._last if self._finished else None

    def finish(self) -> IOBytesDelta:
        """Finalize and return the byte delta.

        Idempotent: only the first call reads the source, every later call
        returns the cached delta.
        """
        if self._finished:
            return self._last

        if self._source is None:
            logger.debug(f"{type(self).__name__} '{self._label}' has no source; zero delta")
            end = self._begin
        else:
            end = self._read()

        self._last = IOBytesDelta(self._begin, end)
        self._finished = True
        return self._last

    def close(self) -> None:
        """End of lifetime: finalize if still active, reporting when labelled."""
        if self._finished:
            return

        delta = self.finish()
        if self._source is not None and self._label:
            _output.print_line(format_io_report(self._label, delta), sys.stderr)

    def __enter__(self) -> "_ByteScope":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class IOScope(_ByteScope):
    """Byte delta of a single externally-owned counter.

    Args:
        counter: Borrowed counter reference, or None for a no-op scope
        label: Report label; without one the scope never prints

    Usage:
        written = ctypes.c_uint64(0)
        with IOScope(written, "flush segments"):
            write_segments(written)
        # stderr: [io] flush segments: 1048576 B (1 MiB)

    Design by Contract:
        - counter.value is read once at construction and once at finalization
        - finish() after finalization never touches the counter
    """

    _source: CounterRef | None

    @beartype
    def __init__(self, counter: CounterRef | None = None, label: str = "") -> None:
        super().__init__(counter, label)

    def _read(self) -> int:
        return self._source.value

    def __enter__(self) -> "IOScope":
        return self


class MultiIOScope(_ByteScope):
    """Byte delta of a computed total, read through a zero-argument accessor.

    Generalizes IOScope to totals spread across several owners, e.g. the sum
    of per-thread counters:

        with MultiIOScope(lambda: sum(w.bytes_read for w in workers), "scan"):
            run(workers)

    Args:
        reader: Zero-argument callable returning the current total, or None
            for a no-op scope
        label: Report label; without one the scope never prints

    Exceptions raised by ``reader`` propagate to the caller.
    """

    _source: Reader | None

    @beartype
    def __init__(self, reader: Reader | None = None, label: str = "") -> None:
        super().__init__(reader, label)

    def _read(self) -> int:
        return self._source()

    def __enter__(self) -> "MultiIOScope":
        return self


class ScopedTimer:
    """Prints ``label: elapsed ms`` when the scope ends.

    There is no explicit finalize. The line is emitted once, when the scope
    ends, measured from construction; closing again is a no-op.

    Usage:
        with ScopedTimer("decode"):
            decode(batch)
        # stdout:   [time] decode                      12.3457 ms
    """

    @beartype
    def __init__(self, label: str | None = None) -> None:
        self.label: str = label or ""
        self.elapsed_ms: float = 0.0
        self._closed = False
        self._start: float = _clock.now()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True

        self.elapsed_ms = check_elapsed(_clock.ms_since(self._start))

        _output.print_line(format_time_report(self.label, self.elapsed_ms))

    def __enter__(self) -> "ScopedTimer":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class StageTimer:
    """Header on entry, TOTAL line on every explicit done().

    Leaving the scope without calling done() prints nothing: a stage's total
    only means something once the stage has actually been reached.

    Usage:
        with StageTimer("build index", prefix="[3/5]") as stage:
            ...
            stage.done()
        # stdout:
        #
        # [3/5] build index
        #   [time] TOTAL                       812.04 ms
    """

    @beartype
    def __init__(self, name: str | None = None, prefix: str = "") -> None:
        self.name: str = name or ""
        self.prefix: str = prefix
        self._start: float = _clock.now()

        separator = " " if prefix else ""
        _output.print_line(f"\n{prefix}{separator}{self.name}\n")

    def done(self) -> float:
        """Print the TOTAL line and return milliseconds since construction.

        Not cached: each call re-measures and re-prints.
        """
        elapsed_ms = check_elapsed(_clock.ms_since(self._start))

        _output.print_line(format_time_report("TOTAL", elapsed_ms))
        return elapsed_ms

    def __enter__(self) -> "StageTimer":
        return self

    def __exit__(self, *args: Any) -> None:
        return None
