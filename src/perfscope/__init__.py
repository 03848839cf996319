"""perfscope: Opt-in timing and I/O byte instrumentation with serialized console output.

Provides:
- ScopedTimer: Prints "label: elapsed ms" when the scope ends
- StageTimer: Prints a stage header on entry and a TOTAL line on done()
- IOScope: Byte delta of a single borrowed counter (e.g. ctypes.c_uint64)
- MultiIOScope: Byte delta of a computed total read through an accessor
- IOBytesDelta: Immutable begin/end pair with bytes() and mib()
- print_line: Console write serialized across threads

Instrumentation is switched by the PERFSCOPE_ENABLE_PERF environment
variable, read once at import. When disabled, every public name is bound to
a no-op implementation with the same interface.

Usage:
    from perfscope import IOScope, ScopedTimer, StageTimer

    stage = StageTimer("ingest", prefix="[1/3]")
    with ScopedTimer("parse"), IOScope(bytes_read, "parse input"):
        parse(stream)
    stage.done()
"""

from loguru import logger

# Diagnostics stay silent until the application calls logger.enable("perfscope").
logger.disable("perfscope")

from perfscope._config import ENABLE_PERF
from perfscope._core import CounterRef, IOBytesDelta, Reader
from perfscope._output import output_lock
from perfscope._sources import (
    counter_reader,
    process_io_reader,
    sum_counters,
    sum_readers,
)

if ENABLE_PERF:
    from perfscope._clock import ms_since, now
    from perfscope._core import IOScope, MultiIOScope, ScopedTimer, StageTimer
    from perfscope._output import print_line
else:
    from perfscope._null import (
        IOScope,
        MultiIOScope,
        ScopedTimer,
        StageTimer,
        ms_since,
        now,
        print_line,
    )

__all__ = [
    "ENABLE_PERF",
    "CounterRef",
    "IOBytesDelta",
    "IOScope",
    "MultiIOScope",
    "Reader",
    "ScopedTimer",
    "StageTimer",
    "counter_reader",
    "ms_since",
    "now",
    "output_lock",
    "print_line",
    "process_io_reader",
    "sum_counters",
    "sum_readers",
]

__version__ = "0.1.0"
