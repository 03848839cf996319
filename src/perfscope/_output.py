"""Serialized console output.

Every report line goes through ``print_line``, which holds one process-wide
lock for the duration of a single write + flush. Lines from concurrent
threads therefore never interleave, though their order is unspecified.

The lock is created when this module is first imported and lives for the
rest of the process.
"""

import sys
import threading
from typing import TextIO

from loguru import logger

_OUTPUT_LOCK = threading.Lock()


def output_lock() -> threading.Lock:
    return _OUTPUT_LOCK


def print_line(text: str, stream: TextIO | None = None) -> None:
    """Write ``text`` verbatim to ``stream`` (stdout when None) under the lock.

    The stream is resolved at call time so that redirection of
    ``sys.stdout`` / ``sys.stderr`` is honoured. A failed write (closed or
    broken stream) is not an error of the caller; it is logged and dropped.
    """
    with _OUTPUT_LOCK:
        target = sys.stdout if stream is None else stream
        try:
            target.write(text)
            target.flush()
        except (OSError, ValueError) as exc:
            logger.debug(f"Console write dropped: {exc}")
