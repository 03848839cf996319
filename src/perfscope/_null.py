"""No-op implementations bound when instrumentation is disabled.

Same public surface as the real scopes. Nothing here reads a clock, a
counter or an accessor, and nothing writes to the console. Construction and
end of lifetime stay well defined; results are zero-valued. Constructors are
type-checked like the real ones, so bad arguments fail the same way in both
builds.
"""

from typing import Any, TextIO

from beartype import beartype

from perfscope._core import CounterRef, IOBytesDelta, Reader


def now() -> float:
    return 0.0


def ms_since(start: float) -> float:
    return 0.0


def print_line(text: str, stream: TextIO | None = None) -> None:
    return None


class _NullByteScope:
    def __init__(self, label: str) -> None:
        self._label = label
        self._finished = False

    @property
    def label(self) -> str:
        return self._label

    @property
    def finished(self) -> bool:
        return self._finished

    @property
    def delta(self) -> IOBytesDelta | None:
        return IOBytesDelta() if self._finished else None

    def finish(self) -> IOBytesDelta:
        self._finished = True
        return IOBytesDelta()

    def close(self) -> None:
        self._finished = True

    def __enter__(self) -> "_NullByteScope":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()


class IOScope(_NullByteScope):
    @beartype
    def __init__(self, counter: CounterRef | None = None, label: str = "") -> None:
        super().__init__(label)


class MultiIOScope(_NullByteScope):
    @beartype
    def __init__(self, reader: Reader | None = None, label: str = "") -> None:
        super().__init__(label)


class ScopedTimer:
    @beartype
    def __init__(self, label: str | None = None) -> None:
        self.label: str = label or ""
        self.elapsed_ms: float = 0.0

    def close(self) -> None:
        return None

    def __enter__(self) -> "ScopedTimer":
        return self

    def __exit__(self, *args: Any) -> None:
        return None


class StageTimer:
    @beartype
    def __init__(self, name: str | None = None, prefix: str = "") -> None:
        self.name: str = name or ""
        self.prefix: str = prefix

    def done(self) -> float:
        return 0.0

    def __enter__(self) -> "StageTimer":
        return self

    def __exit__(self, *args: Any) -> None:
        return None
