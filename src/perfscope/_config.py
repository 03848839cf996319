"""Build-time instrumentation switch.

The switch is read from the ``PERFSCOPE_ENABLE_PERF`` environment variable
exactly once, when the package is first imported. Flipping the variable
afterwards has no effect on an already running process.
"""

import os

from beartype import beartype
from loguru import logger

ENV_VAR = "PERFSCOPE_ENABLE_PERF"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@beartype
def parse_flag(raw: str | None) -> bool:
    """Resolve a raw switch value to a bool.

    Unset or blank means enabled. Anything outside the recognized values is
    rejected rather than silently treated as one or the other.
    """
    if raw is None or not raw.strip():
        return True

    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False

    raise ValueError(
        f"Unrecognized {ENV_VAR} value: {raw!r}. "
        f"Expected one of {sorted(_TRUE_VALUES | _FALSE_VALUES)}"
    )


ENABLE_PERF: bool = parse_flag(os.environ.get(ENV_VAR))

logger.debug(f"perfscope instrumentation {'enabled' if ENABLE_PERF else 'disabled'}")
