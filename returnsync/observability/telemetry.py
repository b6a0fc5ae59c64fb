"""
In-process telemetry for matching and ingest runs.

Nothing is shipped externally; events go to the log and counters/timings are
kept in memory so tests and the CLI can report on a run. Counters are
observational only, no engine decision ever reads them.
"""

from __future__ import annotations

import contextlib
import logging
import time
from collections.abc import Iterator
from typing import Any

logger = logging.getLogger("returnsync.telemetry")

_COUNTERS: dict[str, int] = {}
_TIMINGS: dict[str, list[float]] = {}


def log_event(event_name: str, **fields: Any) -> None:
    """
    Structured log event.

    Side Effects:
        - Writes to logger (info level)
    """
    logger.info("event=%s %s", event_name, fields)


def counter(name: str, increment: int = 1) -> int:
    """
    Increment an in-memory counter and emit a debug log.

    Side Effects:
        - Modifies _COUNTERS dict (in-memory state)
    """
    value = _COUNTERS.get(name, 0) + increment
    _COUNTERS[name] = value
    logger.debug("counter=%s value=%s", name, value)
    return value


def get_counter(name: str) -> int:
    return _COUNTERS.get(name, 0)


def snapshot_counters(prefix: str = "") -> dict[str, int]:
    """Copy of the counters whose name starts with ``prefix``."""
    return {k: v for k, v in _COUNTERS.items() if k.startswith(prefix)}


@contextlib.contextmanager
def time_block(metric_name: str) -> Iterator[None]:
    """
    Time a block and record the elapsed seconds under ``metric_name``.

    Side Effects:
        - Appends to _TIMINGS dict (in-memory state)
        - Writes to logger (debug level)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        logger.debug("timing=%s seconds=%.6f", metric_name, elapsed)
        _TIMINGS.setdefault(metric_name, []).append(elapsed)


def get_timings(metric_name: str) -> list[float]:
    return list(_TIMINGS.get(metric_name, []))


def reset_counters() -> None:
    """
    Clear counters and timings (useful for tests).

    Side Effects:
        - Clears _COUNTERS and _TIMINGS
    """
    _COUNTERS.clear()
    _TIMINGS.clear()
