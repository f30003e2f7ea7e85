"""Timers and bounded retries for guidance execution.

Transient visual state (tab indicator, section and field highlights, tooltip
auto-dismiss) is removed by timers the executor owns, so ``cleanup()`` can
flush them deterministically instead of leaving stray callbacks behind.

Host UI readiness (a settings panel that renders a moment after it is opened)
is handled with a fixed-interval retry bounded by a maximum attempt count.

Example:
    >>> policy = RetryPolicy(max_attempts=5, interval_ms=100)
    >>> tabs = await retry_until(lambda: document.query_selector_all(".tab") or None, policy)
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Fixed-interval retry bounded by attempt count."""

    max_attempts: int = 5
    """Total number of lookups, including the first one."""

    interval_ms: int = 100
    """Pause between lookups in milliseconds."""

    def __post_init__(self) -> None:
        """Validate policy parameters."""
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.interval_ms < 0:
            raise ValueError("interval_ms must be >= 0")


async def sleep_or_abort(delay_ms: int, abort_event: asyncio.Event | None = None) -> bool:
    """Sleep, waking early if the abort event is set.

    Returns:
        True if the sleep completed, False if aborted.
    """
    delay_s = delay_ms / 1000
    if abort_event is None:
        await asyncio.sleep(delay_s)
        return True
    if abort_event.is_set():
        return False
    try:
        await asyncio.wait_for(abort_event.wait(), timeout=delay_s)
        return False
    except asyncio.TimeoutError:
        return True


async def retry_until(
    lookup: Callable[[], T | None],
    policy: RetryPolicy,
    abort_event: asyncio.Event | None = None,
) -> T | None:
    """Call ``lookup`` until it returns something truthy.

    Returns:
        The first truthy lookup result, or None when attempts run out or the
        abort event fires.
    """
    for attempt in range(1, policy.max_attempts + 1):
        result = lookup()
        if result:
            return result
        if attempt == policy.max_attempts:
            break
        if not await sleep_or_abort(policy.interval_ms, abort_event):
            return None
    logger.debug("Gave up after %d attempts", policy.max_attempts)
    return None


class TimerRegistry:
    """Owns scheduled callbacks so they can be cancelled or flushed together."""

    def __init__(self) -> None:
        self._pending: dict[int, tuple[asyncio.TimerHandle, Callable[[], None]]] = {}
        self._ids = itertools.count(1)

    def schedule(self, delay_ms: int, callback: Callable[[], None]) -> int:
        """Run ``callback`` after ``delay_ms``; returns a handle id.

        Must be called from within a running event loop.
        """
        timer_id = next(self._ids)
        loop = asyncio.get_running_loop()
        handle = loop.call_later(delay_ms / 1000, self._fire, timer_id)
        self._pending[timer_id] = (handle, callback)
        return timer_id

    def _fire(self, timer_id: int) -> None:
        entry = self._pending.pop(timer_id, None)
        if entry is not None:
            entry[1]()

    def cancel(self, timer_id: int | None) -> None:
        """Cancel a pending timer without running it. Unknown ids are ignored."""
        if timer_id is None:
            return
        entry = self._pending.pop(timer_id, None)
        if entry is not None:
            entry[0].cancel()

    def flush(self) -> None:
        """Cancel every pending timer and run its callback now."""
        while self._pending:
            timer_id = next(iter(self._pending))
            handle, callback = self._pending.pop(timer_id)
            handle.cancel()
            callback()

    @property
    def pending(self) -> int:
        return len(self._pending)
