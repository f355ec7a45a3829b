"""
scheduler.py — Timers for auto-play
====================================
The playback controller never sleeps or spawns threads.  It asks a
scheduler to call it back later and keeps the returned handle so it can
cancel().

    PollingScheduler – timers fire when the host calls poll(); this is the
                       tick model a request/response server or a GUI idle
                       loop uses (call poll() every ~50 ms)
    AsyncioScheduler – timers are asyncio loop.call_later handles

Both are single-threaded: a callback runs on whichever thread called
poll() / runs the loop.
"""

import asyncio
import itertools
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional


class Scheduler:
    """Anything with call_later(delay_ms, callback) → handle with .cancel()."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]):
        raise NotImplementedError


# ---------------------------------------------------------------------------
# Polling
# ---------------------------------------------------------------------------
@dataclass
class PendingTimer:
    due:       float
    seq:       int
    callback:  Callable[[], None] = field(repr=False)
    cancelled: bool               = False

    def cancel(self) -> None:
        self.cancelled = True


class PollingScheduler(Scheduler):
    """
    Attributes:
        clock : Monotonic seconds source; tests inject a fake one.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self.clock = clock
        self._timers: List[PendingTimer] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> PendingTimer:
        timer = PendingTimer(due=self.clock() + delay_ms / 1000.0, seq=next(self._seq), callback=callback)
        self._timers.append(timer)
        return timer

    def poll(self) -> int:
        """Fire every timer that is due.  Returns how many callbacks ran."""
        now = self.clock()
        due = sorted(
            (t for t in self._timers if not t.cancelled and t.due <= now),
            key=lambda t: (t.due, t.seq),
        )
        self._timers = [t for t in self._timers if not t.cancelled and t.due > now]

        fired = 0
        for timer in due:
            # an earlier callback in this batch may have cancelled it
            if timer.cancelled:
                continue
            timer.callback()
            fired += 1
        return fired

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)


# ---------------------------------------------------------------------------
# asyncio
# ---------------------------------------------------------------------------
class AsyncioScheduler(Scheduler):
    """Wraps loop.call_later.  Without an explicit loop, uses the running one."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(delay_ms / 1000.0, callback)
