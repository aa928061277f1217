from __future__ import annotations

import functools
import heapq
import itertools
import logging
import threading
import time
from typing import Any, Callable, Iterable, List, Optional, Protocol, Sequence, Tuple

from .message_models import ScheduledEmission, TypedValue

logger = logging.getLogger(__name__)


class MessageSink(Protocol):
    def send(self, path: str, args: Sequence[TypedValue]) -> None: ...


class TimerFacility(Protocol):
    def schedule_after(self, delay_ms: float, callback: Callable[[], None]) -> Any: ...


class BackgroundTimerFacility:
    """
    Single daemon worker draining a deadline heap.
    - callbacks run one at a time on the worker thread
    - equal deadlines fire in submission order
    - close() stops the worker; anything still pending is dropped
    """

    def __init__(self, *, now_fn: Callable[[], float] = time.monotonic, name: str = "osc_timer_loop") -> None:
        self._now_fn = now_fn
        self._name = name
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._thread: Optional[threading.Thread] = None
        self._closed = False

    @property
    def pending_count(self) -> int:
        with self._cond:
            return len(self._queue)

    def schedule_after(self, delay_ms: float, callback: Callable[[], None]) -> None:
        due = self._now_fn() + max(0.0, float(delay_ms)) / 1000.0
        with self._cond:
            if self._closed:
                raise RuntimeError("timer facility is closed")
            heapq.heappush(self._queue, (due, next(self._seq), callback))
            if self._thread is None:
                self._thread = threading.Thread(target=self._run_loop, name=self._name, daemon=True)
                self._thread.start()
            self._cond.notify()

    def close(self, timeout: Optional[float] = 1.0) -> None:
        with self._cond:
            self._closed = True
            self._queue.clear()
            self._cond.notify_all()
            thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)

    def _run_loop(self) -> None:
        while True:
            with self._cond:
                while not self._closed:
                    if not self._queue:
                        self._cond.wait()
                        continue
                    wait_for = self._queue[0][0] - self._now_fn()
                    if wait_for <= 0:
                        break
                    self._cond.wait(wait_for)
                if self._closed:
                    return
                _due, _seq, callback = heapq.heappop(self._queue)

            try:
                callback()
            except Exception:
                logger.exception("scheduled callback failed")


class VirtualTimerFacility:
    """
    Deterministic clock for tests: nothing fires until advance() moves time past a deadline.
    """

    def __init__(self) -> None:
        self.now_ms: float = 0.0
        self._queue: List[Tuple[float, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    def schedule_after(self, delay_ms: float, callback: Callable[[], None]) -> None:
        due = self.now_ms + max(0.0, float(delay_ms))
        heapq.heappush(self._queue, (due, next(self._seq), callback))

    def advance(self, ms: float) -> int:
        target = self.now_ms + max(0.0, float(ms))
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _seq, callback = heapq.heappop(self._queue)
            self.now_ms = due
            callback()
            fired += 1
        self.now_ms = target
        return fired

    def run_until_idle(self) -> int:
        fired = 0
        while self._queue:
            fired += self.advance(self._queue[0][0] - self.now_ms)
        return fired


class EmissionScheduler:
    def __init__(self, timer_facility: TimerFacility):
        self._timer_facility = timer_facility

    def schedule(self, emissions: Iterable[ScheduledEmission], sink: MessageSink) -> int:
        """
        Fire-and-forget: every emission is handed to the timer facility with its own delay
        measured from this call, and the call returns without waiting for any of them.
        """
        count = 0
        for emission in emissions:
            self._timer_facility.schedule_after(
                max(0.0, float(emission.delay_ms)),
                functools.partial(self._dispatch, sink, emission),
            )
            count += 1
        return count

    @staticmethod
    def _dispatch(sink: MessageSink, emission: ScheduledEmission) -> None:
        try:
            sink.send(emission.path, list(emission.payload))
        except Exception as e:
            logger.error("Sending OSC %s failed: %s", emission.path, e)
