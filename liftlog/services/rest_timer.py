"""Rest countdown state machine.

States: IDLE -> RUNNING on start; RUNNING <-> PAUSED on pause/resume;
RUNNING -> EXPIRED when the countdown reaches zero (notifier fires once);
RUNNING/PAUSED/EXPIRED -> IDLE on skip. EXPIRED is sticky: it stays until
skip()/dismiss() or a new start(). A new start always supersedes the current
countdown, cancelling its tick source first so a stale tick cannot expire the
new one.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from liftlog.core.enums import TimerStatus
from liftlog.schemas.session import SetRef, TimerSnapshot
from liftlog.services.ports import Notifier
from liftlog.services.scheduler import Cancellable, Scheduler

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0

TimerListener = Callable[[TimerSnapshot], None]


class RestTimer:
    def __init__(self, scheduler: Scheduler, notifier: Notifier | None = None) -> None:
        self._scheduler = scheduler
        self._notifier = notifier
        self._state = TimerSnapshot()
        self._ticker: Cancellable | None = None
        self._listeners: list[TimerListener] = []
        self._closed = False

    @property
    def state(self) -> TimerSnapshot:
        return self._state

    @property
    def status(self) -> TimerStatus:
        return self._state.status

    @property
    def remaining_seconds(self) -> int:
        return self._state.remaining_seconds

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_state(self, **changes) -> None:
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _start_ticking(self) -> None:
        self._stop_ticking()
        self._ticker = self._scheduler.call_every(TICK_SECONDS, self.tick)

    def _stop_ticking(self) -> None:
        if self._ticker is not None:
            self._ticker.cancel()
            self._ticker = None

    def _expire(self) -> None:
        self._stop_ticking()
        self._set_state(status=TimerStatus.EXPIRED, remaining_seconds=0)
        if self._notifier is not None:
            try:
                self._notifier.on_timer_expired()
            except Exception:
                logger.exception("Timer expiry notification failed")

    def start(self, seconds: int, set_ref: SetRef | None = None) -> None:
        """Start a countdown, superseding any running, paused or expired one."""
        if self._closed:
            logger.info("Ignoring start on a closed rest timer")
            return
        self._stop_ticking()
        if seconds <= 0:
            self._state = TimerSnapshot()
            self._set_state()
            return
        self._state = TimerSnapshot(
            status=TimerStatus.RUNNING,
            remaining_seconds=seconds,
            total_seconds=seconds,
            set_ref=set_ref,
        )
        self._set_state()
        self._start_ticking()
        logger.debug("Rest timer started for %ss", seconds)

    def tick(self) -> None:
        """Advance one second; only meaningful while RUNNING."""
        if self._state.status != TimerStatus.RUNNING:
            return
        remaining = self._state.remaining_seconds - 1
        if remaining <= 0:
            self._expire()
        else:
            self._set_state(remaining_seconds=remaining)

    def pause(self) -> None:
        if self._state.status != TimerStatus.RUNNING:
            return
        self._stop_ticking()
        self._set_state(status=TimerStatus.PAUSED)

    def resume(self) -> None:
        if self._state.status != TimerStatus.PAUSED or self._closed:
            return
        self._set_state(status=TimerStatus.RUNNING)
        self._start_ticking()

    def skip(self) -> None:
        """Abandon the countdown (or acknowledge expiry) and return to IDLE."""
        self._stop_ticking()
        if self._state.status == TimerStatus.IDLE:
            return
        self._state = TimerSnapshot()
        self._set_state()

    def dismiss(self) -> None:
        """Acknowledge an EXPIRED timer."""
        if self._state.status == TimerStatus.EXPIRED:
            self.skip()

    def add_time(self, delta: int) -> None:
        if self._state.status not in (TimerStatus.RUNNING, TimerStatus.PAUSED) or delta <= 0:
            return
        self._set_state(
            remaining_seconds=self._state.remaining_seconds + delta,
            total_seconds=self._state.total_seconds + delta,
        )

    def subtract_time(self, delta: int) -> None:
        """Shorten the countdown; reaching zero expires it immediately."""
        if self._state.status not in (TimerStatus.RUNNING, TimerStatus.PAUSED) or delta <= 0:
            return
        remaining = max(0, self._state.remaining_seconds - delta)
        total = max(1, self._state.total_seconds - delta)
        if remaining == 0:
            self._set_state(total_seconds=total)
            self._expire()
        else:
            self._set_state(remaining_seconds=remaining, total_seconds=total)

    def close(self) -> None:
        """Stop the tick source for good; the countdown is discarded."""
        self._stop_ticking()
        self._closed = True
        if self._state.status != TimerStatus.IDLE:
            self._state = TimerSnapshot()
            self._set_state()
