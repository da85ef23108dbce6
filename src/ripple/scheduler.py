"""Host scheduler: tracked tasks and timers for stable-state detection.

The observer never touches an event loop directly. It is handed a
``HostScheduler`` and does all of its deferred work through it, so the host
can tell when every emission triggered by a source change has settled.

Two hosts are provided:

- ``AsyncioScheduler``: timers on an asyncio event loop, plus
  ``wait_stable()`` for coroutines that need to wait for quiescence.
- ``ManualScheduler``: a virtual clock advanced by hand, for synchronous
  hosts and deterministic tests.

Both count scheduled tasks and live timers as outstanding work. The host is
*stable* when neither remains; ``on_stable`` callbacks fire when the
outermost ``run()`` (or timer callback) returns with nothing outstanding.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from ripple._types import Work


class TaskState(StrEnum):
    """Lifecycle of a scheduled host task."""

    SCHEDULED = "scheduled"
    RUNNING = "running"
    DONE = "done"
    CANCELLED = "cancelled"


class Task:
    """A tracked unit of work, outstanding until invoked or cancelled.

    Registering a task does not run it: whoever holds the task decides when
    to ``invoke()`` it. Until then the host counts it as pending work.

    """

    __slots__ = ("_cancel", "_cleanup", "_on_finish", "_state", "_work", "name")

    def __init__(
        self,
        name: str,
        work: Work,
        *,
        cancel: Work | None = None,
        cleanup: Work | None = None,
        on_finish: Callable[[Task], None] | None = None,
    ) -> None:
        self.name = name
        self._work = work
        self._cancel = cancel
        self._cleanup = cleanup
        self._on_finish = on_finish
        self._state = TaskState.SCHEDULED

    @property
    def state(self) -> TaskState:
        return self._state

    def invoke(self) -> Any:
        """Run the work once. Later calls, or calls after cancel, do nothing."""
        if self._state is not TaskState.SCHEDULED:
            return None
        self._state = TaskState.RUNNING
        try:
            return self._work()
        finally:
            self._state = TaskState.DONE
            if self._cleanup is not None:
                self._cleanup()
            self._finish()

    def cancel(self) -> bool:
        """Withdraw the task if it has not run. Returns True if withdrawn."""
        if self._state is not TaskState.SCHEDULED:
            return False
        self._state = TaskState.CANCELLED
        if self._cancel is not None:
            self._cancel()
        self._finish()
        return True

    def _finish(self) -> None:
        on_finish, self._on_finish = self._on_finish, None
        if on_finish is not None:
            on_finish(self)

    def __repr__(self) -> str:
        return f"Task({self.name!r}, state={self._state.value!r})"


class TimerHandle:
    """A pending ``call_later`` callback."""

    __slots__ = ("_done", "_fn", "_native", "_on_done", "delay_ms")

    def __init__(
        self,
        fn: Work,
        delay_ms: int,
        on_done: Callable[[TimerHandle], None],
    ) -> None:
        self.delay_ms = delay_ms
        self._fn = fn
        self._on_done = on_done
        self._native: asyncio.TimerHandle | None = None
        self._done = False

    @property
    def active(self) -> bool:
        """True until the timer fires or is cancelled."""
        return not self._done

    def cancel(self) -> None:
        if self._done:
            return
        self._done = True
        if self._native is not None:
            self._native.cancel()
        self._on_done(self)

    def _fire(self) -> None:
        if self._done:
            return
        self._done = True
        self._on_done(self)
        self._fn()


class HostScheduler(Protocol):
    """Capability the observer needs from its host."""

    def schedule_task(
        self,
        name: str,
        work: Work,
        cancel: Work | None = None,
        cleanup: Work | None = None,
    ) -> Task: ...

    def run(self, fn: Callable[[], Any]) -> Any: ...

    def call_later(self, delay_ms: int, fn: Work) -> TimerHandle: ...


class _TrackingHost:
    """Outstanding-work bookkeeping shared by the concrete schedulers."""

    def __init__(self) -> None:
        self._tasks: list[Task] = []
        self._timers: set[TimerHandle] = set()
        self._stable_callbacks: list[Callable[[], Any]] = []
        self._depth = 0

    # ----- HostScheduler -----

    def schedule_task(
        self,
        name: str,
        work: Work,
        cancel: Work | None = None,
        cleanup: Work | None = None,
    ) -> Task:
        task = Task(
            name,
            work,
            cancel=cancel,
            cleanup=cleanup,
            on_finish=self._task_finished,
        )
        self._tasks.append(task)
        return task

    def run(self, fn: Callable[[], Any]) -> Any:
        """Run ``fn`` in the tracked context, then check for stability."""
        self._depth += 1
        try:
            return fn()
        finally:
            self._depth -= 1
            if self._depth == 0:
                self._check_stable()

    def call_later(self, delay_ms: int, fn: Work) -> TimerHandle:
        timer = TimerHandle(fn, delay_ms, self._timer_done)
        self._timers.add(timer)
        self._start_timer(timer)
        return timer

    # ----- Stability -----

    @property
    def is_stable(self) -> bool:
        """True when no task or timer is outstanding."""
        return not self._tasks and not self._timers

    @property
    def pending_tasks(self) -> tuple[str, ...]:
        """Names of tasks registered but not yet invoked or cancelled."""
        return tuple(task.name for task in self._tasks)

    @property
    def pending_timers(self) -> int:
        return len(self._timers)

    def on_stable(self, callback: Callable[[], Any]) -> Callable[[], None]:
        """Call ``callback`` every time the host settles.

        Returns a function that unregisters the callback.

        """
        self._stable_callbacks.append(callback)

        def unregister() -> None:
            if callback in self._stable_callbacks:
                self._stable_callbacks.remove(callback)

        return unregister

    def _check_stable(self) -> None:
        if not self.is_stable:
            return
        for callback in list(self._stable_callbacks):
            callback()

    def _task_finished(self, task: Task) -> None:
        if task in self._tasks:
            self._tasks.remove(task)

    def _timer_done(self, timer: TimerHandle) -> None:
        self._timers.discard(timer)

    def _start_timer(self, timer: TimerHandle) -> None:
        raise NotImplementedError


class AsyncioScheduler(_TrackingHost):
    """Host scheduler backed by an asyncio event loop.

    Args:
        loop: Loop to schedule timers on. Defaults to the running loop at
            the time the first timer is requested.

    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        super().__init__()
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def _start_timer(self, timer: TimerHandle) -> None:
        timer._native = self.loop.call_later(
            timer.delay_ms / 1000, self.run, timer._fire
        )

    async def wait_stable(self, timeout: float | None = None) -> None:
        """Wait until no task or timer is outstanding.

        Raises:
            TimeoutError: The host did not settle within ``timeout`` seconds.

        """
        if self.is_stable:
            return
        settled: asyncio.Future[None] = self.loop.create_future()

        def resolve() -> None:
            if not settled.done():
                settled.set_result(None)

        unregister = self.on_stable(resolve)
        try:
            await asyncio.wait_for(settled, timeout)
        finally:
            unregister()


class ManualScheduler(_TrackingHost):
    """Host scheduler driven by a virtual clock.

    Timers fire only from ``advance()`` or ``flush()``, in due order; timers
    due at the same instant fire in the order they were created.

    """

    def __init__(self) -> None:
        super().__init__()
        self._now_ms = 0
        self._queue: list[tuple[int, int, TimerHandle]] = []
        self._seq = itertools.count()

    @property
    def now_ms(self) -> int:
        """Current virtual time in milliseconds."""
        return self._now_ms

    def _start_timer(self, timer: TimerHandle) -> None:
        due = self._now_ms + timer.delay_ms
        heapq.heappush(self._queue, (due, next(self._seq), timer))

    def advance(self, ms: int) -> int:
        """Move the clock forward ``ms`` and fire every timer that falls due.

        Returns the number of timers fired.

        """
        target = self._now_ms + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, timer = heapq.heappop(self._queue)
            self._now_ms = due
            if timer.active:
                self.run(timer._fire)
                fired += 1
        self._now_ms = target
        return fired

    def flush(self) -> int:
        """Fire timers until none remain, advancing the clock as needed."""
        fired = 0
        while self._queue:
            due, _, timer = heapq.heappop(self._queue)
            self._now_ms = max(self._now_ms, due)
            if timer.active:
                self.run(timer._fire)
                fired += 1
        return fired
