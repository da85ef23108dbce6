"""Tests for ripple.scheduler: tracked tasks, timers and stability."""

from __future__ import annotations

import asyncio
from typing import Any

import pytest

from ripple.scheduler import AsyncioScheduler, ManualScheduler, Task, TaskState


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------


class TestTask:
    """Tasks run at most once and are either invoked or cancelled."""

    def test_invoke_runs_work_once(self) -> None:
        calls: list[str] = []
        task = Task("emit", lambda: calls.append("work"))

        task.invoke()
        task.invoke()

        assert calls == ["work"]
        assert task.state is TaskState.DONE

    def test_invoke_returns_work_result(self) -> None:
        assert Task("t", lambda: 7).invoke() == 7

    def test_cleanup_runs_after_work(self) -> None:
        calls: list[str] = []
        task = Task("t", lambda: calls.append("work"), cleanup=lambda: calls.append("cleanup"))
        task.invoke()
        assert calls == ["work", "cleanup"]

    def test_cancel_runs_cancel_callback(self) -> None:
        calls: list[str] = []
        task = Task("t", lambda: calls.append("work"), cancel=lambda: calls.append("cancel"))

        assert task.cancel() is True
        assert task.cancel() is False
        task.invoke()

        assert calls == ["cancel"]
        assert task.state is TaskState.CANCELLED

    def test_cancel_after_invoke_is_noop(self) -> None:
        task = Task("t", lambda: None)
        task.invoke()
        assert task.cancel() is False
        assert task.state is TaskState.DONE

    def test_work_exception_propagates_and_finishes(self) -> None:
        finished: list[Task] = []

        def boom() -> None:
            raise ValueError("boom")

        task = Task("t", boom, on_finish=finished.append)
        with pytest.raises(ValueError, match="boom"):
            task.invoke()
        assert task.state is TaskState.DONE
        assert finished == [task]

    def test_repr(self) -> None:
        assert repr(Task("emit", lambda: None)) == "Task('emit', state='scheduled')"


# ---------------------------------------------------------------------------
# ManualScheduler
# ---------------------------------------------------------------------------


class TestManualSchedulerTimers:
    """Timers fire from advance()/flush() in due order."""

    def test_advance_fires_due_timers(self, host: ManualScheduler) -> None:
        fired: list[str] = []
        host.call_later(50, lambda: fired.append("a"))

        assert host.advance(49) == 0
        assert fired == []
        assert host.advance(1) == 1
        assert fired == ["a"]
        assert host.now_ms == 50

    def test_due_order_then_creation_order(self, host: ManualScheduler) -> None:
        fired: list[str] = []
        host.call_later(20, lambda: fired.append("late"))
        host.call_later(10, lambda: fired.append("first"))
        host.call_later(10, lambda: fired.append("second"))

        host.advance(100)

        assert fired == ["first", "second", "late"]

    def test_cancelled_timer_does_not_fire(self, host: ManualScheduler) -> None:
        fired: list[str] = []
        timer = host.call_later(10, lambda: fired.append("x"))
        timer.cancel()

        assert host.flush() == 0
        assert fired == []
        assert not timer.active

    def test_zero_delay_fires_on_advance_zero(self, host: ManualScheduler) -> None:
        fired: list[str] = []
        host.call_later(0, lambda: fired.append("now"))
        assert fired == []
        host.advance(0)
        assert fired == ["now"]

    def test_flush_fires_timers_scheduled_by_timers(self, host: ManualScheduler) -> None:
        fired: list[int] = []

        def chain() -> None:
            fired.append(host.now_ms)
            if len(fired) < 3:
                host.call_later(5, chain)

        host.call_later(5, chain)
        assert host.flush() == 3
        assert fired == [5, 10, 15]


class TestStability:
    """The host is stable when no task or timer is outstanding."""

    def test_initially_stable(self, host: ManualScheduler) -> None:
        assert host.is_stable

    def test_task_is_outstanding_until_invoked(self, host: ManualScheduler) -> None:
        task = host.schedule_task("emit", lambda: None)
        assert not host.is_stable
        assert host.pending_tasks == ("emit",)

        task.invoke()
        assert host.is_stable
        assert host.pending_tasks == ()

    def test_cancelled_task_is_not_outstanding(self, host: ManualScheduler) -> None:
        task = host.schedule_task("emit", lambda: None)
        task.cancel()
        assert host.is_stable

    def test_timer_is_outstanding(self, host: ManualScheduler) -> None:
        host.call_later(10, lambda: None)
        assert not host.is_stable
        assert host.pending_timers == 1
        host.flush()
        assert host.is_stable

    def test_on_stable_fires_when_run_exits_settled(self, host: ManualScheduler) -> None:
        events: list[str] = []
        host.on_stable(lambda: events.append("stable"))

        host.run(lambda: None)
        assert events == ["stable"]

    def test_on_stable_not_fired_with_outstanding_work(self, host: ManualScheduler) -> None:
        events: list[str] = []
        host.on_stable(lambda: events.append("stable"))

        host.run(lambda: host.call_later(10, lambda: None))
        assert events == []

        host.advance(10)
        assert events == ["stable"]

    def test_nested_run_checks_once(self, host: ManualScheduler) -> None:
        events: list[str] = []
        host.on_stable(lambda: events.append("stable"))

        host.run(lambda: host.run(lambda: None))
        assert events == ["stable"]

    def test_run_returns_result(self, host: ManualScheduler) -> None:
        assert host.run(lambda: "value") == "value"

    def test_unregister(self, host: ManualScheduler) -> None:
        events: list[str] = []
        unregister = host.on_stable(lambda: events.append("stable"))
        unregister()
        unregister()
        host.run(lambda: None)
        assert events == []


# ---------------------------------------------------------------------------
# AsyncioScheduler
# ---------------------------------------------------------------------------


class TestAsyncioScheduler:
    """Timers on the running event loop."""

    @pytest.mark.asyncio
    async def test_call_later_fires(self) -> None:
        host = AsyncioScheduler()
        fired: list[str] = []
        host.call_later(1, lambda: fired.append("x"))

        assert not host.is_stable
        await asyncio.sleep(0.05)

        assert fired == ["x"]
        assert host.is_stable

    @pytest.mark.asyncio
    async def test_cancel(self) -> None:
        host = AsyncioScheduler()
        fired: list[str] = []
        timer = host.call_later(1, lambda: fired.append("x"))
        timer.cancel()

        await asyncio.sleep(0.05)
        assert fired == []
        assert host.is_stable

    @pytest.mark.asyncio
    async def test_wait_stable(self) -> None:
        host = AsyncioScheduler()
        fired: list[Any] = []
        host.call_later(10, lambda: fired.append("x"))

        await host.wait_stable(timeout=1.0)
        assert fired == ["x"]

    @pytest.mark.asyncio
    async def test_wait_stable_when_already_stable(self) -> None:
        host = AsyncioScheduler()
        await host.wait_stable(timeout=0.1)

    @pytest.mark.asyncio
    async def test_wait_stable_timeout(self) -> None:
        host = AsyncioScheduler()
        host.schedule_task("never", lambda: None)

        with pytest.raises(TimeoutError):
            await host.wait_stable(timeout=0.01)

    @pytest.mark.asyncio
    async def test_explicit_loop(self) -> None:
        loop = asyncio.get_running_loop()
        host = AsyncioScheduler(loop)
        assert host.loop is loop
