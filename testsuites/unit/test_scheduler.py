import pytest

from uimap.framework.scheduler import RepeatingTask, Scheduler

from testsuites.unit.fakes import ManualClock


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def scheduler(clock):
    return Scheduler(delay=clock.delay, clock=clock.now)


def test_call_later_runs_in_due_order(scheduler):
    fired = []
    scheduler.call_later(200, lambda: fired.append("b"))
    scheduler.call_later(100, lambda: fired.append("a"))

    scheduler.sleep(250)

    assert fired == ["a", "b"]
    assert scheduler.pending == 0


def test_cancelled_timer_never_runs(scheduler):
    fired = []
    handle = scheduler.call_later(100, lambda: fired.append(1))
    handle.cancel()
    handle.cancel()

    scheduler.sleep(200)

    assert fired == []


def test_callback_may_sleep_and_drive_other_timers(scheduler, clock):
    fired = []

    def outer():
        fired.append(("outer", clock.time))
        scheduler.sleep(100)
        fired.append(("outer done", clock.time))

    scheduler.call_later(100, outer)
    scheduler.call_later(150, lambda: fired.append(("inner", clock.time)))

    scheduler.sleep(100)

    assert fired == [("outer", 100), ("inner", 150), ("outer done", 200)]


def test_repeating_task_ticks_until_done(scheduler, clock):
    ticks = []

    def tick():
        ticks.append(clock.time)
        return len(ticks) == 3

    task = RepeatingTask(scheduler, 100, tick).start()
    scheduler.sleep(1000)

    assert ticks == [100, 200, 300]
    assert not task.active


def test_repeating_task_stop_is_idempotent(scheduler):
    ticks = []
    task = RepeatingTask(scheduler, 100, lambda: ticks.append(1)).start()

    scheduler.sleep(250)
    task.stop()
    task.stop()
    scheduler.sleep(500)

    assert len(ticks) == 2
    assert scheduler.pending == 0


def test_repeating_task_stops_when_tick_raises(scheduler):
    def tick():
        raise RuntimeError("tick failed")

    task = RepeatingTask(scheduler, 100, tick).start()

    with pytest.raises(RuntimeError):
        scheduler.sleep(200)
    assert not task.active
