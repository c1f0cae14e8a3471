from regionblur.core.scheduling import ManualScheduler


def test_manual_scheduler_runs_in_order():
    calls = []
    scheduler = ManualScheduler()
    scheduler.call_soon(lambda: calls.append(1))
    scheduler.call_soon(lambda: calls.append(2))
    assert calls == []
    assert scheduler.pending == 2
    assert scheduler.run_pending() == 2
    assert calls == [1, 2]
    assert scheduler.run_pending() == 0


def test_callbacks_scheduled_while_draining_also_run():
    calls = []
    scheduler = ManualScheduler()
    scheduler.call_soon(lambda: scheduler.call_soon(lambda: calls.append("nested")))
    assert scheduler.run_pending() == 2
    assert calls == ["nested"]
