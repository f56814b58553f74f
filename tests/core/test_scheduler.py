from __future__ import annotations

import pytest

from firespread.core.models import BoundaryConditions, WindState
from firespread.core.scheduler import Scheduler, SchedulerEvent


def test_pop_returns_events_in_step_order():
    scheduler = Scheduler()
    scheduler.add_event(5, SchedulerEvent(ignitions=[1]))
    scheduler.add_event(2, SchedulerEvent(ignitions=[2]))

    assert len(scheduler) == 2
    assert scheduler.next_step() == 2

    step, event = scheduler.pop()
    assert step == 2
    assert event.ignitions == [2]

    step, event = scheduler.pop()
    assert step == 5
    assert scheduler.is_empty()
    assert scheduler.next_step() is None


def test_pop_from_empty_scheduler_raises():
    with pytest.raises(IndexError):
        Scheduler().pop()


def test_add_event_merges_wind_and_ignitions():
    scheduler = Scheduler()
    first_wind = WindState(speed=1.0, direction=10.0)
    second_wind = WindState(speed=2.0, direction=20.0)

    scheduler.add_event(3, SchedulerEvent(wind=first_wind, ignitions=[1, 2]))
    scheduler.add_event(3, SchedulerEvent(ignitions=[2, 4]))

    _, event = scheduler.pop()
    assert event.wind == first_wind
    assert event.ignitions == [1, 2, 4]

    scheduler.add_event(4, SchedulerEvent(wind=first_wind))
    scheduler.add_event(4, SchedulerEvent(wind=second_wind))
    _, event = scheduler.pop()
    assert event.wind == second_wind


def test_pop_due_merges_everything_up_to_step():
    scheduler = Scheduler()
    late_wind = WindState(speed=3.0, direction=30.0)
    scheduler.add_event(1, SchedulerEvent(ignitions=[0]))
    scheduler.add_event(2, SchedulerEvent(wind=late_wind, ignitions=[3]))
    scheduler.add_event(6, SchedulerEvent(ignitions=[9]))

    assert scheduler.pop_due(0) is None

    event = scheduler.pop_due(4)
    assert event is not None
    assert event.wind == late_wind
    assert event.ignitions == [0, 3]
    assert scheduler.next_step() == 6


def test_event_from_boundary_conditions():
    wind = WindState(speed=2.0, direction=45.0)
    event = SchedulerEvent.from_boundary_conditions(
        BoundaryConditions(step=3, wind=wind, ignitions=(4, 5))
    )

    assert event.wind == wind
    assert event.ignitions == [4, 5]

    empty = SchedulerEvent.from_boundary_conditions(BoundaryConditions(step=1))
    assert empty.wind is None
    assert empty.ignitions == []


def test_iterate_drains_queue():
    scheduler = Scheduler()
    for step in (4, 1, 3):
        scheduler.add_event(step, SchedulerEvent())

    assert [step for step, _ in scheduler.iterate()] == [1, 3, 4]
    assert len(scheduler) == 0
