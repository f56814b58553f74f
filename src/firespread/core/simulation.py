"""Tick-driven simulation controller.

`Simulation` is the session object owning the point field, spatial index,
wind, clock and random source. It never schedules itself: whatever tick
source the host provides (timer, event loop, test loop) calls `step()`.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Sequence

import numpy as np

from firespread.core.constants import INITIAL_FIRE_STARTS
from firespread.core.models import (
    BoundaryConditions,
    BurnSnapshot,
    IndexUnavailableError,
    NoDataError,
    PointField,
    SimulationStats,
    WindState,
)
from firespread.core.scheduler import Scheduler, SchedulerEvent
from firespread.core.spatial_index import SpatialIndex
from firespread.core.spread import SpreadEngine, SpreadParameters, StepResult

logger = logging.getLogger(__name__)

SnapshotListener = Callable[[BurnSnapshot], None]


@dataclass
class Simulation:
    """Stochastic point-field wildfire spread simulation.

    The controller is either idle or running. `start()` seeds the initial
    fires, each `step()` advances the clock and runs one spread pass, and
    the simulation returns to idle by itself once nothing is burning.

    Attributes
    ----------
    points : PointField
        Criticality points and their burn state.
    index : SpatialIndex, optional
        Radius-query index over `points`; see `build_index`.
    wind : WindState, optional
        Ambient wind, updatable between steps.
    params : SpreadParameters, optional
        Constants of the spread rule.
    initial_fire_starts : int, optional
        Number of distinct random points ignited by `start()`.
    rng : numpy.random.Generator, optional
        Single source of randomness for seeding and ignition draws.
    """

    points: PointField
    index: Optional[SpatialIndex] = None
    wind: WindState = field(default_factory=WindState.calm)
    params: SpreadParameters = field(default_factory=SpreadParameters)
    initial_fire_starts: int = INITIAL_FIRE_STARTS
    rng: np.random.Generator = field(default_factory=np.random.default_rng)

    engine: SpreadEngine = field(init=False)
    scheduler: Scheduler = field(init=False)

    # simulation state
    time: int = field(init=False, default=0)
    running: bool = field(init=False, default=False)
    _listeners: list[SnapshotListener] = field(
        init=False, default_factory=list, repr=False
    )
    # conditions registered while idle, rescheduled by every start()
    _boundary_conditions: list[BoundaryConditions] = field(
        init=False, default_factory=list, repr=False
    )

    def __post_init__(self):
        if self.initial_fire_starts < 0:
            raise ValueError("initial_fire_starts must be >= 0")
        self.engine = SpreadEngine(params=self.params)
        self.scheduler = Scheduler()

    @classmethod
    def from_records(cls, records, wind=None, config=None) -> "Simulation":
        """Build an indexed, idle simulation from raw criticality records.

        See `firespread.io.records.simulation_from_records`.
        """
        from firespread.io.records import simulation_from_records

        return simulation_from_records(records, config=config, wind=wind)

    # --- lifecycle queries ---------------------------------------------------

    def is_running(self) -> bool:
        return self.running

    @property
    def current_step(self) -> int:
        return self.time

    def snapshot(self) -> BurnSnapshot:
        return self.points.snapshot(self.time)

    def stats(self) -> SimulationStats:
        return self.points.compute_stats()

    # --- collaborators -------------------------------------------------------

    def build_index(self) -> SpatialIndex:
        """(Re)build the spatial index over the current point field."""
        self.index = None
        self.index = SpatialIndex.build(self.points.lon, self.points.lat)
        return self.index

    def subscribe(self, listener: SnapshotListener) -> None:
        """Register a callable receiving the snapshot after seeding and
        after every step."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: SnapshotListener) -> None:
        self._listeners.remove(listener)

    def set_wind(self, wind: WindState) -> None:
        self.wind = wind

    def set_boundary_conditions(
        self, boundary_condition: BoundaryConditions
    ) -> None:
        """Schedule wind changes and ignitions at a future step.

        Conditions set while idle belong to the session and are applied
        again on every `start()`. Conditions set while running only apply
        to the current run.

        Parameters
        ----------
        boundary_condition : BoundaryConditions
            Conditions to apply at the start of `boundary_condition.step`.
        """
        # before a run, steps count from the upcoming start
        first_step = self.time + 1 if self.running else 1
        if boundary_condition.step < first_step:
            raise ValueError(
                "Boundary conditions cannot be applied in the past "
                f"(step {boundary_condition.step}, first allowed {first_step})."
            )
        if boundary_condition.ignitions:
            self._check_ids(boundary_condition.ignitions)

        if not self.running:
            self._boundary_conditions.append(boundary_condition)
        self._schedule(boundary_condition)

    def clear_boundary_conditions(self) -> None:
        """Forget every scheduled condition, including the session ones."""
        self._boundary_conditions.clear()
        self.scheduler.clear()

    def _schedule(self, boundary_condition: BoundaryConditions) -> None:
        event = SchedulerEvent.from_boundary_conditions(boundary_condition)
        self.scheduler.add_event(boundary_condition.step, event)

    # --- state machine -------------------------------------------------------

    def _check_ready(self) -> None:
        if len(self.points) == 0:
            raise NoDataError("No criticality points loaded.")
        if self.index is None:
            raise IndexUnavailableError("Spatial index not available.")
        if len(self.index) != len(self.points):
            raise IndexUnavailableError(
                "Spatial index does not match the point field."
            )

    def _check_ids(self, point_ids: Sequence[int]) -> None:
        n = len(self.points)
        for point_id in point_ids:
            if not 0 <= point_id < n:
                raise ValueError(f"Unknown point id: {point_id}")

    def _seed_fires(self, ignitions: Optional[Sequence[int]]) -> int:
        n = len(self.points)
        if ignitions is None:
            count = min(self.initial_fire_starts, n)
            chosen = self.rng.choice(n, size=count, replace=False).tolist()
        else:
            chosen = list(ignitions)

        started = 0
        for point_id in chosen:
            if self.points.ignite(point_id, self.params.burn_duration):
                started += 1

        if started == 0:
            self.points.ignite(0, self.params.burn_duration)
            started = 1

        return started

    def start(self, ignitions: Optional[Sequence[int]] = None) -> BurnSnapshot:
        """Reset the field and seed the initial fires.

        Parameters
        ----------
        ignitions : Sequence[int], optional
            Point ids to ignite instead of a random selection.

        Returns
        -------
        BurnSnapshot
            The snapshot after seeding.

        Raises
        ------
        NoDataError
            If the point field is empty.
        IndexUnavailableError
            If the spatial index was not built.
        ValueError
            If an explicit ignition id is not a point of the field.
        """
        self._check_ready()
        if ignitions is not None:
            ignitions = list(ignitions)
            self._check_ids(ignitions)
        if self.running:
            logger.info("Simulation already running, restarting")
            self.stop()

        self.points.reset()
        self.time = 0
        self.scheduler.clear()
        for boundary_condition in self._boundary_conditions:
            self._schedule(boundary_condition)
        started = self._seed_fires(ignitions)
        self.running = True

        logger.info(
            "Simulation started with %d fire(s) over %d points",
            started,
            len(self.points),
        )
        return self._emit()

    def stop(self) -> None:
        """Stop advancing; conditions pending for this run are dropped."""
        if not self.running:
            return
        self.running = False
        self.scheduler.clear()
        logger.info("Simulation stopped at step %d", self.time)

    def _apply_scheduled(self) -> None:
        event = self.scheduler.pop_due(self.time)
        if event is None:
            return
        if event.wind is not None:
            self.wind = event.wind
        for point_id in event.ignitions:
            self.points.ignite(point_id, self.params.burn_duration)

    def step(self) -> Optional[StepResult]:
        """Advance the clock by one tick and run one spread pass.

        Returns
        -------
        StepResult or None
            The changes of this step, None if the simulation is idle.

        Raises
        ------
        IndexUnavailableError
            If the index disappeared while running; the simulation is
            stopped first.
        """
        if not self.running:
            logger.debug("step() called while idle, ignoring")
            return None

        if self.index is None:
            self.stop()
            raise IndexUnavailableError("Spatial index not available.")

        self.time += 1
        self._apply_scheduled()

        result = self.engine.step(
            self.points, self.index, self.wind, self.time, self.rng
        )
        self._emit()

        if not self.points.has_burning():
            self.stop()
            logger.info("Simulation auto-stopped: no active fires")

        return result

    def run(self, max_steps: Optional[int] = None) -> list[StepResult]:
        """Tick in a tight loop until idle or `max_steps` steps are done."""
        results: list[StepResult] = []
        while self.running:
            if max_steps is not None and len(results) >= max_steps:
                break
            result = self.step()
            if result is not None:
                results.append(result)
        return results

    def _emit(self) -> BurnSnapshot:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)
        return snapshot
