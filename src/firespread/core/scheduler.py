"""Lightweight step-keyed scheduler for boundary conditions.

Stores wind changes and extra ignitions grouped by the simulation step they
apply to, and exposes utilities to add events and pop those that are due.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from firespread.core.models import BoundaryConditions, WindState

PopResult = Tuple[int, "SchedulerEvent"]


@dataclass
class SchedulerEvent:
    """Represents a scheduled event in the simulation."""

    wind: Optional[WindState] = None
    ignitions: List[int] = field(default_factory=list)

    @staticmethod
    def from_boundary_conditions(bc: BoundaryConditions) -> SchedulerEvent:
        return SchedulerEvent(
            wind=bc.wind,
            ignitions=list(bc.ignitions) if bc.ignitions else [],
        )

    def update(self, other: SchedulerEvent) -> None:
        # overwrite the wind if already set, ignitions are added
        if other.wind is not None:
            self.wind = other.wind
        for point_id in other.ignitions:
            if point_id not in self.ignitions:
                self.ignitions.append(point_id)


@dataclass
class Scheduler:
    """Pending events ordered by step."""

    _queue: Dict[int, SchedulerEvent] = field(
        default_factory=dict, init=False, repr=False
    )

    def add_event(self, step: int, event: SchedulerEvent) -> None:
        """Add an event, merging it with any already scheduled at `step`."""
        entry = self._queue.get(step)
        if entry is None:
            self._queue[step] = event
        else:
            entry.update(event)

    def pop(self) -> PopResult:
        if not self:
            raise IndexError("pop from empty Scheduler")
        step = min(self._queue)
        return step, self._queue.pop(step)

    def pop_due(self, step: int) -> Optional[SchedulerEvent]:
        """Remove and merge every event scheduled at or before `step`."""
        merged: Optional[SchedulerEvent] = None
        while self and self.next_step() <= step:  # type: ignore[operator]
            _, event = self.pop()
            if merged is None:
                merged = event
            else:
                merged.update(event)
        return merged

    def next_step(self) -> Optional[int]:
        if not self:
            return None
        return min(self._queue)

    def __len__(self) -> int:
        return len(self._queue)

    def is_empty(self) -> bool:
        return len(self) == 0

    def clear(self) -> None:
        self._queue.clear()

    # --- Iteration utilities -------------------------------------------------

    def iterate(self) -> Iterator[PopResult]:
        while self:
            yield self.pop()
