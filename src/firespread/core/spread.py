"""One-step spread pass over the point field.

Burning points age by one step, burn out when their countdown is exhausted,
and otherwise try to ignite their unburnt neighbors with a probability
derived from the decayed criticality of the neighbor and the wind.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt

from firespread.core.constants import (
    DECAY_RATE,
    MAX_BURN_DURATION_STEPS,
    MAX_WIND_BONUS,
    MIN_DECAY_FACTOR,
    NEIGHBOR_SEARCH_RADIUS,
    SPREAD_THRESHOLD,
    UNBURNT,
    UPWIND_PENALTY_RATIO,
    WIND_EFFECT_SCALER,
)
from firespread.core.models import PointField, WindState
from firespread.core.numba import (
    decay_factor,
    effective_criticality,
    wind_modifier,
)
from firespread.core.spatial_index import SpatialIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpreadParameters:
    """Tunable constants of the spread rule.

    Attributes
    ----------
    burn_duration : int
        Steps a newly ignited point keeps burning.
    search_radius : float
        Neighbor search radius (degrees).
    spread_threshold : float
        Minimum decayed criticality a candidate needs to be spreadable.
    decay_rate : float
        Fraction of base criticality lost per step.
    min_decay_factor : float
        Floor of the decay factor.
    wind_scaler : float
        Overall wind sensitivity.
    max_wind_bonus : float
        Cap on the downwind bonus.
    upwind_penalty_ratio : float
        Upwind cap as a multiple of the downwind cap.
    """

    burn_duration: int = MAX_BURN_DURATION_STEPS
    search_radius: float = NEIGHBOR_SEARCH_RADIUS
    spread_threshold: float = SPREAD_THRESHOLD
    decay_rate: float = DECAY_RATE
    min_decay_factor: float = MIN_DECAY_FACTOR
    wind_scaler: float = WIND_EFFECT_SCALER
    max_wind_bonus: float = MAX_WIND_BONUS
    upwind_penalty_ratio: float = UPWIND_PENALTY_RATIO

    def __post_init__(self):
        if self.burn_duration < 1:
            raise ValueError("burn_duration must be >= 1")
        if self.search_radius < 0:
            raise ValueError("search_radius must be >= 0")
        if self.max_wind_bonus < 0:
            raise ValueError("max_wind_bonus must be >= 0")
        if self.upwind_penalty_ratio <= 0:
            raise ValueError("upwind_penalty_ratio must be > 0")

    def modifier(self, wind: WindState, dx: float, dy: float) -> float:
        """Wind modifier for a spread vector under these parameters."""
        return wind_modifier(
            float(wind.speed),
            float(wind.direction_or_nan()),
            float(dx),
            float(dy),
            float(self.wind_scaler),
            float(self.max_wind_bonus),
            float(self.upwind_penalty_ratio),
        )


@dataclass(frozen=True)
class StepResult:
    """Point ids whose state changed during one step."""

    step: int
    ignited: npt.NDArray[np.int64] = field(
        default_factory=lambda: np.empty((0,), dtype=np.int64)
    )
    burnt_out: npt.NDArray[np.int64] = field(
        default_factory=lambda: np.empty((0,), dtype=np.int64)
    )


@dataclass
class SpreadEngine:
    """Applies the spread rule to a `PointField`, one step at a time.

    The engine holds no simulation state of its own: the field, index,
    wind and random source are passed in on every call.
    """

    params: SpreadParameters = field(default_factory=SpreadParameters)

    def candidate_probability(
        self,
        points: PointField,
        source: int,
        target: int,
        step: int,
        wind: WindState,
    ) -> float:
        """Final ignition probability of `target` from burning `source`."""
        p = self.params
        base = points.criticality[target] * decay_factor(
            int(step), float(p.decay_rate), float(p.min_decay_factor)
        )
        if base < p.spread_threshold:
            return 0.0

        dx = points.lon[target] - points.lon[source]
        dy = points.lat[target] - points.lat[source]
        modifier = p.modifier(wind, dx, dy)
        return effective_criticality(
            float(base), float(p.spread_threshold), modifier
        )

    def step(
        self,
        points: PointField,
        index: SpatialIndex,
        wind: WindState,
        step: int,
        rng: np.random.Generator,
    ) -> StepResult:
        """Run one spread pass at simulation step `step`.

        Parameters
        ----------
        points : PointField
            Points to update in place.
        index : SpatialIndex
            Index built over the same points.
        wind : WindState
            Ambient wind for this step.
        step : int
            Current (already advanced) simulation step.
        rng : numpy.random.Generator
            Source of the ignition draws.

        Returns
        -------
        StepResult
            Ids ignited and burnt out during this step.
        """
        p = self.params
        burnt_out: list[int] = []
        pending: set[int] = set()

        # only points burning at the start of the step can spread
        for source in points.burning_ids().tolist():
            if points.tick(source):
                burnt_out.append(source)
                continue

            neighbors = index.query(
                points.lon[source], points.lat[source], p.search_radius
            )
            for target in neighbors.tolist():
                if target == source or points.state[target] != UNBURNT:
                    continue

                probability = self.candidate_probability(
                    points, source, target, step, wind
                )
                if probability <= 0.0:
                    continue
                if rng.random() < probability:
                    pending.add(target)

        ignited = [
            point_id
            for point_id in sorted(pending)
            if points.ignite(point_id, p.burn_duration)
        ]

        logger.debug(
            "Step %d: %d ignited, %d burnt out",
            step,
            len(ignited),
            len(burnt_out),
        )

        return StepResult(
            step=step,
            ignited=np.asarray(ignited, dtype=np.int64),
            burnt_out=np.asarray(sorted(burnt_out), dtype=np.int64),
        )
