"""Simulation primitives for the point-field fire spread engine.

This module defines the burn state of each sampled point, the wind input,
the mutable `PointField` that owns all per-point mutation, and the frozen
snapshots handed to rendering and IO layers.
"""

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional

import numpy as np
import numpy.typing as npt

from firespread.core.constants import BURNING, BURNT_OUT, UNBURNT


class FireSpreadError(Exception):
    """Domain-specific error raised by the fire spread engine."""


class NoDataError(FireSpreadError):
    """The point field is empty."""


class IndexUnavailableError(FireSpreadError):
    """The spatial index is missing or could not be built."""


class InvalidInputError(FireSpreadError):
    """No valid criticality record was provided."""


class PointState(IntEnum):
    """Burn state of a single point. Values match the state array codes."""

    UNBURNT = UNBURNT
    BURNING = BURNING
    BURNT_OUT = BURNT_OUT

    @property
    def label(self) -> str:
        return self.name.lower()


@dataclass(frozen=True)
class WindState:
    """
    Ambient wind used for a whole simulation (until explicitly updated).

    Attributes
    ----------
    speed : float
        Wind speed (m/s), non-negative.
    direction : Optional[float]
        Bearing the wind blows FROM (degrees clockwise, north is 0),
        or None when no wind data is available.
    """

    speed: float = 0.0
    direction: Optional[float] = None

    def __post_init__(self):
        if not np.isfinite(self.speed) or self.speed < 0:
            raise ValueError(f"wind speed must be >= 0, got {self.speed!r}")
        if self.direction is not None:
            if not np.isfinite(self.direction):
                object.__setattr__(self, "direction", None)
            else:
                object.__setattr__(self, "direction", float(self.direction) % 360.0)

    @staticmethod
    def calm() -> "WindState":
        return WindState(speed=0.0, direction=None)

    @property
    def is_active(self) -> bool:
        """True when the wind can influence spread."""
        return self.speed > 0 and self.direction is not None

    def direction_or_nan(self) -> float:
        return np.nan if self.direction is None else self.direction


@dataclass(frozen=True)
class SimulationStats:
    """Summary counters for the current simulation state."""

    n_unburnt: int
    n_burning: int
    n_burnt_out: int

    @property
    def n_affected(self) -> int:
        return self.n_burning + self.n_burnt_out

    def to_dict(self, step: int) -> dict[str, int]:
        return dict(
            step=step,
            n_unburnt=self.n_unburnt,
            n_burning=self.n_burning,
            n_burnt_out=self.n_burnt_out,
        )


@dataclass(frozen=True)
class BurnSnapshot:
    """Non-unburnt points at a given step, suitable for rendering as markers."""

    step: int
    ids: npt.NDArray[np.integer]
    lon: npt.NDArray[np.floating]
    lat: npt.NDArray[np.floating]
    states: npt.NDArray[np.int8]
    criticality: npt.NDArray[np.floating]
    stats: SimulationStats

    def __len__(self) -> int:
        return len(self.ids)

    def burning_ids(self) -> npt.NDArray[np.integer]:
        return self.ids[self.states == BURNING]

    def burnt_out_ids(self) -> npt.NDArray[np.integer]:
        return self.ids[self.states == BURNT_OUT]


@dataclass(frozen=True)
class BoundaryConditions:
    """
    Conditions applied at the start of a given simulation step.

    Attributes
    ----------
    step : int
        Step the conditions refer to (applied before that step's spread pass).
    wind : Optional[WindState]
        New ambient wind.
    ignitions : Optional[tuple[int, ...]]
        Ids of points to ignite, if still unburnt.
    """

    step: int
    wind: Optional[WindState] = None
    ignitions: Optional[tuple[int, ...]] = None


@dataclass
class PointField:
    """
    Mutable collection of criticality points and their burn state.

    Coordinates and criticality are fixed at construction and exposed as
    read-only arrays; only `state` and `burn_time_remaining` ever change.

    Attributes
    ----------
    lon : numpy.ndarray
        Longitudes (degrees).
    lat : numpy.ndarray
        Latitudes (degrees).
    criticality : numpy.ndarray
        Base criticality K, clamped to [0, 1].
    """

    lon: npt.NDArray[np.floating]
    lat: npt.NDArray[np.floating]
    criticality: npt.NDArray[np.floating]

    state: npt.NDArray[np.int8] = field(init=False)
    burn_time_remaining: npt.NDArray[np.int32] = field(init=False)

    def __post_init__(self):
        self.lon = np.array(self.lon, dtype=np.float64)
        self.lat = np.array(self.lat, dtype=np.float64)
        self.criticality = np.clip(
            np.array(self.criticality, dtype=np.float64), 0.0, 1.0
        )
        n = len(self.lon)
        if not (len(self.lat) == n and len(self.criticality) == n):
            raise ValueError("All input arrays must have the same length")

        for arr in (self.lon, self.lat, self.criticality):
            arr.setflags(write=False)

        self.state = np.full(n, UNBURNT, dtype=np.int8)
        self.burn_time_remaining = np.zeros(n, dtype=np.int32)

    @staticmethod
    def empty() -> "PointField":
        return PointField(
            lon=np.empty((0,)), lat=np.empty((0,)), criticality=np.empty((0,))
        )

    def __len__(self) -> int:
        return len(self.lon)

    @property
    def ids(self) -> npt.NDArray[np.integer]:
        return np.arange(len(self), dtype=np.int64)

    def reset(self) -> None:
        """Return every point to unburnt."""
        self.state[:] = UNBURNT
        self.burn_time_remaining[:] = 0

    def get_state(self, point_id: int) -> PointState:
        return PointState(int(self.state[point_id]))

    def ignite(self, point_id: int, burn_time: int) -> bool:
        """Ignite a point if it is still unburnt.

        Returns
        -------
        bool
            True if the point changed state.
        """
        if burn_time <= 0:
            raise ValueError("burn_time must be > 0")
        if self.state[point_id] != UNBURNT:
            return False
        self.state[point_id] = BURNING
        self.burn_time_remaining[point_id] = burn_time
        return True

    def burn_out(self, point_id: int) -> None:
        if self.state[point_id] != BURNING:
            raise FireSpreadError(
                f"point {point_id} cannot burn out from state "
                f"{self.get_state(point_id).label}"
            )
        self.state[point_id] = BURNT_OUT
        self.burn_time_remaining[point_id] = 0

    def tick(self, point_id: int) -> bool:
        """Count down one step of a burning point's remaining burn time.

        Returns
        -------
        bool
            True if the point burnt out on this tick.
        """
        if self.state[point_id] != BURNING:
            raise FireSpreadError(
                f"point {point_id} is not burning "
                f"({self.get_state(point_id).label})"
            )
        self.burn_time_remaining[point_id] -= 1
        if self.burn_time_remaining[point_id] > 0:
            return False
        self.burn_out(point_id)
        return True

    def burning_ids(self) -> npt.NDArray[np.integer]:
        return np.flatnonzero(self.state == BURNING)

    def has_burning(self) -> bool:
        return bool(np.any(self.state == BURNING))

    def compute_stats(self) -> SimulationStats:
        counts = np.bincount(self.state, minlength=3)
        return SimulationStats(
            n_unburnt=int(counts[UNBURNT]),
            n_burning=int(counts[BURNING]),
            n_burnt_out=int(counts[BURNT_OUT]),
        )

    def snapshot(self, step: int) -> BurnSnapshot:
        """Collect every burning or burnt-out point at the given step."""
        ids = np.flatnonzero(self.state != UNBURNT)
        return BurnSnapshot(
            step=step,
            ids=ids,
            lon=self.lon[ids],
            lat=self.lat[ids],
            states=self.state[ids].copy(),
            criticality=self.criticality[ids],
            stats=self.compute_stats(),
        )
