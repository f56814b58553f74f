"""Package init for the point-field fire spread core."""

from .models import (
    BoundaryConditions,
    BurnSnapshot,
    FireSpreadError,
    IndexUnavailableError,
    InvalidInputError,
    NoDataError,
    PointField,
    PointState,
    SimulationStats,
    WindState,
)
from .simulation import Simulation
from .spatial_index import SpatialIndex
from .spread import SpreadEngine, SpreadParameters, StepResult

__all__ = [
    "BoundaryConditions",
    "BurnSnapshot",
    "FireSpreadError",
    "IndexUnavailableError",
    "InvalidInputError",
    "NoDataError",
    "PointField",
    "PointState",
    "Simulation",
    "SimulationStats",
    "SpatialIndex",
    "SpreadEngine",
    "SpreadParameters",
    "StepResult",
    "WindState",
]
