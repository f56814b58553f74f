from .core import (
    BoundaryConditions,
    BurnSnapshot,
    FireSpreadError,
    IndexUnavailableError,
    InvalidInputError,
    NoDataError,
    PointField,
    PointState,
    Simulation,
    SimulationStats,
    SpatialIndex,
    SpreadParameters,
    WindState,
)
from .version import __version__

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
    "SpreadParameters",
    "WindState",
    "__version__",
]
