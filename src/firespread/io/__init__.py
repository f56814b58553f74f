from .configuration import (
    SimulationConfiguration,
    TimedInput,
    WindConfiguration,
    load_configuration,
)
from .features import snapshot_to_features
from .records import (
    CriticalityRecord,
    load_points,
    parse_records,
    simulation_from_records,
)
from .weather import wind_from_payload

__all__ = [
    "CriticalityRecord",
    "SimulationConfiguration",
    "TimedInput",
    "WindConfiguration",
    "load_configuration",
    "load_points",
    "parse_records",
    "simulation_from_records",
    "snapshot_to_features",
    "wind_from_payload",
]
