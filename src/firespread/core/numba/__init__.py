from .functions import (
    clip,
    decay_factor,
    effective_criticality,
    wind_modifier,
    wind_toward_angle,
)

__all__ = [
    "clip",
    "decay_factor",
    "effective_criticality",
    "wind_modifier",
    "wind_toward_angle",
]
