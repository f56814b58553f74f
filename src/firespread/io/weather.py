import logging
from typing import Any, Mapping, Optional

import numpy as np

from firespread.core.models import WindState

logger = logging.getLogger(__name__)


def _to_float(value: Any) -> Optional[float]:
    try:
        x = float(value)
    except (TypeError, ValueError):
        return None
    if not np.isfinite(x):
        return None
    return x


def wind_from_payload(payload: Optional[Mapping[str, Any]]) -> WindState:
    """Resolve an already-fetched weather payload into a `WindState`.

    The payload is expected to carry ``{"wind": {"speed": .., "deg": ..}}``.
    A missing or malformed wind section falls back to calm; an unusable
    direction leaves the direction unset while keeping the speed.
    """
    wind = payload.get("wind") if isinstance(payload, Mapping) else None
    if not isinstance(wind, Mapping):
        logger.warning("Wind data not found in weather payload, using calm")
        return WindState.calm()

    speed = _to_float(wind.get("speed"))
    if speed is None or speed < 0:
        speed = 0.0
    direction = _to_float(wind.get("deg"))

    state = WindState(speed=speed, direction=direction)
    logger.info(
        "Wind updated: speed %.1f m/s, direction FROM %s",
        state.speed,
        "N/A" if state.direction is None else f"{state.direction:.0f} deg",
    )
    return state
