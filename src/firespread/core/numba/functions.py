"""Scalar spread and wind model functions.

This module contains the jit-compiled kernels used by the spread engine:
time decay of criticality and the asymmetric wind modifier applied to each
candidate spread direction.
"""

import numpy as np
from numba import jit  # type: ignore


@jit(cache=True)
def clip(x: float, min: float, max: float) -> float:
    """Clip x to the range [min, max].

    Parameters
    ----------
    x : float
        Value to clip.
    min : float
        Minimum value.
    max : float
        Maximum value.

    Returns
    -------
    float
        Clipped value.
    """
    if x < min:
        return min
    if x > max:
        return max
    return x


@jit(cache=True)
def wind_toward_angle(w_from: float) -> float:
    """
    Convert the meteorological wind bearing into the direction it blows to.

    Parameters
    ----------
    w_from : float
        Bearing the wind blows FROM (degrees clockwise, north is 0).

    Returns
    -------
    float
        Direction the wind blows TOWARD (radians counter-clockwise,
        east is 0), consistent with atan2 on (dx, dy).
    """
    toward = (270.0 - w_from + 360.0) % 360.0
    return np.radians(toward)


@jit(cache=True)
def wind_modifier(
    w_speed: float,
    w_from: float,
    dx: float,
    dy: float,
    scaler: float,
    max_bonus: float,
    penalty_ratio: float,
) -> float:
    """
    Additive wind correction to the spread probability along (dx, dy).

    Parameters
    ----------
    w_speed : float
        Wind speed (m/s).
    w_from : float
        Bearing the wind blows FROM (degrees), NaN if unknown.
    dx : float
        Longitude offset from the burning point to the candidate (degrees).
    dy : float
        Latitude offset from the burning point to the candidate (degrees).
    scaler : float
        Overall wind sensitivity.
    max_bonus : float
        Cap on the downwind bonus.
    penalty_ratio : float
        Upwind cap as a multiple of `max_bonus`.

    Returns
    -------
    float
        Modifier in [-max_bonus * penalty_ratio, max_bonus].
    """
    if w_speed <= 0.0 or np.isnan(w_from):
        return 0.0

    dist = np.sqrt(dx * dx + dy * dy)
    if dist == 0.0:
        return 0.0

    toward = wind_toward_angle(w_from)
    alignment = (dx * np.cos(toward) + dy * np.sin(toward)) / dist

    raw = alignment * w_speed * scaler
    if raw >= 0.0:
        return min(raw, max_bonus)
    return max(raw, -max_bonus * penalty_ratio)


@jit(cache=True)
def decay_factor(step: int, decay_rate: float, min_factor: float) -> float:
    """Global fraction of base criticality still available at `step`."""
    return max(min_factor, 1.0 - step * decay_rate)


@jit(cache=True)
def effective_criticality(
    base: float,
    threshold: float,
    modifier: float,
) -> float:
    """
    Final ignition probability of a candidate.

    The threshold gates the decayed base value before wind is applied: a
    candidate below it cannot spread whatever the wind. The wind-modified
    value is then clipped to [0, 1].
    """
    if base < threshold:
        return 0.0
    return clip(base + modifier, 0.0, 1.0)
