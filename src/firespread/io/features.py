"""Burn markers for rendering collaborators.

Each non-unburnt point of a snapshot becomes a square polygon centred on
the point, in GeoJSON layout (`[lon, lat]` positions). Nothing is written
to disk: map layers consume the returned mapping directly.
"""

from typing import Any

from firespread.core.constants import MARKER_HALF_SIZE
from firespread.core.models import BurnSnapshot, PointState

STATUS_TAG = "status"


def marker_polygon(
    lon: float, lat: float, half_size: float
) -> list[list[list[float]]]:
    min_lon, max_lon = lon - half_size, lon + half_size
    min_lat, max_lat = lat - half_size, lat + half_size
    ring = [
        [min_lon, max_lat],
        [max_lon, max_lat],
        [max_lon, min_lat],
        [min_lon, min_lat],
        [min_lon, max_lat],
    ]
    return [ring]


def snapshot_to_features(
    snapshot: BurnSnapshot, half_size: float = MARKER_HALF_SIZE
) -> dict[str, Any]:
    """
    Convert a snapshot into a GeoJSON FeatureCollection of burn markers.

    Parameters
    ----------
    snapshot : BurnSnapshot
        Burning and burnt-out points.
    half_size : float
        Half side of each marker square (degrees).

    Returns
    -------
    dict
        FeatureCollection with `status` (`burning`/`burnt_out`), `K` and
        `id` properties on every feature.
    """
    if half_size <= 0:
        raise ValueError("half_size must be > 0")

    features = []
    for point_id, lon, lat, state, k in zip(
        snapshot.ids.tolist(),
        snapshot.lon.tolist(),
        snapshot.lat.tolist(),
        snapshot.states.tolist(),
        snapshot.criticality.tolist(),
    ):
        features.append(
            {
                "type": "Feature",
                "geometry": {
                    "type": "Polygon",
                    "coordinates": marker_polygon(lon, lat, half_size),
                },
                "properties": {
                    STATUS_TAG: PointState(state).label,
                    "K": k,
                    "id": point_id,
                },
            }
        )

    return {
        "type": "FeatureCollection",
        "features": features,
        "properties": {"step": snapshot.step},
    }
