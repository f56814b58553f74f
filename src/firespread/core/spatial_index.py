"""Static radius-query index over point coordinates.

Distances are Euclidean in coordinate-degree space, not geodesic: the search
radius is a small constant in degrees matching the sampling of the grid.
Points lying exactly on the radius are included in query results.
"""

import logging
from dataclasses import dataclass, field

import numpy as np
import numpy.typing as npt
from scipy.spatial import cKDTree

from firespread.core.models import IndexUnavailableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpatialIndex:
    """Read-only k-d tree over `(lon, lat)` pairs.

    The index never supports insertion or removal; if the point set changes,
    build a new one.
    """

    coords: npt.NDArray[np.floating]
    _tree: cKDTree = field(repr=False, compare=False)

    @staticmethod
    def build(
        lon: npt.ArrayLike, lat: npt.ArrayLike
    ) -> "SpatialIndex":
        """Build the index.

        Raises
        ------
        IndexUnavailableError
            If there are no points or the coordinates are not usable.
        """
        lon_arr = np.asarray(lon, dtype=np.float64)
        lat_arr = np.asarray(lat, dtype=np.float64)
        if lon_arr.size == 0:
            raise IndexUnavailableError("cannot build an index over no points")
        if lon_arr.shape != lat_arr.shape:
            raise IndexUnavailableError("lon and lat must have the same shape")

        coords = np.column_stack((lon_arr, lat_arr))
        if not np.all(np.isfinite(coords)):
            raise IndexUnavailableError("coordinates must be finite")
        coords.setflags(write=False)

        tree = cKDTree(coords)
        logger.debug("Spatial index built over %d points", len(coords))
        return SpatialIndex(coords=coords, _tree=tree)

    def __len__(self) -> int:
        return len(self.coords)

    def query(
        self, lon: float, lat: float, radius: float
    ) -> npt.NDArray[np.int64]:
        """Indices of the points within `radius` of `(lon, lat)`, sorted.

        The index of a point located at the query position is included;
        callers are responsible for filtering self-matches.
        """
        if radius < 0:
            raise ValueError("radius must be >= 0")
        # cKDTree uses `<= r`, so boundary points are returned
        found = self._tree.query_ball_point((lon, lat), r=radius)
        return np.sort(np.asarray(found, dtype=np.int64))
