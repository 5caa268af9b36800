"""Planar metrics for area geometries.

Areas arrive in geographic coordinates; size checks need square meters, so
geometries are reprojected into a fixed metric CRS before measuring.
Complexity is a turning-angle heuristic over a polygon's exterior ring.
"""

import math
from functools import lru_cache
from typing import Sequence, Union

import shapely
from pyproj import Transformer
from shapely.geometry import LinearRing, MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry

from areaqa.config import get_settings

Coordinate = Sequence[float]


class MetricProjector:
    """Reproject geometries from the source CRS into a metric CRS."""

    def __init__(self, source_crs: str, target_crs: str):
        self.source_crs = source_crs
        self.target_crs = target_crs
        self._transformer = Transformer.from_crs(
            source_crs,
            target_crs,
            always_xy=True,
        )

    def project(self, geometry: BaseGeometry) -> BaseGeometry:
        """Return a reprojected copy; the input geometry is left untouched."""
        return shapely.transform(geometry, self._transformer.transform, interleaved=False)


@lru_cache
def get_projector() -> MetricProjector:
    settings = get_settings()
    return MetricProjector(settings.source_crs, settings.metric_crs)


def planar_area(geometry: BaseGeometry) -> float:
    """Planar area of polygonal geometries, 0 for every other kind."""
    if isinstance(geometry, (Polygon, MultiPolygon)):
        return float(geometry.area)
    return 0.0


def _distance(p: Coordinate, q: Coordinate) -> float:
    return math.hypot(q[0] - p[0], q[1] - p[1])


def _vertex_angle(pa: Coordinate, pb: Coordinate, pc: Coordinate) -> float:
    """Interior angle at pb in degrees, by the law of cosines."""
    ab = _distance(pa, pb)
    bc = _distance(pb, pc)
    ac = _distance(pa, pc)

    if ab == 0 or bc == 0:
        return 180.0

    cosine = (ab * ab + bc * bc - ac * ac) / (2 * ab * bc)
    cosine = max(-1.0, min(1.0, cosine))
    return math.degrees(math.acos(cosine))


def ring_complexity(ring: Union[LinearRing, Sequence[Coordinate]]) -> float:
    """Sum of deviations from a straight line over all ring vertices.

    ``ring`` is closed: its last coordinate repeats the first and is not a
    vertex of its own. Rings of up to four coordinates are not walked.
    """
    coords = list(ring.coords) if hasattr(ring, "coords") else list(ring)
    n = len(coords)

    if n <= 3:
        return 180.0
    if n == 4:
        return 360.0

    vertices = n - 1
    total = 0.0
    for i in range(vertices):
        pa = coords[i]
        pb = coords[(i + 1) % vertices]
        pc = coords[(i + 2) % vertices]
        total += 180.0 - _vertex_angle(pa, pb, pc)

    return total


def geometry_complexity(geometry: BaseGeometry) -> float:
    """Exterior-ring complexity, summed over multipolygon members. Holes are ignored."""
    if isinstance(geometry, Polygon):
        return ring_complexity(geometry.exterior)
    if isinstance(geometry, MultiPolygon):
        return sum(ring_complexity(polygon.exterior) for polygon in geometry.geoms)
    return 0.0
