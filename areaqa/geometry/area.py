"""Classified areas and the append-only catalog that owns them."""

import logging
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Iterator, Mapping, Optional

from shapely.errors import ShapelyError
from shapely.geometry import shape
from shapely.geometry.base import BaseGeometry

from areaqa.core.exceptions import GeometryConstructionError
from areaqa.geometry.metrics import MetricProjector, get_projector, planar_area
from areaqa.geometry.types import AreaSource, AreaType, SourceKind

logger = logging.getLogger(__name__)

# First matching key wins. Order matters.
CLASSIFICATION_PRECEDENCE: tuple[tuple[AreaType, tuple[str, ...]], ...] = (
    (AreaType.NATURAL, ("natural",)),
    (AreaType.LANDUSE, ("landuse",)),
    (AreaType.BUILDING, ("building", "disused:building", "abandoned:building")),
    (AreaType.AMENITY, ("amenity",)),
    (AreaType.LEISURE, ("leisure",)),
    (AreaType.MAN_MADE, ("man_made",)),
)

CLASSIFYING_KEYS = frozenset(
    key for _, keys in CLASSIFICATION_PRECEDENCE for key in keys
)

POLYGONAL_TYPES = ("Polygon", "MultiPolygon")

_LAYER_PATTERN = re.compile(r"^\s*([+-]?\d+)")


def classify(tags: Mapping[str, str]) -> tuple[AreaType, str, Optional[str]]:
    """Return (type, key, value) for the first classifying key present in tags."""
    for area_type, keys in CLASSIFICATION_PRECEDENCE:
        for key in keys:
            if key in tags:
                return area_type, key, tags[key]
    return AreaType.UNKNOWN, "unknown", None


def parse_layer(value: Optional[str]) -> int:
    """Parse a layer tag the way atoi does: leading integer or 0."""
    if value is None:
        return 0
    match = _LAYER_PATTERN.match(str(value))
    if not match:
        return 0
    return int(match.group(1))


@dataclass(frozen=True, eq=False)
class Area:
    """One classified polygon or multipolygon and its provenance.

    Instances are created by ``AreaCatalog.build_area`` only; ``id`` is the
    position in that catalog.
    """

    id: int
    source_kind: SourceKind
    origin_id: int
    changeset_id: int
    author: str
    timestamp: Optional[datetime]
    classification_type: AreaType
    classification_key: str
    classification_value: Optional[str]
    layer: int
    geometry: BaseGeometry

    @property
    def source_string(self) -> str:
        return self.source_kind.value

    @property
    def timestamp_iso(self) -> str:
        return self.timestamp.isoformat() if self.timestamp else ""

    def envelope(self) -> tuple[float, float, float, float]:
        """Axis-aligned bounding box as (minx, miny, maxx, maxy)."""
        return self.geometry.bounds

    def overlaps(self, other: "Area") -> bool:
        """Edge-crossing overlap, or either geometry containing the other."""
        return (
            self.geometry.overlaps(other.geometry)
            or self.geometry.contains(other.geometry)
            or self.geometry.within(other.geometry)
        )

    def intersects(self, other: "Area") -> bool:
        """Strict overlap only; containment does not count."""
        return self.geometry.overlaps(other.geometry)

    def planar_area(self, projector: Optional[MetricProjector] = None) -> float:
        """Area in square meters of the geometry in the metric projection."""
        projector = projector or get_projector()
        return planar_area(projector.project(self.geometry))

    def metadata(self) -> dict[str, Any]:
        return {
            "id": self.origin_id,
            "type": self.source_string,
            "changeset": self.changeset_id,
            "user": self.author,
            "timestamp": self.timestamp_iso,
            "key": self.classification_key,
            "value": self.classification_value,
        }

    def describe(self) -> str:
        return (
            f"{self.classification_key} {self.classification_value} "
            f"{self.source_string} {self.origin_id}"
        )

    def __repr__(self) -> str:
        return (
            f"Area(id={self.id}, {self.source_string}={self.origin_id}, "
            f"{self.classification_key}={self.classification_value}, layer={self.layer})"
        )


@dataclass
class AreaBuildResult:
    """Outcome of building one Area: either ``area`` or ``error`` is set."""

    area: Optional[Area] = None
    error: Optional[str] = None
    origin_id: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.area is not None


def _to_geometry(source: AreaSource) -> BaseGeometry:
    raw = source.geometry
    if raw is None:
        raise GeometryConstructionError(source.origin_id, "missing geometry")

    if isinstance(raw, BaseGeometry):
        geometry = raw
    else:
        try:
            geometry = shape(raw)
        except (ShapelyError, ValueError, TypeError, KeyError, IndexError, AttributeError) as e:
            raise GeometryConstructionError(source.origin_id, str(e)) from e

    if geometry.geom_type not in POLYGONAL_TYPES:
        raise GeometryConstructionError(
            source.origin_id, f"unsupported geometry type {geometry.geom_type}"
        )
    if geometry.is_empty:
        raise GeometryConstructionError(source.origin_id, "empty geometry")

    return geometry


class AreaCatalog:
    """Append-only, id-ordered sequence of Areas.

    The catalog owns the id counter: ids are handed out in creation order and
    equal each Area's position, so ``catalog[area.id] is area``.
    """

    def __init__(self):
        self._areas: list[Area] = []

    @property
    def next_id(self) -> int:
        return len(self._areas)

    def build_area(self, source: AreaSource) -> AreaBuildResult:
        """Construct, classify and append one Area. Failures do not consume an id."""
        try:
            geometry = _to_geometry(source)
        except GeometryConstructionError as e:
            return AreaBuildResult(error=e.reason, origin_id=source.origin_id)

        try:
            source_kind = SourceKind(source.source_kind)
        except ValueError:
            return AreaBuildResult(
                error=f"unsupported source kind {source.source_kind}",
                origin_id=source.origin_id,
            )

        tags = source.tags or {}
        area_type, key, value = classify(tags)

        area = Area(
            id=self.next_id,
            source_kind=source_kind,
            origin_id=source.origin_id,
            changeset_id=source.changeset_id,
            author=source.author,
            timestamp=source.timestamp,
            classification_type=area_type,
            classification_key=key,
            classification_value=value,
            layer=parse_layer(tags.get("layer")),
            geometry=geometry,
        )
        self._areas.append(area)
        return AreaBuildResult(area=area, origin_id=source.origin_id)

    def __len__(self) -> int:
        return len(self._areas)

    def __iter__(self) -> Iterator[Area]:
        return iter(self._areas)

    def __getitem__(self, index: int) -> Area:
        return self._areas[index]
