"""Pytest fixtures for area engine testing."""

import itertools
import math
from datetime import datetime, timezone

import pytest
import shapely
from pyproj import Transformer
from shapely.geometry import Polygon, box

from areaqa.geometry.area import AreaCatalog
from areaqa.geometry.engine import OverlapEngine
from areaqa.geometry.metrics import MetricProjector
from areaqa.geometry.types import AreaSource, SourceKind


class ListSink:
    """Anomaly sink keeping records in memory."""

    def __init__(self):
        self.records = []

    def write(self, record):
        self.records.append(record)

    @property
    def labels(self) -> list[str]:
        return [r.label for r in self.records]

    def pairs(self) -> list[tuple[int, int]]:
        return [(r.area_a.id, r.area_b.id) for r in self.records if r.is_pairwise]


class IdentityProjector:
    """Projector double for geometries already in meters."""

    def project(self, geometry):
        return geometry


@pytest.fixture
def sink() -> ListSink:
    return ListSink()


@pytest.fixture
def identity_projector() -> IdentityProjector:
    return IdentityProjector()


@pytest.fixture
def metric_projector() -> MetricProjector:
    return MetricProjector("EPSG:4326", "EPSG:31467")


@pytest.fixture
def make_source():
    """Factory for AreaSource records with sequential OSM ids."""
    counter = itertools.count(1000)

    def _make(geometry, tags, kind=SourceKind.WAY, origin_id=None):
        return AreaSource(
            geometry=geometry,
            source_kind=kind,
            origin_id=origin_id if origin_id is not None else next(counter),
            changeset_id=4242,
            author="mapper",
            timestamp=datetime(2020, 5, 17, 12, 0, tzinfo=timezone.utc),
            tags=tags,
        )

    return _make


@pytest.fixture
def catalog() -> AreaCatalog:
    return AreaCatalog()


@pytest.fixture
def make_area(catalog, make_source):
    """Factory building Areas into the shared ``catalog`` fixture."""

    def _make(geometry, tags, **kwargs):
        result = catalog.build_area(make_source(geometry, tags, **kwargs))
        assert result.ok, result.error
        return result.area

    return _make


@pytest.fixture
def engine() -> OverlapEngine:
    return OverlapEngine()


@pytest.fixture
def to_geographic():
    """Map a geometry given in EPSG:31467 meters back to lon/lat."""
    transformer = Transformer.from_crs("EPSG:31467", "EPSG:4326", always_xy=True)

    def _convert(geometry):
        return shapely.transform(geometry, transformer.transform, interleaved=False)

    return _convert


@pytest.fixture
def metric_square(to_geographic):
    """Lon/lat square whose area in EPSG:31467 is ``area_m2``."""

    def _make(area_m2: float, x0: float = 3500000.0, y0: float = 5550000.0):
        side = math.sqrt(area_m2)
        return to_geographic(box(x0, y0, x0 + side, y0 + side))

    return _make


@pytest.fixture
def make_star():
    """Star polygon with ``points`` spikes, alternating outer and inner radius."""

    def _make(points: int, outer: float, inner: float, cx: float = 0.0, cy: float = 0.0) -> Polygon:
        coords = []
        for i in range(points * 2):
            radius = outer if i % 2 == 0 else inner
            angle = math.pi * i / points
            coords.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
        return Polygon(coords)

    return _make
