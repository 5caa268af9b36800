"""Unit tests for planar area and ring complexity."""

import warnings

import pytest
from shapely.geometry import (
    GeometryCollection,
    LineString,
    MultiPolygon,
    Point,
    Polygon,
    box,
)

from areaqa.geometry.metrics import (
    MetricProjector,
    geometry_complexity,
    planar_area,
    ring_complexity,
)


class TestRingComplexityShortRings:
    @pytest.mark.parametrize(
        "coords",
        [
            [(0, 0), (1, 0), (0, 0)],
            [(0, 0), (100, 3), (-7, 12)],
            [(0, 0)],
            [],
        ],
    )
    def test_up_to_three_points_is_180(self, coords):
        assert ring_complexity(coords) == 180

    @pytest.mark.parametrize(
        "coords",
        [
            [(0, 0), (1, 0), (0, 1), (0, 0)],
            [(0, 0), (50, 1), (3, 99), (0, 0)],
            [(0, 0), (1, 1), (2, 2), (3, 3)],
        ],
    )
    def test_four_points_is_360(self, coords):
        assert ring_complexity(coords) == 360


class TestRingComplexityWalk:
    def test_square(self):
        assert ring_complexity(box(0, 0, 4, 3).exterior) == pytest.approx(360)

    @pytest.mark.parametrize(
        "bounds",
        [(3.7, 1.2, 19.3, 8.9), (-1000.5, 20.25, 2000.75, 20.5), (0, 0, 1e-3, 5e4)],
    )
    def test_rectangle_any_coordinates(self, bounds):
        assert ring_complexity(box(*bounds).exterior) == pytest.approx(360)

    def test_convex_polygon_sums_to_360(self):
        hexagon = Polygon([(2, 0), (4, 1), (4, 3), (2, 4), (0, 3), (0, 1)])
        assert ring_complexity(hexagon.exterior) == pytest.approx(360)

    def test_closing_point_is_not_a_vertex(self):
        # Collinear midpoint on the bottom edge adds nothing
        coords = [(0, 0), (2, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
        assert ring_complexity(coords) == pytest.approx(360)

    def test_repeated_vertex_does_not_fail(self):
        coords = [(0, 0), (4, 0), (4, 0), (4, 4), (0, 4), (0, 0)]
        assert 0 < ring_complexity(coords) <= 360

    def test_concave_polygon_exceeds_360(self):
        arrow = Polygon([(0, 0), (4, 2), (0, 4), (1, 2)])
        assert ring_complexity(arrow.exterior) > 360

    def test_spiky_ring_is_very_complex(self, make_star):
        assert ring_complexity(make_star(20, 1000, 100).exterior) > 2000


class TestGeometryComplexity:
    def test_holes_are_ignored(self):
        with_hole = Polygon(
            box(0, 0, 10, 10).exterior.coords,
            [[(2, 2), (5, 2), (3, 6), (2, 2)]],
        )
        assert geometry_complexity(with_hole) == pytest.approx(360)

    def test_multipolygon_sums_members(self):
        multi = MultiPolygon([box(0, 0, 1, 1), box(5, 5, 7, 8)])
        assert geometry_complexity(multi) == pytest.approx(720)

    def test_other_kinds_are_zero(self):
        assert geometry_complexity(LineString([(0, 0), (1, 1)])) == 0


class TestPlanarArea:
    def test_polygon(self):
        assert planar_area(box(0, 0, 10, 4)) == 40

    def test_multipolygon(self):
        assert planar_area(MultiPolygon([box(0, 0, 1, 1), box(2, 2, 4, 4)])) == 5

    @pytest.mark.parametrize(
        "geometry",
        [
            Point(1, 1),
            LineString([(0, 0), (10, 10)]),
            GeometryCollection([box(0, 0, 10, 10)]),
            box(0, 0, 5, 5).exterior,
        ],
    )
    def test_non_polygonal_is_zero(self, geometry):
        assert planar_area(geometry) == 0


class TestMetricProjector:
    def test_projects_into_meters(self, metric_square):
        projector = MetricProjector("EPSG:4326", "EPSG:31467")
        projected = projector.project(metric_square(10000))

        minx, miny, maxx, maxy = projected.bounds
        assert minx == pytest.approx(3500000.0, abs=1e-3)
        assert miny == pytest.approx(5550000.0, abs=1e-3)
        assert maxx - minx == pytest.approx(100, abs=1e-3)

    def test_returns_new_geometry(self, metric_square):
        projector = MetricProjector("EPSG:4326", "EPSG:31467")
        source = metric_square(100)
        projected = projector.project(source)

        assert projected is not source
        assert source.bounds[0] < 180

    def test_projection_emits_no_deprecation_warning(self, metric_square):
        projector = MetricProjector("EPSG:4326", "EPSG:31467")
        source = metric_square(100)

        with warnings.catch_warnings():
            warnings.simplefilter("error", DeprecationWarning)
            projected = projector.project(source)

        assert projected.area == pytest.approx(100, rel=1e-6)
