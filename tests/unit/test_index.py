"""Unit tests for AreaIndex."""

import pytest
from shapely.geometry import box

from areaqa.core.exceptions import SpatialIndexError
from areaqa.geometry.area import AreaCatalog
from areaqa.geometry.index import AreaIndex


@pytest.fixture
def index(catalog):
    return AreaIndex(catalog)


class TestAreaIndex:
    def test_query_includes_self(self, index, make_area):
        area = make_area(box(0, 0, 1, 1), {"landuse": "grass"})
        index.insert(area)

        assert index.query(area) == [area]

    def test_disjoint_envelopes_are_pruned(self, index, make_area):
        a = make_area(box(0, 0, 1, 1), {"landuse": "grass"})
        b = make_area(box(10, 10, 11, 11), {"landuse": "grass"})
        for area in (a, b):
            index.insert(area)

        assert b not in index.query(a)
        assert a not in index.query(b)

    def test_envelope_hit_without_geometric_overlap(self, index, make_area):
        # L-shaped area whose bbox covers the small square, geometries disjoint
        ell = make_area(
            box(0, 0, 10, 2).union(box(0, 0, 2, 10)),
            {"landuse": "grass"},
        )
        square = make_area(box(6, 6, 8, 8), {"amenity": "parking"})
        for area in (ell, square):
            index.insert(area)

        assert not ell.geometry.intersects(square.geometry)
        assert square in index.query(ell)

    def test_results_are_in_id_order(self, index, make_area):
        areas = [make_area(box(i, i, i + 10, i + 10), {"landuse": "grass"}) for i in range(5)]
        for area in reversed(areas):
            index.insert(area)

        assert [a.id for a in index.query(areas[2])] == [0, 1, 2, 3, 4]

    def test_len(self, index, make_area):
        for i in range(3):
            index.insert(make_area(box(i, 0, i + 1, 1), {"landuse": "grass"}))
        assert len(index) == 3

    def test_rejects_area_from_other_catalog(self, index, make_source):
        other = AreaCatalog()
        foreign = other.build_area(make_source(box(0, 0, 1, 1), {"landuse": "grass"})).area

        with pytest.raises(SpatialIndexError):
            index.insert(foreign)
