"""Bounding-box R-tree over the area catalog."""

import logging
from typing import Optional

from rtree import index
from rtree.exceptions import RTreeError

from areaqa.config import get_settings
from areaqa.core.exceptions import SpatialIndexError
from areaqa.geometry.area import Area, AreaCatalog

logger = logging.getLogger(__name__)


class AreaIndex:
    """
    Coarse spatial pruning for candidate pairs.

    Entries are (envelope, catalog position). Queries return every Area whose
    envelope intersects the query Area's envelope, the query Area included;
    exact geometric predicates are left to the caller.
    """

    def __init__(
        self,
        catalog: AreaCatalog,
        index_capacity: Optional[int] = None,
        leaf_capacity: Optional[int] = None,
        fill_factor: Optional[float] = None,
    ):
        settings = get_settings()
        self.catalog = catalog

        props = index.Property()
        props.dimension = 2
        props.variant = index.RT_Linear
        props.index_capacity = index_capacity or settings.index_capacity
        props.leaf_capacity = leaf_capacity or settings.leaf_capacity
        props.fill_factor = fill_factor or settings.index_fill_factor

        self._rtree = index.Index(properties=props)
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def insert(self, area: Area) -> None:
        """Index an Area that already lives in the catalog."""
        if area.id >= len(self.catalog) or self.catalog[area.id] is not area:
            raise SpatialIndexError(f"Area {area.id} is not part of the catalog")

        try:
            self._rtree.insert(area.id, area.envelope())
        except RTreeError as e:
            raise SpatialIndexError(f"Insert of area {area.id} failed: {e}") from e

        self._size += 1
        logger.debug(f"Insert: {area.id}")

    def query(self, area: Area) -> list[Area]:
        """Areas with intersecting envelopes, in id order."""
        ids = sorted(self._rtree.intersection(area.envelope()))
        return [self.catalog[i] for i in ids]
