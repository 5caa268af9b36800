"""Anomaly repository: routes records into their destination tables."""

import logging
from typing import Optional

from shapely.geometry import MultiPolygon, Polygon
from shapely.geometry.base import BaseGeometry
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from areaqa.config import get_settings
from areaqa.core.exceptions import UnknownLayerError
from areaqa.geometry.area import Area
from areaqa.geometry.types import AnomalyRecord
from areaqa.models.database.anomaly import AreaErrorFeature, OverlapFeature

logger = logging.getLogger(__name__)

OVERLAP_LAYERS = {
    "overlap": "overlap",
    "natural": "natural",
    "building": "building",
    "hierarchy": "hierarchy",
}

AREA_LAYERS = {
    "huge1": "huge",
    "huge2": "huge",
    "complex": "suspicious",
    "lsize1": "suspicious",
    "lsize2": "suspicious",
}


def to_multipolygon(geometry: Optional[BaseGeometry]) -> Optional[MultiPolygon]:
    """Polygonal part of a geometry as a MultiPolygon, or None if it has none."""
    if geometry is None or geometry.is_empty:
        return None
    if isinstance(geometry, MultiPolygon):
        return geometry
    if isinstance(geometry, Polygon):
        return MultiPolygon([geometry])

    polygons = []
    for part in getattr(geometry, "geoms", []):
        member = to_multipolygon(part)
        if member is not None:
            polygons.extend(member.geoms)
    return MultiPolygon(polygons) if polygons else None


def _area_fields(prefix: str, area: Area) -> dict[str, Optional[str]]:
    return {
        f"{prefix}_id": str(area.origin_id),
        f"{prefix}_type": area.source_string,
        f"{prefix}_changeset": str(area.changeset_id),
        f"{prefix}_user": area.author,
        f"{prefix}_timestamp": area.timestamp_iso,
        f"{prefix}_key": area.classification_key,
        f"{prefix}_value": area.classification_value,
    }


class AnomalyRepository:
    """Persistence sink for anomaly records.

    Every label must map to a destination layer; an unmapped label means a
    policy was wired without a destination and raises ``UnknownLayerError``.
    """

    def __init__(self, session: Session, batch_size: Optional[int] = None):
        self.session = session
        self.batch_size = batch_size or get_settings().commit_batch_size
        self._pending = 0
        self.written = 0
        self.skipped = 0

    @staticmethod
    def destination(label: str) -> str:
        if label in OVERLAP_LAYERS:
            return OVERLAP_LAYERS[label]
        if label in AREA_LAYERS:
            return AREA_LAYERS[label]
        raise UnknownLayerError(label)

    def write(self, record: AnomalyRecord) -> None:
        layer = self.destination(record.label)

        if record.is_pairwise:
            if record.label not in OVERLAP_LAYERS:
                raise UnknownLayerError(record.label)
            self.write_overlap(record, layer)
        else:
            if record.label not in AREA_LAYERS:
                raise UnknownLayerError(record.label)
            self.write_area(record, layer)

    def write_overlap(self, record: AnomalyRecord, layer: str) -> None:
        a, b = record.area_a, record.area_b
        shape = to_multipolygon(record.geometry)
        if shape is None:
            self.skipped += 1
            logger.debug(f"No polygonal intersection for {a.describe()} / {b.describe()}")
            return

        self.session.add(OverlapFeature(
            layer=layer,
            geometry=shape.wkt,
            style=record.style,
            **_area_fields("area1", a),
            **_area_fields("area2", b),
        ))
        self._added()

        logger.info(
            f"{a.describe()} overlaps {b.describe()} "
            f"changesets {a.changeset_id},{b.changeset_id} "
            f"{a.timestamp_iso},{b.timestamp_iso} "
            f"{a.author},{b.author}"
        )

    def write_area(self, record: AnomalyRecord, layer: str) -> None:
        area = record.area_a
        self.session.add(AreaErrorFeature(
            layer=layer,
            geometry=area.geometry.wkt,
            errormsg=record.message,
            style=record.style,
            **_area_fields("area", area),
        ))
        self._added()

        logger.info(f"{area.describe()} error {record.message}")

    def _added(self) -> None:
        self.written += 1
        self._pending += 1
        if self._pending >= self.batch_size:
            self.session.commit()
            self._pending = 0

    def count(self, layer: Optional[str] = None) -> int:
        """Number of stored rows, optionally for one layer."""
        total = 0
        for model in (OverlapFeature, AreaErrorFeature):
            stmt = select(func.count()).select_from(model)
            if layer is not None:
                stmt = stmt.where(model.layer == layer)
            total += self.session.execute(stmt).scalar_one()
        return total

    def close(self) -> None:
        self.session.commit()
        self._pending = 0
        self.session.close()
