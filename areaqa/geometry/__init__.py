"""Geometry engine package for area quality checks.

Provides the area catalog, spatial index, rule policies and geometric
metrics used to find overlapping or suspicious map areas.
"""

from areaqa.geometry.types import AnomalyRecord, AreaSource, AreaType, SourceKind
from areaqa.geometry.area import Area, AreaCatalog, classify
from areaqa.geometry.index import AreaIndex
from areaqa.geometry.engine import OverlapEngine
from areaqa.geometry.rules import PairwisePolicy, PolicyRegistry, SinglePolicy

__all__ = [
    "AnomalyRecord",
    "AreaSource",
    "AreaType",
    "SourceKind",
    "Area",
    "AreaCatalog",
    "classify",
    "AreaIndex",
    "OverlapEngine",
    "PairwisePolicy",
    "PolicyRegistry",
    "SinglePolicy",
]
