"""Type definitions for the geometry engine.

Contains enums and data classes used throughout the geometry module.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional, Protocol

from shapely.geometry.base import BaseGeometry

if TYPE_CHECKING:
    from areaqa.geometry.area import Area


class AreaType(str, Enum):
    """Classification category of an area, in tag precedence order."""

    UNKNOWN = "unknown"
    NATURAL = "natural"
    LANDUSE = "landuse"
    BUILDING = "building"
    AMENITY = "amenity"
    LEISURE = "leisure"
    MAN_MADE = "man_made"


class SourceKind(str, Enum):
    """Map-edit primitive an area was assembled from."""

    WAY = "way"
    RELATION = "relation"


class EnginePhase(str, Enum):
    BUILD = "build"
    COMPARE = "compare"


@dataclass
class AreaSource:
    """One assembled area as delivered by the ingestion collaborator.

    ``geometry`` is either a shapely geometry or a GeoJSON-like mapping.
    """

    geometry: Any
    source_kind: SourceKind
    origin_id: int
    changeset_id: int = 0
    author: str = ""
    timestamp: Optional[datetime] = None
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class AnomalyRecord:
    """Result of a policy match, handed to an ``AnomalySink``."""

    label: str
    area_a: "Area"
    area_b: Optional["Area"] = None
    geometry: Optional[BaseGeometry] = None
    message: Optional[str] = None

    @property
    def style(self) -> str:
        return self.label

    @property
    def is_pairwise(self) -> bool:
        return self.area_b is not None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging and serialization."""
        result = {
            "label": self.label,
            "area_a": self.area_a.metadata(),
            "message": self.message,
        }
        if self.area_b is not None:
            result["area_b"] = self.area_b.metadata()
        return result


class AnomalySink(Protocol):
    """Anything accepting anomaly records, one at a time."""

    def write(self, record: AnomalyRecord) -> None: ...


@dataclass
class BuildStats:
    """Counters for one build phase."""

    received: int = 0
    built: int = 0
    failed: int = 0
    unclassified: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "received": self.received,
            "built": self.built,
            "failed": self.failed,
            "unclassified": self.unclassified,
        }
