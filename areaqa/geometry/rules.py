"""Rule policies deciding which areas and pairs are anomalous."""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from areaqa.config import get_settings
from areaqa.core.exceptions import UnknownPolicyError
from areaqa.geometry.area import Area
from areaqa.geometry.metrics import (
    MetricProjector,
    geometry_complexity,
    get_projector,
    planar_area,
)
from areaqa.geometry.types import AnomalyRecord, AreaType

logger = logging.getLogger(__name__)


class PairwisePolicy(ABC):
    """Policy evaluated over candidate pairs found through the spatial index.

    ``want_a`` selects query anchors, ``want_b`` acceptable partners.
    ``compare`` applies the exact test and returns an output label or None.
    """

    name: str = "pairwise"

    @abstractmethod
    def want_a(self, area: Area) -> bool: ...

    @abstractmethod
    def want_b(self, area: Area) -> bool: ...

    @abstractmethod
    def compare(self, a: Area, b: Area) -> Optional[str]: ...


class SinglePolicy(ABC):
    """Policy evaluated once per qualifying area, without spatial queries."""

    name: str = "single"

    @abstractmethod
    def want(self, area: Area) -> bool: ...

    @abstractmethod
    def process(self, area: Area) -> list[AnomalyRecord]: ...


LANDCOVER_TYPES = (AreaType.LANDUSE, AreaType.NATURAL)


class LanduseOverlap(PairwisePolicy):
    """Two land-use or natural polygons covering the same ground."""

    name = "landuse-overlap"

    def want_a(self, area: Area) -> bool:
        return area.classification_type in LANDCOVER_TYPES

    def want_b(self, area: Area) -> bool:
        return self.want_a(area)

    def compare(self, a: Area, b: Area) -> Optional[str]:
        if a.classification_type not in LANDCOVER_TYPES:
            return None
        if b.classification_type not in LANDCOVER_TYPES:
            return None

        # Landuse and natural are both anchors; report each pair once
        if a.id >= b.id:
            return None

        if not a.overlaps(b):
            return None

        if AreaType.NATURAL in (a.classification_type, b.classification_type):
            return "natural"
        return "overlap"


class BuildingOverlap(PairwisePolicy):
    """Buildings overlapping each other on the same layer."""

    name = "building-overlap"

    def want_a(self, area: Area) -> bool:
        return area.classification_type == AreaType.BUILDING

    def want_b(self, area: Area) -> bool:
        return self.want_a(area)

    def compare(self, a: Area, b: Area) -> Optional[str]:
        if (
            a.classification_type != AreaType.BUILDING
            or b.classification_type != AreaType.BUILDING
        ):
            return None

        if a.id >= b.id:
            return None

        # A roof on layer=1 over a building on layer=0 is fine
        if a.layer != b.layer:
            return None

        if a.overlaps(b):
            return "building"
        return None


class AmenityHierarchy(PairwisePolicy):
    """Amenities, leisure and man-made areas cutting across their surroundings.

    Containment is expected here (a playground inside a park), so only a
    partial overlap counts.
    """

    name = "amenity-hierarchy"

    EXCLUDED_LEISURE = ("nature_reserve",)
    EXCLUDED_MAN_MADE = ("pier", "bridge")
    PARENT_TYPES = (AreaType.NATURAL, AreaType.LANDUSE, AreaType.BUILDING)

    @staticmethod
    def _value(area: Area) -> str:
        return (area.classification_value or "").lower()

    def want_a(self, area: Area) -> bool:
        if area.classification_type == AreaType.AMENITY:
            return True
        if area.classification_type == AreaType.LEISURE:
            return self._value(area) not in self.EXCLUDED_LEISURE
        if area.classification_type == AreaType.MAN_MADE:
            return self._value(area) not in self.EXCLUDED_MAN_MADE
        return False

    def want_b(self, area: Area) -> bool:
        if area.classification_type in self.PARENT_TYPES:
            return True
        return self.want_a(area)

    def compare(self, a: Area, b: Area) -> Optional[str]:
        if not (
            (self.want_a(a) and self.want_b(b))
            or (self.want_a(b) and self.want_b(a))
        ):
            return None

        if AreaType.BUILDING in (a.classification_type, b.classification_type):
            if a.layer != b.layer:
                return None

        if a.intersects(b):
            return "hierarchy"
        return None


class LanduseSize(SinglePolicy):
    """Land-use polygons that are suspiciously tiny, huge or jagged."""

    name = "landuse-size"

    def __init__(
        self,
        projector: Optional[MetricProjector] = None,
        thresholds: Optional[dict[str, float]] = None,
    ):
        settings = get_settings()
        self.projector = projector
        self.thresholds = {
            "complexity": settings.complexity_threshold,
            "tiny": settings.tiny_area_threshold,
            "small": settings.small_area_threshold,
            "large": settings.large_area_threshold,
            "huge": settings.huge_area_threshold,
        }
        if thresholds:
            self.thresholds.update(thresholds)

    def want(self, area: Area) -> bool:
        return area.classification_type == AreaType.LANDUSE

    def process(self, area: Area) -> list[AnomalyRecord]:
        projector = self.projector or get_projector()
        projected = projector.project(area.geometry)

        complexity = geometry_complexity(projected)
        size = planar_area(projected)
        logger.debug(
            f"{area.describe()} size {size:.1f} m2 complexity {complexity:.1f}"
        )

        records = []
        limits = self.thresholds

        if complexity > limits["complexity"]:
            records.append(AnomalyRecord(
                label="complex",
                area_a=area,
                message=f"Ring complexity {complexity:.0f} exceeds {limits['complexity']:.0f}",
            ))

        size_label = None
        if size < limits["tiny"]:
            size_label = "lsize1"
            message = f"Area size {size:.1f} m2 below {limits['tiny']:.0f} m2"
        elif size < limits["small"]:
            size_label = "lsize2"
            message = f"Area size {size:.1f} m2 below {limits['small']:.0f} m2"
        elif size > limits["huge"]:
            size_label = "huge2"
            message = f"Area size {size:.0f} m2 above {limits['huge']:.0f} m2"
        elif size > limits["large"]:
            size_label = "huge1"
            message = f"Area size {size:.0f} m2 above {limits['large']:.0f} m2"

        if size_label:
            records.append(AnomalyRecord(
                label=size_label,
                area_a=area,
                message=message,
            ))

        return records


class PolicyRegistry:
    """Central registry of the policies run over a catalog, in run order."""

    def __init__(self):
        self.policies: dict[str, PairwisePolicy | SinglePolicy] = {}
        self._register_all_policies()

    def _register_all_policies(self):
        for policy in (
            LanduseSize(),
            AmenityHierarchy(),
            LanduseOverlap(),
            BuildingOverlap(),
        ):
            self.register(policy)

    def register(self, policy: PairwisePolicy | SinglePolicy) -> None:
        self.policies[policy.name] = policy

    def names(self) -> list[str]:
        return list(self.policies)

    def get(self, name: str) -> PairwisePolicy | SinglePolicy:
        if name not in self.policies:
            raise UnknownPolicyError(name, self.names())
        return self.policies[name]

    def select(self, names: Optional[list[str]] = None) -> list[PairwisePolicy | SinglePolicy]:
        """Policies to run, keeping registry order regardless of the order of ``names``."""
        if not names:
            return list(self.policies.values())
        wanted = {self.get(name).name for name in names}
        return [policy for name, policy in self.policies.items() if name in wanted]
