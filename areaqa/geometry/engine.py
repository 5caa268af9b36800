"""Two-phase overlap engine: build the catalog, then run policies over it."""

import logging
from typing import Iterable, Optional, Union

from shapely.errors import ShapelyError

from areaqa.config import Settings, get_settings
from areaqa.core.exceptions import EngineStateError
from areaqa.geometry.area import Area, AreaBuildResult, AreaCatalog
from areaqa.geometry.index import AreaIndex
from areaqa.geometry.rules import PairwisePolicy, SinglePolicy
from areaqa.geometry.types import (
    AnomalyRecord,
    AnomalySink,
    AreaSource,
    AreaType,
    BuildStats,
    EnginePhase,
)

logger = logging.getLogger(__name__)


class OverlapEngine:
    """
    Owns the area catalog and its spatial index.

    Phases:
    1. BUILD: areas are added to the catalog and the index
    2. COMPARE: policies run, strictly one after another, over the frozen catalog

    The first compare call ends the build phase for good.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.catalog = AreaCatalog()
        self.index = AreaIndex(
            self.catalog,
            index_capacity=self.settings.index_capacity,
            leaf_capacity=self.settings.leaf_capacity,
            fill_factor=self.settings.index_fill_factor,
        )
        self.phase = EnginePhase.BUILD

    def add(self, source: AreaSource) -> AreaBuildResult:
        """Build one Area from an ingested source record and index it."""
        if self.phase != EnginePhase.BUILD:
            raise EngineStateError("Cannot add areas once comparison has started")

        result = self.catalog.build_area(source)
        if result.ok:
            self.index.insert(result.area)
        return result

    def build(self, sources: Iterable[AreaSource]) -> BuildStats:
        """Consume all source records. Per-record geometry failures are logged and skipped."""
        stats = BuildStats()

        for source in sources:
            stats.received += 1
            result = self.add(source)

            if not result.ok:
                stats.failed += 1
                stats.errors.append(f"{source.origin_id}: {result.error}")
                logger.warning(
                    f"GEOMETRY ERROR: id {source.origin_id}: {result.error}"
                )
                continue

            stats.built += 1
            if result.area.classification_type == AreaType.UNKNOWN:
                stats.unclassified += 1

        logger.info(
            f"Build done: {stats.built} areas, {stats.failed} failed, "
            f"{stats.unclassified} unclassified"
        )
        return stats

    def seal(self) -> None:
        if self.phase == EnginePhase.BUILD:
            logger.debug(f"Catalog sealed with {len(self.catalog)} areas")
        self.phase = EnginePhase.COMPARE

    def candidates(self, anchor: Area, policy: PairwisePolicy) -> list[Area]:
        """Index hits for ``anchor`` that survive self, ordering and want filters."""
        result = []

        for other in self.index.query(anchor):
            if other is anchor:
                continue

            # Same-type pairs are compared once, from the lower id. Cross-type
            # pairs are tried in both orders since want_a/want_b are asymmetric.
            if (
                other.classification_type == anchor.classification_type
                and other.id < anchor.id
            ):
                continue

            if not (
                (policy.want_a(anchor) and policy.want_b(other))
                or (policy.want_a(other) and policy.want_b(anchor))
            ):
                continue

            result.append(other)

        return result

    def process_overlap(self, policy: PairwisePolicy, sink: AnomalySink) -> int:
        """Run a pairwise policy over the catalog. Returns the number of records emitted."""
        self.seal()
        emitted = 0

        for anchor in self.catalog:
            if not policy.want_a(anchor):
                continue

            logger.debug(f"Checking overlap for {anchor.origin_id}")

            for other in self.candidates(anchor, policy):
                logger.debug(f"\tIndex returned {other.origin_id}")

                try:
                    label = policy.compare(anchor, other)
                except ShapelyError as e:
                    logger.warning(
                        f"Predicate failed for {anchor.describe()} / {other.describe()}: {e}"
                    )
                    continue

                if not label:
                    continue

                sink.write(AnomalyRecord(
                    label=label,
                    area_a=anchor,
                    area_b=other,
                    geometry=self._intersection(anchor, other),
                ))
                emitted += 1

        logger.info(f"Policy {policy.name}: {emitted} records")
        return emitted

    def foreach(self, policy: SinglePolicy, sink: AnomalySink) -> int:
        """Run a single-operand policy over every wanted area."""
        self.seal()
        emitted = 0

        for area in self.catalog:
            if not policy.want(area):
                continue

            for record in policy.process(area):
                sink.write(record)
                emitted += 1

        logger.info(f"Policy {policy.name}: {emitted} records")
        return emitted

    def run(
        self,
        policies: Iterable[Union[PairwisePolicy, SinglePolicy]],
        sink: AnomalySink,
    ) -> dict[str, int]:
        """Run policies in sequence. Returns record counts per policy name."""
        counts = {}
        for policy in policies:
            if isinstance(policy, SinglePolicy):
                counts[policy.name] = self.foreach(policy, sink)
            else:
                counts[policy.name] = self.process_overlap(policy, sink)
        return counts

    @staticmethod
    def _intersection(a: Area, b: Area):
        try:
            return a.geometry.intersection(b.geometry)
        except ShapelyError as e:
            logger.warning(f"Intersection failed for {a.describe()} / {b.describe()}: {e}")
            return None
