"""Read assembled map areas from GeoJSON into AreaSource records."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator

from pydantic import ValidationError

from areaqa.core.exceptions import InputFormatError
from areaqa.geometry.area import CLASSIFYING_KEYS
from areaqa.geometry.types import AreaSource
from areaqa.models.schemas.feature import SourceFeature

logger = logging.getLogger(__name__)


@dataclass
class IngestionStats:
    features: int = 0
    accepted: int = 0
    invalid: int = 0
    filtered: int = 0


class GeoJSONAreaReader:
    """
    Yield AreaSource records from a GeoJSON file.

    Accepts a FeatureCollection or newline-delimited features. Features that
    fail validation are logged and skipped; features without a classifying
    tag are dropped before they reach the catalog.
    """

    def __init__(self, path: str | Path):
        self.path = Path(path)
        self.stats = IngestionStats()

    def __iter__(self) -> Iterator[AreaSource]:
        return self.read()

    def read(self) -> Iterator[AreaSource]:
        if not self.path.exists():
            raise FileNotFoundError(f"Input not found: {self.path}")

        logger.info(f"Reading areas from {self.path.name}")
        for feature in self._features():
            source = self.parse_feature(feature)
            if source is not None:
                yield source

        logger.info(
            f"Read {self.stats.features} features: {self.stats.accepted} accepted, "
            f"{self.stats.invalid} invalid, {self.stats.filtered} without area tags"
        )

    def _features(self) -> Iterable[dict[str, Any]]:
        with self.path.open(encoding="utf-8") as fh:
            if not self._is_line_delimited():
                document = json.load(fh)
                if not isinstance(document, dict):
                    raise InputFormatError(
                        f"{self.path.name}: expected a GeoJSON object, got {type(document).__name__}"
                    )
                if document.get("type") == "FeatureCollection":
                    yield from document.get("features", [])
                else:
                    yield document
                return

            for line_no, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield json.loads(line)
                except json.JSONDecodeError as e:
                    self.stats.features += 1
                    self.stats.invalid += 1
                    logger.warning(f"Line {line_no}: invalid JSON: {e}")

    def _is_line_delimited(self) -> bool:
        return self.path.suffix.lower() in (".geojsonl", ".geojsons", ".ndjson", ".jsonl")

    def parse_feature(self, feature: Any) -> AreaSource | None:
        """Validate one feature. Returns None when it is skipped."""
        self.stats.features += 1

        try:
            parsed = SourceFeature.model_validate(feature)
        except ValidationError as e:
            self.stats.invalid += 1
            ident = feature.get("id") if isinstance(feature, dict) else None
            logger.warning(f"Invalid feature {ident}: {e.error_count()} validation error(s)")
            logger.debug(str(e))
            return None

        if not CLASSIFYING_KEYS.intersection(parsed.properties.tags):
            self.stats.filtered += 1
            return None

        self.stats.accepted += 1
        return parsed.to_source()


def read_areas(path: str | Path) -> Iterator[AreaSource]:
    return GeoJSONAreaReader(path).read()
