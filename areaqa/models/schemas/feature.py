"""Validation schema for ingested GeoJSON area features."""

from datetime import datetime
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from areaqa.geometry.types import AreaSource, SourceKind

META_PROPERTIES = ("osm_type", "osm_id", "changeset", "user", "timestamp", "tags")


class FeatureProperties(BaseModel):
    """Provenance and tags of one assembled area."""

    osm_type: Literal["way", "relation"]
    osm_id: int
    changeset: int = 0
    user: str = ""
    timestamp: Optional[datetime] = None
    tags: dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def collect_flat_tags(cls, data: Any) -> Any:
        """Accept tags either as a ``tags`` object or as plain extra properties."""
        if not isinstance(data, dict) or "tags" in data:
            return data
        tags = {k: v for k, v in data.items() if k not in META_PROPERTIES}
        meta = {k: v for k, v in data.items() if k in META_PROPERTIES}
        return {**meta, "tags": tags}

    @field_validator("osm_type", mode="before")
    @classmethod
    def normalize_type(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip().lower()
            return {"w": "way", "r": "relation"}.get(v, v)
        return v

    @field_validator("tags", mode="before")
    @classmethod
    def stringify_tags(cls, v: Any) -> dict[str, str]:
        if not isinstance(v, dict):
            raise ValueError("tags must be an object")
        return {str(k): str(val) for k, val in v.items() if val is not None}

    @field_validator("user", mode="before")
    @classmethod
    def user_not_null(cls, v: Any) -> str:
        return "" if v is None else str(v)


class SourceFeature(BaseModel):
    """A GeoJSON Feature whose geometry is an assembled area."""

    type: Literal["Feature"]
    geometry: Optional[dict[str, Any]]
    properties: FeatureProperties

    def to_source(self) -> AreaSource:
        props = self.properties
        return AreaSource(
            geometry=self.geometry,
            source_kind=SourceKind(props.osm_type),
            origin_id=props.osm_id,
            changeset_id=props.changeset,
            author=props.user,
            timestamp=props.timestamp,
            tags=props.tags,
        )
