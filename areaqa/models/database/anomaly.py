"""Tables receiving overlap and single-area anomalies."""

from typing import Optional

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from areaqa.infrastructure.database import Base


class OverlapFeature(Base):
    """Intersection of two anomalous areas, with both areas' provenance."""

    __tablename__ = "area_overlaps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    layer: Mapped[str] = mapped_column(String(20), index=True)
    geometry: Mapped[str] = mapped_column(Text)

    area1_id: Mapped[str] = mapped_column(String(20))
    area1_type: Mapped[str] = mapped_column(String(20))
    area1_changeset: Mapped[str] = mapped_column(String(20))
    area1_user: Mapped[str] = mapped_column(String(255))
    area1_timestamp: Mapped[str] = mapped_column(String(32))
    area1_key: Mapped[str] = mapped_column(String(64))
    area1_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    area2_id: Mapped[str] = mapped_column(String(20))
    area2_type: Mapped[str] = mapped_column(String(20))
    area2_changeset: Mapped[str] = mapped_column(String(20))
    area2_user: Mapped[str] = mapped_column(String(255))
    area2_timestamp: Mapped[str] = mapped_column(String(32))
    area2_key: Mapped[str] = mapped_column(String(64))
    area2_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    style: Mapped[str] = mapped_column(String(20))


class AreaErrorFeature(Base):
    """A single area flagged for its size or shape."""

    __tablename__ = "area_errors"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    layer: Mapped[str] = mapped_column(String(20), index=True)
    geometry: Mapped[str] = mapped_column(Text)

    area_id: Mapped[str] = mapped_column(String(20))
    area_type: Mapped[str] = mapped_column(String(20))
    area_changeset: Mapped[str] = mapped_column(String(20))
    area_user: Mapped[str] = mapped_column(String(255))
    area_timestamp: Mapped[str] = mapped_column(String(32))
    area_key: Mapped[str] = mapped_column(String(64))
    area_value: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    errormsg: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    style: Mapped[str] = mapped_column(String(20))
