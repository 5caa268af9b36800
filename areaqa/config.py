"""Application configuration using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    app_name: str = "AreaQA"
    app_version: str = "1.0.0"
    debug: bool = False

    database_url: str = "sqlite:///./areaqa.db"
    commit_batch_size: int = 1000

    # Projection settings
    source_crs: str = "EPSG:4326"
    metric_crs: str = "EPSG:31467"

    # Spatial index settings
    index_capacity: int = 100
    leaf_capacity: int = 100
    index_fill_factor: float = 0.5

    # Land-use size thresholds (degrees / square meters)
    complexity_threshold: float = 2000.0
    tiny_area_threshold: float = 40.0
    small_area_threshold: float = 100.0
    large_area_threshold: float = 200000.0
    huge_area_threshold: float = 400000.0


@lru_cache
def get_settings() -> Settings:
    return Settings()
