"""Application configuration from environment variables."""

from __future__ import annotations

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    coverage2vec_log_level: str = "info"

    # Final tuning tolerance, fraction of 255
    coverage2vec_max_error: float = 0.05

    # Output
    coverage2vec_layer: str = "polygons"
    coverage2vec_driver: str = "GPKG"

    # Extraction window and pass schedule ("fixed" or "converge")
    coverage2vec_flush_rows: int = 8
    coverage2vec_schedule: str = "fixed"

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


settings = Settings()
