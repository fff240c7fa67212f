"""Process configuration loaded from environment variables."""

from functools import lru_cache
from pathlib import Path

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All configuration is loaded from environment variables (or .env file)."""

    # --- App ---
    app_name: str = "CycleCast"
    app_version: str = "0.1.0"
    log_level: str = "INFO"

    # --- Engine ---
    engine_config_path: Path | None = None  # overrides the bundled cycle_config.yaml
    random_seed: int | None = None  # seeds the luteal jitter source

    model_config = {
        "env_prefix": "CYCLECAST_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


@lru_cache
def get_settings() -> Settings:
    return Settings()
