from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CLIPTIMING_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Smart clip resolution
    default_auto_length_s: float = 3.0
    min_clip_length_ms: int = 100
    probeable_asset_types: list[str] = ["video", "audio", "luma"]

    # Duration probing (ffprobe)
    ffprobe_path: str = "ffprobe"
    # Upper bound for a single probe; a probe that never settles falls back to the default length
    probe_timeout_s: float = 10.0

    # Undo/redo
    history_limit: int = 100


@lru_cache
def get_settings() -> Settings:
    return Settings()
