"""Runtime configuration, read from ``CAFEPOS_*`` environment variables.

Business settings (tax rate, tax-inclusive pricing) are not here: they
live in the settings store and are read per order.
"""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="CAFEPOS_", env_file=".env", extra="ignore")

    data_dir: Path = Path("data")
    timezone: str = "UTC"  # IANA name; order-number dates use this zone
    log_level: str = "INFO"
    log_json: bool = False


def load_config() -> AppConfig:
    """Build a fresh config so environment changes are picked up."""
    return AppConfig()
