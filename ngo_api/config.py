"""Configuration helpers for the NGO API."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

DEFAULT_GENERATOR_URL = "http://localhost:8003/selectNews"
DEFAULT_MAX_RESPONSE_BYTES = 100 * 1024 * 1024


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    database_path: Path
    news_generator_url: str = DEFAULT_GENERATOR_URL
    news_fetch_timeout: float = 60.0
    news_max_response_bytes: int = DEFAULT_MAX_RESPONSE_BYTES
    timezone: str = "UTC"

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


def _positive(name: str, raw: str, cast):
    try:
        value = cast(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive")
    return value


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    db_path = Path(os.getenv("DATABASE_PATH", "ngo.db")).expanduser()
    timeout = _positive("NEWS_FETCH_TIMEOUT", os.getenv("NEWS_FETCH_TIMEOUT", "60"), float)
    max_bytes = _positive(
        "NEWS_MAX_RESPONSE_BYTES",
        os.getenv("NEWS_MAX_RESPONSE_BYTES", str(DEFAULT_MAX_RESPONSE_BYTES)),
        int,
    )

    tz_name = os.getenv("TIMEZONE", "UTC")
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"TIMEZONE {tz_name!r} is not a known zone") from exc

    return Settings(
        database_path=db_path,
        news_generator_url=os.getenv("NEWS_GENERATOR_URL", DEFAULT_GENERATOR_URL),
        news_fetch_timeout=timeout,
        news_max_response_bytes=max_bytes,
        timezone=tz_name,
    )


__all__ = ["Settings", "load_settings"]
