from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .logging import normalize_level

LogFormat = Literal["json", "console"]
MissingTerminal = Literal["unknown", "failed"]
ParquetCompression = Literal["zstd", "snappy", "gzip", "none"]


class Settings(BaseSettings):
    """
    Runtime settings, read from `RUN_TIMELINE_*` environment variables or a
    local `.env` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="RUN_TIMELINE_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(default="INFO")
    log_format: LogFormat = Field(default="console")

    # what a step still running at run exit becomes
    missing_terminal: MissingTerminal = Field(default="unknown")

    # with a free-text filter, show only matching log lines
    hide_non_matches: bool = Field(default=True)
    export_compression: ParquetCompression = Field(default="zstd")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, v: str) -> str:
        level = normalize_level(v)
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {v!r}")
        return level


@lru_cache(maxsize=1)
def load_settings() -> Settings:
    return Settings()
