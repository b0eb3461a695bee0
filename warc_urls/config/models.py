"""Pydantic models describing one extraction run."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_TARGET_FIELD = "WARC-Target-URI"


class DedupStrategy(str, Enum):
    """Backings available for the sink's membership set."""

    EXACT = "exact"
    DIGEST = "digest"
    SQLITE = "sqlite"


class DeduplicationConfig(BaseModel):
    """How the sink remembers URIs it already wrote."""

    strategy: DedupStrategy = Field(default=DedupStrategy.EXACT)
    store_path: Path | None = Field(
        default=None,
        description="SQLite file for the sqlite strategy; a private temporary database when unset.",
    )

    @field_validator("store_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @model_validator(mode="after")
    def _validate_store(self) -> "DeduplicationConfig":
        if self.store_path is not None and self.strategy is not DedupStrategy.SQLITE:
            raise ValueError("store_path is only used by the sqlite strategy")
        return self


class ExtractConfig(BaseModel):
    """Validated settings for a single pipeline run."""

    input_path: Path
    concurrency: int = 4
    queue_size: int = 16
    target_field: str = DEFAULT_TARGET_FIELD
    output_path: Path | None = None
    profile_output_path: Path | None = None
    deduplication: DeduplicationConfig = Field(default_factory=DeduplicationConfig)

    @field_validator("input_path", mode="before")
    @classmethod
    def _require_input(cls, value: Any) -> Path:
        if value is None or not str(value).strip():
            raise ValueError("input path must be set")
        return Path(value)

    @field_validator("output_path", "profile_output_path", mode="before")
    @classmethod
    def _coerce_optional_path(cls, value: Any) -> Path | None:
        if value in (None, ""):
            return None
        return Path(value)

    @field_validator("concurrency")
    @classmethod
    def _positive_concurrency(cls, value: int) -> int:
        if value < 1:
            raise ValueError("concurrency must be a positive integer")
        return value

    @field_validator("queue_size")
    @classmethod
    def _positive_queue(cls, value: int) -> int:
        if value < 1:
            raise ValueError("queue_size must be >= 1")
        return value

    @field_validator("target_field")
    @classmethod
    def _non_empty_field(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("target_field cannot be empty")
        return value


__all__ = [
    "DEFAULT_TARGET_FIELD",
    "DedupStrategy",
    "DeduplicationConfig",
    "ExtractConfig",
]
