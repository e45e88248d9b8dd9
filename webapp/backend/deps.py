"""
Configuration helpers for the clinical-note web backend.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional, Tuple

from clinote.config import apply_runtime_config


def _int_or_none(value: Optional[str]) -> Optional[int]:
    if value is None or not value.strip():
        return None
    return int(value)


def _split_origins(value: Optional[str]) -> Tuple[str, ...]:
    if not value:
        return ("*",)
    return tuple(part.strip() for part in value.split(",") if part.strip())


@dataclass(frozen=True)
class Settings:
    """Runtime configuration pulled from environment variables."""

    dataset_path: str = field(
        default_factory=lambda: os.getenv("CLINOTE_DATASET_PATH", "data/healthcare_dataset.json")
    )
    dataset_sample_size: int = field(
        default_factory=lambda: int(os.getenv("CLINOTE_DATASET_SAMPLE_SIZE", "5"))
    )
    # Fixed seed makes generated patient ids reproducible; unset means random.
    random_seed: Optional[int] = field(default_factory=lambda: _int_or_none(os.getenv("CLINOTE_RANDOM_SEED")))
    cors_origins: Tuple[str, ...] = field(default_factory=lambda: _split_origins(os.getenv("CLINOTE_CORS_ORIGINS")))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Cached settings instance.

    The optional JSON runtime config is applied first; environment
    variables that are already set keep precedence over it.
    """

    apply_runtime_config()
    return Settings()
