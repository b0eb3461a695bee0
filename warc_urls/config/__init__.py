"""Configuration package exports."""

from .loader import CONFIG_ENV_VAR, load_extract_config
from .models import DEFAULT_TARGET_FIELD, DedupStrategy, DeduplicationConfig, ExtractConfig

__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_TARGET_FIELD",
    "DedupStrategy",
    "DeduplicationConfig",
    "ExtractConfig",
    "load_extract_config",
]
