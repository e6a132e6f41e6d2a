"""Configuration management for syndicore."""

from .loader import DEFAULT_CONFIG_PATH, Config, load_config, save_config
from .models import ConfigModel, FetchConfig, RateLimitConfig, SanitizerConfig

__all__ = [
    "Config",
    "ConfigModel",
    "FetchConfig",
    "RateLimitConfig",
    "SanitizerConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config",
    "save_config",
]
