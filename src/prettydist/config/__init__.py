"""
Configuration helpers for the post-build pipeline.
"""

from ..errors import ConfigError
from .models import DEFAULT_ROOT, PostbuildConfig, build_config, load_config
from .settings import EnvironmentOverrides, get_environment

__all__ = [
    "DEFAULT_ROOT",
    "ConfigError",
    "EnvironmentOverrides",
    "PostbuildConfig",
    "build_config",
    "get_environment",
    "load_config",
]
