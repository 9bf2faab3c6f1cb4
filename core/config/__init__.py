"""
Configuration system with Pydantic validation.

Single source of truth for host configuration parameters.
"""

from .schema import (
    HostConfig,
    AlgorithmConfig,
    JobConfig,
    LoggingConfig,
    JobMode,
    LogLevel,
)

from .loader import (
    ConfigLoader,
    load_config,
)

from .env import (
    load_env,
    env_flag,
)

__all__ = [
    "HostConfig",
    "AlgorithmConfig",
    "JobConfig",
    "LoggingConfig",
    "JobMode",
    "LogLevel",
    "ConfigLoader",
    "load_config",
    "load_env",
    "env_flag",
]
