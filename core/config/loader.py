"""
Configuration loader with environment variable overrides.

Loads configuration from:
1. config.yaml (main config)
2. .env.local (loaded into process env)
3. Environment variables (highest priority)
"""

import os
from pathlib import Path
from typing import Any, Dict, Optional
from dotenv import load_dotenv
from pydantic import ValidationError
import yaml

from .env import env_flag


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources.

    Priority (highest to lowest):
    1. OS Environment variables
    2. .env.local file
    3. config.yaml

    Supported overrides:
        ALGORITHM_LOCATION      -> algorithm.location
        ALGORITHM_TYPE_NAME     -> algorithm.type_name
        ALGORITHM_LOAD_TIMEOUT  -> algorithm.load_timeout_seconds
        LIVE_MODE               -> job.mode (live when truthy)
    """

    def __init__(self, config_dir: Path = Path("config"), config_file: Optional[Path] = None):
        self.config_dir = Path(config_dir)
        self.config_file = Path(config_file) if config_file else self.config_dir / "config.yaml"
        self.env_file = self.config_dir / ".env.local"

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources.

        Returns:
            Merged configuration dictionary

        Raises:
            FileNotFoundError: If config.yaml doesn't exist
            ValueError: If the file is empty or not a mapping
        """
        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        # 1) Base config from YAML
        with open(self.config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f)

        if config is None:
            raise ValueError(f"Empty configuration file: {self.config_file}")
        if not isinstance(config, dict):
            raise ValueError(f"Configuration root must be a mapping: {self.config_file}")

        # 2) .env.local, never overriding already-set OS env vars
        if self.env_file.exists():
            load_dotenv(self.env_file, override=False)

        # 3) Environment overrides
        return self.apply_env_overrides(config)

    @staticmethod
    def apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply supported environment variables onto *config* in place."""
        algorithm = config.setdefault("algorithm", {}) or {}
        config["algorithm"] = algorithm

        location = os.getenv("ALGORITHM_LOCATION")
        if location:
            algorithm["location"] = location

        type_name = os.getenv("ALGORITHM_TYPE_NAME")
        if type_name is not None:
            algorithm["type_name"] = type_name

        timeout = os.getenv("ALGORITHM_LOAD_TIMEOUT")
        if timeout:
            try:
                algorithm["load_timeout_seconds"] = float(timeout)
            except ValueError as e:
                raise ValueError(f"ALGORITHM_LOAD_TIMEOUT is not a number: {timeout!r}") from e

        if os.getenv("LIVE_MODE") is not None:
            job = config.setdefault("job", {}) or {}
            config["job"] = job
            job["mode"] = "live" if env_flag("LIVE_MODE") else "backtest"

        return config

    def load_and_validate(self):
        """
        Load and validate configuration.

        Returns:
            HostConfig instance

        Raises:
            ValueError: If configuration is invalid
        """
        from .schema import HostConfig

        config_dict = self.load()

        try:
            return HostConfig(**config_dict)
        except ValidationError as e:
            raise ValueError(f"Configuration validation failed: {e}") from e


def load_config(config_dir: Path = Path("config")):
    """
    Convenience function to load and validate configuration.

    Args:
        config_dir: Directory containing config files

    Returns:
        Validated HostConfig instance
    """
    loader = ConfigLoader(config_dir)
    return loader.load_and_validate()
