"""
Configuration schema using Pydantic for validation.

Single source of truth for host parameters.
Validates on load, fails fast on invalid config.
"""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, ConfigDict
from typing import Optional, Dict, Any
from pathlib import Path
from enum import Enum


# ============================================================================
# ENUMS
# ============================================================================

class JobMode(str, Enum):
    """Run mode of the job being set up."""
    BACKTEST = "backtest"
    LIVE = "live"


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# ============================================================================
# ALGORITHM CONFIGURATION
# ============================================================================

class AlgorithmConfig(BaseModel):
    """
    Which algorithm to load and how long loading may take.

    RULES:
    - location is a .py file path or an importable dotted module name
    - load timeout must be positive (default one hour)
    """

    location: str = Field(
        min_length=1,
        description="Artifact: path to a .py file or dotted module name"
    )

    type_name: Optional[str] = Field(
        default=None,
        description="Algorithm type to select (None = the only one in the artifact)"
    )

    load_timeout_seconds: float = Field(
        gt=0,
        default=3600.0,
        description="Time limit for load + construction"
    )

    model_config = ConfigDict(validate_assignment=True)

    @field_validator("type_name")
    @classmethod
    def blank_type_name_is_none(cls, v: Optional[str]) -> Optional[str]:
        """An empty type name means 'match anything'."""
        if v is not None and not v.strip():
            return None
        return v


# ============================================================================
# JOB CONFIGURATION
# ============================================================================

class JobConfig(BaseModel):
    """Identity and mode of the local job."""

    mode: JobMode = Field(
        default=JobMode.BACKTEST,
        description="backtest or live (paper-traded)"
    )

    user_id: int = Field(
        ge=0,
        default=0,
        description="Owner of the job (setup overwrites this for backtests)"
    )

    project_id: int = Field(
        ge=0,
        default=0,
        description="Project the algorithm belongs to"
    )

    algorithm_id: str = Field(
        default="",
        description="Algorithm identifier, used as log correlation id"
    )

    model_config = ConfigDict(validate_assignment=True)


# ============================================================================
# LOGGING CONFIGURATION
# ============================================================================

class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_dir: Path = Field(
        default=Path("logs"),
        description="Base log directory"
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="File logging level"
    )

    console_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Console logging level"
    )

    json_logs: bool = Field(
        default=True,
        description="Use JSON formatting"
    )

    max_bytes: int = Field(
        ge=1_000_000,
        le=100_000_000,
        default=10_000_000,
        description="Max bytes per log file"
    )

    backup_count: int = Field(
        ge=1,
        le=20,
        default=5,
        description="Number of backup files"
    )


# ============================================================================
# MASTER CONFIGURATION
# ============================================================================

class HostConfig(BaseModel):
    """
    Master configuration schema.

    Validates on load, fails fast on invalid config.
    """

    algorithm: AlgorithmConfig
    job: JobConfig = Field(default_factory=JobConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = ConfigDict(validate_assignment=True)

    @property
    def live_mode(self) -> bool:
        return self.job.mode == JobMode.LIVE

    @classmethod
    def from_yaml(cls, path: Path) -> "HostConfig":
        """Load config from YAML file."""
        import yaml
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostConfig":
        """Load config from dictionary."""
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save config to YAML file."""
        import yaml
        data = self.model_dump(mode="json")
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)
