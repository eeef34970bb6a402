"""Configuration management system using Pydantic v2 and YAML.

This module provides type-safe configuration loading with validation
for the matcher and the benchmark utility.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from pyramid_match.domain.entities.bin_weight_scheme import BinWeightScheme
from pyramid_match.utils.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
)


class MatcherConfig(BaseModel):
    """Configuration for the pyramid matcher."""

    bin_weight_scheme: BinWeightScheme = Field(
        default=BinWeightScheme.GLOBAL,
        description="Default bin weighting: global (shared binning) or local (summed sizes)",
    )
    log_match_stats: bool = Field(
        default=False,
        description="Log visited pair counts for every match at DEBUG level",
    )

    @field_validator('bin_weight_scheme', mode='before')
    @classmethod
    def normalize_scheme(cls, v: Any) -> Any:
        """Accept scheme names case-insensitively."""
        if isinstance(v, str):
            return v.strip().lower()
        return v


class BenchmarkConfig(BaseModel):
    """Configuration for the matrix multiplication benchmark."""

    min_size: int = Field(default=50, ge=1, description="Smallest square matrix dimension")
    max_size: int = Field(default=200, ge=1, description="Largest square matrix dimension")
    step: int = Field(default=50, ge=1, description="Increment between benchmarked sizes")
    seed: Optional[int] = Field(default=None, description="Random seed for generated matrices")
    rtol: float = Field(default=1e-9, gt=0.0, description="Relative tolerance when comparing strategies")
    strategies: list[str] = Field(
        default_factory=lambda: ["naive", "blas"],
        description="Strategies to run, the first one is the reference",
    )

    @field_validator('strategies')
    @classmethod
    def validate_strategies(cls, v: list[str]) -> list[str]:
        """Ensure strategies are known and non-empty."""
        valid_strategies = ["naive", "blas"]
        if not v:
            raise ValueError("At least one strategy is required")
        normalized = [s.lower() for s in v]
        for name in normalized:
            if name not in valid_strategies:
                raise ValueError(f"Invalid strategy '{name}'. Choose from: {valid_strategies}")
        return normalized

    @model_validator(mode='after')
    def validate_size_range(self) -> 'BenchmarkConfig':
        """Ensure the size range is not inverted."""
        if self.max_size < self.min_size:
            raise ValueError(
                f"max_size must be >= min_size, got {self.max_size} < {self.min_size}"
            )
        return self

    def sizes(self) -> list[int]:
        """Return the benchmarked sizes, inclusive of max_size when on a step."""
        return list(range(self.min_size, self.max_size + 1, self.step))


class AppConfig(BaseModel):
    """Root configuration model containing all sub-configurations."""

    matcher: MatcherConfig = Field(default_factory=MatcherConfig)
    benchmark: BenchmarkConfig = Field(default_factory=BenchmarkConfig)
    log_level: str = Field(default="INFO", description="Logging level")

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level. Choose from: {valid_levels}")
        return v_upper

    @classmethod
    def from_yaml(cls, path: Path | str) -> 'AppConfig':
        """Load configuration from a YAML file.

        Raises:
            FileNotFoundError: If the file doesn't exist
            yaml.YAMLError: If the file is not valid YAML
            pydantic.ValidationError: If values are invalid
        """
        path = Path(path)
        with open(path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f)

        # An empty document means "all defaults"
        return cls.model_validate(config_dict or {})


# Singleton pattern for configuration
_config: Optional[AppConfig] = None


def load_config(config_path: Optional[Path | str] = None) -> AppConfig:
    """Load and validate configuration from YAML file.

    Args:
        config_path: Path to configuration file. Defaults to the
                    PYRAMID_MATCH_CONFIG env var, then config/config.yaml
                    relative to project root

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist
        ConfigurationError: If the file is not a valid YAML document
        ConfigValidationError: If configuration values are invalid
    """
    if config_path is None:
        env_config_path = os.environ.get('PYRAMID_MATCH_CONFIG')
        if env_config_path:
            config_path = Path(env_config_path)
        else:
            project_root = Path(__file__).parent.parent.parent
            config_path = project_root / "config" / "config.yaml"
    else:
        config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(
            f"Configuration file not found: {config_path}\n"
            f"Create it or set the PYRAMID_MATCH_CONFIG environment variable to the config file path.",
            path=str(config_path),
        )

    try:
        return AppConfig.from_yaml(config_path)
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Cannot parse configuration file {config_path}: {e}",
            context={"path": str(config_path)},
        ) from e
    except PydanticValidationError as e:
        first_error = e.errors()[0]
        field = ".".join(str(part) for part in first_error["loc"]) or None
        raise ConfigValidationError(
            f"Invalid configuration in {config_path}: {first_error['msg']}",
            field=field,
            value=first_error.get("input"),
            context={"path": str(config_path), "error_count": e.error_count()},
        ) from e


def get_config(config_path: Optional[Path | str] = None, reload: bool = False) -> AppConfig:
    """Get configuration instance (singleton pattern).

    Args:
        config_path: Path to configuration file (only used on first call or if reload=True)
        reload: Force reload of configuration

    Returns:
        Cached or newly loaded AppConfig instance
    """
    global _config

    if _config is None or reload:
        _config = load_config(config_path)

    return _config


def reset_config() -> None:
    """Reset cached configuration (useful for testing)."""
    global _config
    _config = None
