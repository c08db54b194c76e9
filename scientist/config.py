"""Configuration loading and validation utilities."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, field_validator


class LoggingConfig(BaseModel):
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("level")
    @classmethod
    def validate_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"unknown logging level: {value}")
        return level


class ExperimentSettings(BaseModel):
    """Per-experiment switches, keyed by experiment name in the app config."""

    enabled: bool = Field(
        default=True, description="Run the candidate and publish results for this experiment"
    )
    description: Optional[str] = Field(
        default=None, description="Human-readable description of the experiment"
    )


class AppConfig(BaseModel):
    logging: LoggingConfig = LoggingConfig()
    experiments: Dict[str, ExperimentSettings] = Field(
        default_factory=dict, description="Experiment settings keyed by experiment name"
    )

    @staticmethod
    def from_yaml(path: str | Path) -> "AppConfig":
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return AppConfig(**data)

    def experiment_settings(self, name: str) -> ExperimentSettings:
        """Get settings for an experiment, falling back to defaults for unknown names."""
        return self.experiments.get(name) or ExperimentSettings()


DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent.parent / "config" / "base.yaml"


def load_app_config(path: str | Path | None = None) -> AppConfig:
    """Load application config from YAML.

    Args:
        path: Optional path to YAML config. If None, defaults to config/base.yaml.
    """
    resolved = Path(path) if path else DEFAULT_CONFIG_PATH
    return AppConfig.from_yaml(resolved)


def configure_logging(config: LoggingConfig) -> None:
    """Apply logging settings to the root logger."""
    logging.basicConfig(level=config.level, format=config.format)
