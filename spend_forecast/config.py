"""
Runtime settings loaded from an optional YAML file and the environment
"""

import logging
import os
import re
from dataclasses import dataclass, fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "FORECAST_"

# Same HH:MM shape schedule accepts for daily jobs
SUMMARY_TIME_PATTERN = re.compile(r"[0-2]\d:[0-5]\d")


@dataclass
class Settings:
    lookahead_days: int = 7
    summary_time: str = "08:00"
    summary_window_minutes: int = 10
    log_level: str = "INFO"
    records_path: Optional[str] = None

    def __post_init__(self):
        try:
            self.lookahead_days = int(self.lookahead_days)
            self.summary_window_minutes = int(self.summary_window_minutes)
        except (TypeError, ValueError) as exc:
            raise ConfigError(f"Invalid numeric setting: {exc}") from exc

        if self.lookahead_days < 0:
            raise ConfigError("lookahead_days must not be negative")
        if self.summary_window_minutes < 1:
            raise ConfigError("summary_window_minutes must be at least 1")

        self.summary_time = str(self.summary_time).strip()
        try:
            datetime.strptime(self.summary_time, "%H:%M")
        except ValueError as exc:
            raise ConfigError(f"summary_time must be HH:MM, got {self.summary_time!r}") from exc
        if not SUMMARY_TIME_PATTERN.fullmatch(self.summary_time):
            raise ConfigError(f"summary_time must be zero-padded HH:MM, got {self.summary_time!r}")

        self.log_level = str(self.log_level).upper()
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ConfigError(f"Unknown log level {self.log_level!r}")

    @property
    def summary_hour(self) -> int:
        return int(self.summary_time.split(":")[0])

    @property
    def summary_minute(self) -> int:
        return int(self.summary_time.split(":")[1])

    @staticmethod
    def load_file(path) -> Dict[str, Any]:
        try:
            with open(Path(path), "r") as f:
                data = yaml.safe_load(f) or {}
        except OSError as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return data

    @classmethod
    def from_environment(cls, config_path: Optional[str] = None) -> "Settings":
        """
        Build settings from file and environment

        Args:
            config_path: YAML file to read first; defaults to $FORECAST_CONFIG

        Returns:
            Settings with environment variables taking precedence over the file
        """
        config_path = config_path or os.getenv(f"{ENV_PREFIX}CONFIG")
        values: Dict[str, Any] = {}
        if config_path:
            values.update(cls.load_file(config_path))
            logger.info(f"Loaded settings from {config_path}")

        known = {f.name for f in fields(cls)}
        unknown = set(values) - known
        if unknown:
            raise ConfigError(f"Unknown settings: {sorted(unknown)}")

        for name in known:
            env_value = os.getenv(f"{ENV_PREFIX}{name.upper()}")
            if env_value is not None:
                values[name] = env_value

        return cls(**values)
