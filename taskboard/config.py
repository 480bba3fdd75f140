# Task board: configuration
# Override defaults via taskboard.yaml, TASKBOARD_* env vars or CLI args.

import logging
import os
import yaml
from pathlib import Path
from dataclasses import dataclass, fields
from typing import Optional

logger = logging.getLogger(__name__)

CONFIG_PATH = Path.cwd() / "taskboard.yaml"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration is invalid or incomplete."""
    pass


@dataclass
class Config:
    """Runtime configuration for the task board server."""

    # Id generation: "clock" (ms timestamps), "counter" or "uuid"
    id_strategy: str = "clock"

    # HTTP adapter
    host: str = "127.0.0.1"
    port: int = 3000
    api_secret: str = ""  # empty = mutating routes answer 503

    log_level: str = "INFO"

    def apply_env(self) -> "Config":
        """Environment variables win over file values."""
        secret = os.environ.get("TASKBOARD_API_SECRET")
        if secret:
            self.api_secret = secret
        level = os.environ.get("TASKBOARD_LOG_LEVEL")
        if level:
            self.log_level = level
        if not isinstance(self.log_level, str):
            raise ConfigError(f"log_level must be a string, got {self.log_level!r}")
        self.log_level = self.log_level.upper()
        return self

    def validate(self) -> "Config":
        from .store import ID_STRATEGIES

        if self.id_strategy not in ID_STRATEGIES:
            raise ConfigError(
                f"Unknown id_strategy '{self.id_strategy}'. "
                f"Available: {sorted(ID_STRATEGIES)}"
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Unknown log_level '{self.log_level}'")
        if not isinstance(self.port, int) or not 0 < self.port < 65536:
            raise ConfigError(f"Invalid port: {self.port!r}")
        return self

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        path = path or os.environ.get("TASKBOARD_CONFIG")
        cfg_path = Path(path) if path else CONFIG_PATH
        known = {f.name for f in fields(cls)}
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if k in known})
            except (OSError, yaml.YAMLError, AttributeError) as e:
                logger.warning(f"Cannot read {cfg_path} ({e}), using defaults")
                cfg = cls()
        else:
            cfg = cls()
        return cfg.apply_env().validate()
