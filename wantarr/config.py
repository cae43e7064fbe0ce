"""
config.py - Configuration model for Wantarr
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import BaseModel, Field, ValidationError

from wantarr.errors import ConfigError
from wantarr.logger import WantarrLogger

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib


class PvrConfig(BaseModel):
    name: str
    type: str = "sonarr"
    url: str
    api_key: str = ""


class DatabaseConfig(BaseModel):
    folder: Optional[Path] = Field(
        default=None,
        description="Folder holding the <pvr>_<suffix>.json databases; defaults to the config file's folder",
    )


class LoggingConfig(BaseModel):
    debug: bool = False
    log_file: Optional[Path] = None


class WantarrConfig(BaseModel):
    pvr: Dict[str, PvrConfig] = Field(default_factory=dict)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    config_path: Optional[Path] = None

    def database_folder(self) -> Path:
        if self.database.folder is not None:
            return self.database.folder.expanduser()
        if self.config_path is not None:
            return self.config_path.parent
        return Path.cwd()


def load_config(config_path: Path) -> WantarrConfig:
    """Load configuration from TOML file"""

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            config_data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"Error reading configuration {config_path}: {e}") from e

    try:
        return WantarrConfig(
            pvr={
                name: PvrConfig(**{"name": name, **pvr_data})
                for name, pvr_data in config_data.get("pvr", {}).items()
            },
            database=DatabaseConfig(**config_data.get("database", {})),
            logging=LoggingConfig(**config_data.get("logging", {})),
            config_path=config_path,
        )
    except (AttributeError, TypeError, ValidationError) as e:
        raise ConfigError(f"Invalid configuration {config_path}: {e}") from e


def build_logger(config: WantarrConfig) -> WantarrLogger:
    """Root logger for a loaded configuration."""
    return WantarrLogger(log_file=config.logging.log_file, debug=config.logging.debug)
