# Author: PB
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/stowage/config/manager.py

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional, Final

import yaml
from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from stowage.system.exceptions import ConfigError


# ---- Constants ----

USER_CFG: Final = "stowage.yml"

DEFAULT_MAX_WORKERS: Final = 128
DEFAULT_SINK_SIZE: Final = 1000


def _get_config_search_paths() -> tuple[Path, ...]:
    """Get config file search paths (ordered by priority: lowest to highest).

    Evaluated at call time so environment changes are picked up (tests
    rely on this).
    """
    return (
        Path("/etc/stowage") / USER_CFG,  # System defaults
        Path.home() / ".config" / "stowage" / USER_CFG,  # User config
        Path(os.getenv("XDG_CONFIG_HOME", "")) / "stowage" / USER_CFG,  # XDG override
        Path(os.getenv("STOWAGE_CONFIG_HOME", "")) / USER_CFG,  # Explicit override (highest priority)
    )


def _load_merged_config_data(candidates: tuple[Path, ...]) -> dict:
    """Load and merge config data from candidate paths.

    Later candidates override earlier ones, one level deep: nested sections
    such as ``s3:`` are merged key by key. Missing files are skipped.
    """
    merged_data: dict = {}
    found_configs = []

    for candidate in candidates:
        if candidate == Path("") / USER_CFG or candidate == Path("stowage") / USER_CFG:
            continue  # Unset env vars resolve to relative paths
        if not candidate.is_file():
            continue
        try:
            with candidate.open("r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {candidate}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {candidate} must contain a mapping")

        for key, value in data.items():
            if isinstance(value, dict) and isinstance(merged_data.get(key), dict):
                merged_data[key] = {**merged_data[key], **value}
            else:
                merged_data[key] = value
        found_configs.append(str(candidate))
        logger.debug(f"Loaded config from {candidate}")

    if found_configs:
        logger.debug(f"Merged config from: {', '.join(found_configs)}")
    else:
        logger.debug("No stowage.yml found, using defaults")
    return merged_data


def _apply_env_overrides(data: dict) -> dict:
    """Overlay environment variables on top of file config."""
    data = dict(data)
    if workers := os.getenv("STOWAGE_MAX_WORKERS"):
        data["max_workers"] = workers

    s3 = dict(data.get("s3") or {})
    if region := os.getenv("AWS_DEFAULT_REGION"):
        s3["region"] = region
    if endpoint := os.getenv("S3_ENDPOINT_URL"):
        s3["endpoint_url"] = endpoint
    if s3:
        data["s3"] = s3

    gcs = dict(data.get("gcs") or {})
    if project := os.getenv("GOOGLE_CLOUD_PROJECT"):
        gcs["project"] = project
    if gcs:
        data["gcs"] = gcs
    return data


# ---- Backend Settings ----

class S3Settings(BaseModel):
    """S3 client settings. Credentials come from the boto3 chain."""
    region: str = "us-east-1"
    endpoint_url: Optional[str] = None


class GCSSettings(BaseModel):
    """GCS client settings. Credentials come from application defaults."""
    project: Optional[str] = None


class StorageConfig(BaseModel):
    """Settings passed to the backend factory."""
    max_workers: int = Field(default=DEFAULT_MAX_WORKERS, ge=1)
    sink_size: int = Field(default=DEFAULT_SINK_SIZE, ge=1)
    s3: S3Settings = Field(default_factory=S3Settings)
    gcs: GCSSettings = Field(default_factory=GCSSettings)
    local_log: Optional[Path] = None

    @classmethod
    def load(cls, config_path: Path) -> "StorageConfig":
        """Load a single config file, without search paths or env overrides."""
        if not Path(config_path).is_file():
            raise ConfigError(f"Config file not found: {config_path}")
        data = _load_merged_config_data((Path(config_path),))
        return cls._validated(data)

    @classmethod
    def _validated(cls, data: dict) -> "StorageConfig":
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid stowage configuration: {e}") from e


def load_config() -> StorageConfig:
    """Load config from the standard locations plus environment overrides."""
    data = _load_merged_config_data(_get_config_search_paths())
    return StorageConfig._validated(_apply_env_overrides(data))
