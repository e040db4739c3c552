"""Configuration models and helpers for QimenEngine settings."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

CURRENT_SETTINGS_SCHEMA_VERSION = 1
CONFIG_FILENAME = "config.yaml"

# -------------------- Settings Schema --------------------


class CacheCfg(BaseModel):
    """Plate cache sizing."""

    capacity: int = 500

    @field_validator("capacity", mode="before")
    @classmethod
    def _cap_capacity(cls, value: int) -> int:
        return max(1, min(100_000, int(value)))


class SearchCfg(BaseModel):
    """Bounds and defaults for auspicious-time searches."""

    max_range_days: int = 365
    default_limit: int = 10
    default_min_score: int = 60
    early_stop_score: int = 80
    early_stop_factor: int = 2
    max_highlights: int = 5
    max_warnings: int = 5
    strong_reference_score: int = 70

    @field_validator("max_range_days", mode="before")
    @classmethod
    def _cap_range(cls, value: int) -> int:
        return max(1, min(365, int(value)))

    @field_validator(
        "default_limit",
        "early_stop_factor",
        "max_highlights",
        "max_warnings",
        mode="before",
    )
    @classmethod
    def _cap_counts(cls, value: int) -> int:
        return max(1, min(1_000, int(value)))

    @field_validator(
        "default_min_score", "early_stop_score", "strong_reference_score", mode="before"
    )
    @classmethod
    def _cap_scores(cls, value: int) -> int:
        return max(0, min(100, int(value)))


class ScoringCfg(BaseModel):
    """Composite score weights and adjustments."""

    pattern_weight: float = 0.35
    reference_weight: float = 0.40
    spirit_weight: float = 0.25
    pattern_base: int = 60
    favorable_bonus: int = 10
    unfavorable_penalty: int = -15
    good_gate_bonus: int = 5
    default_reference_score: float = 50.0
    spirit_base: int = 50
    excellent_threshold: int = 80
    good_threshold: int = 65
    fair_threshold: int = 50

    @field_validator("pattern_weight", "reference_weight", "spirit_weight", mode="before")
    @classmethod
    def _cap_weights(cls, value: float) -> float:
        return max(0.0, min(1.0, float(value)))

    @model_validator(mode="after")
    def _check_thresholds(self) -> "ScoringCfg":
        if not self.excellent_threshold >= self.good_threshold >= self.fair_threshold:
            raise ValueError("grade thresholds must be non-increasing")
        return self


class PlateCfg(BaseModel):
    """Defaults for the plate builder."""

    kind: Literal["hour", "day", "month", "year"] = "hour"
    leap_method: Literal["chaibu", "maoshan"] = "chaibu"


class Settings(BaseModel):
    """Top-level settings model persisted on disk."""

    schema_version: int = Field(
        default=CURRENT_SETTINGS_SCHEMA_VERSION,
        ge=1,
        description="Version marker for persisted configuration payloads.",
    )
    cache: CacheCfg = Field(default_factory=CacheCfg)
    search: SearchCfg = Field(default_factory=SearchCfg)
    scoring: ScoringCfg = Field(default_factory=ScoringCfg)
    plate: PlateCfg = Field(default_factory=PlateCfg)


# -------------------- Persistence --------------------


def get_config_home() -> Path:
    """Return the directory where settings should be stored."""

    return Path(os.environ.get("QIMENENGINE_HOME", str(Path.home() / ".qimenengine")))


def config_path() -> Path:
    """Return the full path to the configuration file, creating directories as needed."""

    home = get_config_home()
    home.mkdir(parents=True, exist_ok=True)
    return home / CONFIG_FILENAME


def default_settings() -> Settings:
    """Instantiate a Settings object populated with defaults."""

    return Settings()


def save_settings(settings: Settings, path: Optional[Path] = None) -> Path:
    """Persist the given settings to disk as YAML."""

    target_path = Path(path) if path else config_path()
    target_path.parent.mkdir(parents=True, exist_ok=True)
    data = settings.model_dump()
    with target_path.open("w", encoding="utf-8") as handle:
        yaml.safe_dump(data, handle, sort_keys=False, allow_unicode=True)
    return target_path


def _coerce_schema_version(raw: object) -> int:
    """Return a normalised schema version value with sane bounds."""

    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return 1
    return max(1, value)


def _check_schema_version(
    data: dict[str, object], *, schema_version: int
) -> tuple[dict[str, object], bool]:
    """Reject payloads newer than this release; stamp a missing version."""

    if schema_version > CURRENT_SETTINGS_SCHEMA_VERSION:
        raise ValueError(
            f"settings schema version {schema_version} is newer than supported "
            f"version {CURRENT_SETTINGS_SCHEMA_VERSION}"
        )
    if data.get("schema_version") == CURRENT_SETTINGS_SCHEMA_VERSION:
        return data, False
    stamped = dict(data)
    stamped["schema_version"] = CURRENT_SETTINGS_SCHEMA_VERSION
    return stamped, True


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from disk, creating defaults if missing."""

    source_path = Path(path) if path else config_path()
    if not source_path.exists():
        settings = default_settings()
        save_settings(settings, source_path)
        return settings
    with source_path.open("r", encoding="utf-8") as handle:
        raw = yaml.safe_load(handle) or {}
    if not isinstance(raw, dict):
        raw = {}
    schema_version = _coerce_schema_version(raw.get("schema_version"))
    data, stamped = _check_schema_version(raw, schema_version=schema_version)
    settings = Settings(**data)
    if stamped:
        save_settings(settings, source_path)
    return settings


def ensure_default_config() -> Path:
    """Ensure a configuration file exists on disk and return its path."""

    target = config_path()
    if not target.exists():
        save_settings(default_settings(), target)
    return target
