"""Configuration helpers exposed at :mod:`qimenengine.config`."""

from __future__ import annotations

from .settings import (
    CURRENT_SETTINGS_SCHEMA_VERSION,
    CacheCfg,
    PlateCfg,
    ScoringCfg,
    SearchCfg,
    Settings,
    config_path,
    default_settings,
    ensure_default_config,
    get_config_home,
    load_settings,
    save_settings,
)

__all__ = [
    "CURRENT_SETTINGS_SCHEMA_VERSION",
    "Settings",
    "CacheCfg",
    "SearchCfg",
    "ScoringCfg",
    "PlateCfg",
    "config_path",
    "get_config_home",
    "default_settings",
    "load_settings",
    "save_settings",
    "ensure_default_config",
]
