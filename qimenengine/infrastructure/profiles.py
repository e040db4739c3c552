"""Read the YAML correspondence profiles bundled with the package."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

import yaml

from .paths import profiles_dir

__all__ = ["ProfileError", "load_profile_yaml", "require_mapping"]


class ProfileError(ValueError):
    """Raised when a correspondence profile is missing or malformed."""


def load_profile_yaml(source: str | Path) -> dict[str, Any]:
    """Return the mapping stored in ``source``.

    Bare file names resolve against :func:`profiles_dir`; other values are
    treated as filesystem paths.
    """

    path = Path(source)
    if not path.is_absolute() and path.parent == Path("."):
        candidate = profiles_dir() / path
        if candidate.exists():
            path = candidate
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
    except FileNotFoundError as exc:
        raise ProfileError(f"profile not found: {path}") from exc
    except yaml.YAMLError as exc:
        raise ProfileError(f"profile {path} is not valid YAML: {exc}") from exc
    if not isinstance(payload, dict):
        raise ProfileError(f"profile {path} must contain a mapping")
    return payload


def require_mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    section = payload.get(key)
    if not isinstance(section, Mapping):
        raise ProfileError(f"profile section '{key}' must be a mapping")
    return section
