"""Filesystem and profile helpers."""

from .paths import get_paths, profiles_dir
from .profiles import ProfileError, load_profile_yaml

__all__ = ["ProfileError", "get_paths", "load_profile_yaml", "profiles_dir"]
