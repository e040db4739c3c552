"""Centralised filesystem path helpers for QimenEngine."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

__all__ = [
    "QimenPaths",
    "get_paths",
    "package_root",
    "profiles_dir",
]


@dataclass(frozen=True)
class QimenPaths:
    """Resolved directory layout of the installed package."""

    package_root: Path
    profiles: Path

    def profile(self, *parts: str | Path) -> Path:
        """Return a path under the ``profiles`` directory."""

        return self.profiles.joinpath(*parts)


@lru_cache(maxsize=1)
def get_paths() -> QimenPaths:
    """Return a cached :class:`QimenPaths` descriptor."""

    package_root = Path(__file__).resolve().parents[1]
    return QimenPaths(package_root=package_root, profiles=package_root / "profiles")


def package_root() -> Path:
    return get_paths().package_root


def profiles_dir() -> Path:
    """Return the directory holding the bundled correspondence profiles."""

    return get_paths().profiles
