"""QimenEngine package bootstrap and curated public API surface."""

from __future__ import annotations

import logging
from importlib.metadata import PackageNotFoundError, version as _get_version

LOG = logging.getLogger(__name__)

try:
    __version__ = _get_version("qimenengine")
except PackageNotFoundError:  # pragma: no cover - metadata may be unavailable when run from source
    __version__ = "0.0.0"


def get_version() -> str:
    """Return the resolved QimenEngine package version."""

    return __version__


from .chinese import FourPillars, compute_four_pillars  # noqa: E402
from .config import Settings, default_settings, load_settings  # noqa: E402
from .core import PlateCache  # noqa: E402
from .electional import (  # noqa: E402
    AuspiciousTimeSearch,
    BuilderNotConfiguredError,
    SearchRequest,
    SearchRequestError,
    SearchResult,
)
from .qimen import Palace, Plate, PlateKind, LeapMethod, build_plate, rotate  # noqa: E402
from .shensha import SpiritOverlay, calculate_spirits  # noqa: E402
from .yongshen import Category, ReferenceAnalysis, analyze_references  # noqa: E402

__all__ = [
    "__version__",
    "get_version",
    "FourPillars",
    "compute_four_pillars",
    "Settings",
    "default_settings",
    "load_settings",
    "PlateCache",
    "AuspiciousTimeSearch",
    "BuilderNotConfiguredError",
    "SearchRequest",
    "SearchRequestError",
    "SearchResult",
    "Palace",
    "Plate",
    "PlateKind",
    "LeapMethod",
    "build_plate",
    "rotate",
    "SpiritOverlay",
    "calculate_spirits",
    "Category",
    "ReferenceAnalysis",
    "analyze_references",
]
