"""Core runtime components for QimenEngine."""

from __future__ import annotations

from .plate_cache import DEFAULT_CAPACITY, PlateCache, PlateKey

__all__ = ["DEFAULT_CAPACITY", "PlateCache", "PlateKey"]
