"""Utilities shared across plate-focused test suites."""

from .plates import pillars_from_indices, with_layers

__all__ = ["pillars_from_indices", "with_layers"]
