"""Rotating-plate Qimen Dunjia construction."""

from __future__ import annotations

from .builder import PlateBuilder, build_plate
from .earth import deity_layout, earth_plate, stage_for
from .formations import detect_formations
from .palaces import Direction, Palace
from .plate import Auspice, Formation, LeapMethod, Plate, PlateKind, Polarity
from .rotation import resolve_center, ring_rotate, rotate
from .symbols import Deity, Gate, Star
from .zhuanpan import RotatedLayers, construct_layers

__all__ = [
    "Auspice",
    "Deity",
    "Direction",
    "Formation",
    "Gate",
    "LeapMethod",
    "Palace",
    "Plate",
    "PlateBuilder",
    "PlateKind",
    "Polarity",
    "RotatedLayers",
    "Star",
    "build_plate",
    "construct_layers",
    "deity_layout",
    "detect_formations",
    "earth_plate",
    "resolve_center",
    "ring_rotate",
    "rotate",
    "stage_for",
]
