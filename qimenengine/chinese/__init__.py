"""Calendar primitives shared by the Qimen engines."""

from __future__ import annotations

from .constants import (
    EARTHLY_BRANCHES,
    HEAVENLY_STEMS,
    Branch,
    Element,
    Stem,
    branch_for_index,
    stem_for_index,
)
from .four_pillars import FourPillars, Pillar, compute_four_pillars
from .sexagenary import SexagenaryCycleEntry, sexagenary_entry_for_index, sexagenary_index
from .solar_terms import SolarTerm, TermPosition, is_solar_term_day, solar_term_for

__all__ = [
    "EARTHLY_BRANCHES",
    "HEAVENLY_STEMS",
    "Branch",
    "Element",
    "Stem",
    "branch_for_index",
    "stem_for_index",
    "SexagenaryCycleEntry",
    "sexagenary_index",
    "sexagenary_entry_for_index",
    "Pillar",
    "FourPillars",
    "compute_four_pillars",
    "SolarTerm",
    "TermPosition",
    "solar_term_for",
    "is_solar_term_day",
]
