"""Utilities for working with the sixty Jia-Zi combinations."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Final

from .constants import Branch, Stem, branch_for_index, stem_for_index
from .solar_terms import MONTH_OPENING_TERMS, SolarTerm, month_opening_term_for, term_start

SEXAGENARY_CYCLE_LENGTH: Final[int] = 60

# Reference day: 2000-01-07 is a Jia-Zi day.
_DAY_ZERO = date(2000, 1, 7)
_DAY_ZERO_INDEX: Final[int] = 0

# Stem hidden under Jia for each decade (六仪), indexed by decade number.
_DECADE_LEADERS: Final[tuple[Stem, ...]] = (
    Stem.WU,  # Jia-Zi
    Stem.JI,  # Jia-Xu
    Stem.GENG,  # Jia-Shen
    Stem.XIN,  # Jia-Wu
    Stem.REN,  # Jia-Chen
    Stem.GUI,  # Jia-Yin
)


@dataclass(frozen=True)
class SexagenaryCycleEntry:
    """Pairing of a Heavenly Stem and Earthly Branch."""

    index: int

    @property
    def stem(self) -> Stem:
        return stem_for_index(self.index)

    @property
    def branch(self) -> Branch:
        return branch_for_index(self.index)

    def label(self) -> str:
        """Return a human-readable stem-branch label (e.g., ``Jia-Zi``)."""

        return f"{self.stem.value}-{self.branch.value}"

    @property
    def decade_head(self) -> SexagenaryCycleEntry:
        """Return the Jia entry opening this entry's decade (旬首)."""

        return SexagenaryCycleEntry(self.index - self.index % 10)

    @property
    def leader_stem(self) -> Stem:
        """Return the stem under which this decade's Jia hides."""

        return _DECADE_LEADERS[self.index // 10]

    @property
    def void_branches(self) -> tuple[Branch, Branch]:
        """Return the two branches left unpaired by this decade (旬空)."""

        head = self.decade_head.branch.ordinal
        return branch_for_index(head + 10), branch_for_index(head + 11)

    def resolve_stem(self) -> Stem:
        """Return the stem, replacing a hidden Jia with its decade leader."""

        if self.stem is Stem.JIA:
            return self.leader_stem
        return self.stem


_FIRST_MONTH_STEM_INDEX: Final[dict[int, int]] = {
    0: 2,  # Jia -> Bing Yin
    5: 2,  # Ji -> Bing Yin
    1: 4,  # Yi -> Wu Yin
    6: 4,  # Geng -> Wu Yin
    2: 6,  # Bing -> Geng Yin
    7: 6,  # Xin -> Geng Yin
    3: 8,  # Ding -> Ren Yin
    8: 8,  # Ren -> Ren Yin
    4: 0,  # Wu -> Jia Yin
    9: 0,  # Gui -> Jia Yin
}

_FIRST_HOUR_STEM_INDEX: Final[dict[int, int]] = {
    0: 0,  # Jia day -> Jia Zi hour
    5: 0,
    1: 2,  # Yi/Geng day -> Bing Zi hour
    6: 2,
    2: 4,  # Bing/Xin -> Wu Zi hour
    7: 4,
    3: 6,  # Ding/Ren -> Geng Zi hour
    8: 6,
    4: 8,  # Wu/Gui -> Ren Zi hour
    9: 8,
}


def sexagenary_entry_for_index(index: int) -> SexagenaryCycleEntry:
    """Return the cycle entry for ``index`` (0-59)."""

    return SexagenaryCycleEntry(index=index % SEXAGENARY_CYCLE_LENGTH)


def sexagenary_index(stem: Stem, branch: Branch) -> int:
    """Return the 0-59 index for the provided stem/branch combination."""

    for idx in range(SEXAGENARY_CYCLE_LENGTH):
        if idx % 10 == stem.ordinal and idx % 12 == branch.ordinal:
            return idx
    msg = f"Invalid stem/branch pairing: stem={stem.value}, branch={branch.value}"
    raise ValueError(msg)


def _solar_year(moment: datetime) -> int:
    """Return the stem/branch solar year (Start of Spring opens the year)."""

    if moment.date() < term_start(SolarTerm.LICHUN, moment.year):
        return moment.year - 1
    return moment.year


def year_cycle_index(moment: datetime) -> int:
    """Return the sexagenary index for the solar year containing ``moment``."""

    return (_solar_year(moment) - 4) % SEXAGENARY_CYCLE_LENGTH


def month_cycle_index(moment: datetime) -> int:
    """Return the sexagenary index for the solar month containing ``moment``."""

    year_stem = sexagenary_entry_for_index(year_cycle_index(moment)).stem
    opening = month_opening_term_for(moment.date())
    branch = MONTH_OPENING_TERMS[opening.term]
    months_from_tiger = (branch.ordinal - Branch.YIN.ordinal) % 12
    stem = stem_for_index(_FIRST_MONTH_STEM_INDEX[year_stem.ordinal] + months_from_tiger)
    return sexagenary_index(stem, branch)


def day_cycle_index(moment: datetime | date) -> int:
    """Return the sexagenary index for the civil day containing ``moment``."""

    day = moment.date() if isinstance(moment, datetime) else moment
    delta_days = (day - _DAY_ZERO).days
    return (_DAY_ZERO_INDEX + delta_days) % SEXAGENARY_CYCLE_LENGTH


def hour_cycle_index(moment: datetime) -> int:
    """Return the sexagenary index for the double-hour (時辰) containing ``moment``."""

    day_entry = sexagenary_entry_for_index(day_cycle_index(moment))
    hour_branch = branch_for_index((moment.hour + 1) // 2)
    first_hour_stem = _FIRST_HOUR_STEM_INDEX[day_entry.stem.ordinal]
    hour_stem = stem_for_index(first_hour_stem + hour_branch.ordinal)
    return sexagenary_index(hour_stem, hour_branch)


__all__ = [
    "SexagenaryCycleEntry",
    "SEXAGENARY_CYCLE_LENGTH",
    "sexagenary_entry_for_index",
    "sexagenary_index",
    "year_cycle_index",
    "month_cycle_index",
    "day_cycle_index",
    "hour_cycle_index",
]
