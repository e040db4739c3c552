"""Earth-plate assembly, stage (局) selection and the deity layout."""

from __future__ import annotations

from enum import IntEnum
from typing import Final, Mapping

from ..chinese.constants import Branch, Stem
from ..chinese.four_pillars import FourPillars
from ..chinese.sexagenary import SexagenaryCycleEntry
from ..chinese.solar_terms import TERM_FOR_MONTH_BRANCH, SolarTerm
from .palaces import LUOSHU_RING, Palace
from .plate import LeapMethod, PlateKind, Polarity
from .symbols import CANONICAL_STEMS, DEITY_ORDER, Deity


class Yuan(IntEnum):
    """Upper, middle and lower period of a solar term (三元)."""

    UPPER = 0
    MIDDLE = 1
    LOWER = 2


# Polarity and (upper, middle, lower) stages per solar term.
TERM_STAGES: Final[Mapping[SolarTerm, tuple[Polarity, tuple[int, int, int]]]] = {
    SolarTerm.DONGZHI: (Polarity.YANG, (1, 7, 4)),
    SolarTerm.XIAOHAN: (Polarity.YANG, (2, 8, 5)),
    SolarTerm.DAHAN: (Polarity.YANG, (3, 9, 6)),
    SolarTerm.LICHUN: (Polarity.YANG, (8, 5, 2)),
    SolarTerm.YUSHUI: (Polarity.YANG, (9, 6, 3)),
    SolarTerm.JINGZHE: (Polarity.YANG, (1, 7, 4)),
    SolarTerm.CHUNFEN: (Polarity.YANG, (3, 9, 6)),
    SolarTerm.QINGMING: (Polarity.YANG, (4, 1, 7)),
    SolarTerm.GUYU: (Polarity.YANG, (5, 2, 8)),
    SolarTerm.LIXIA: (Polarity.YANG, (4, 1, 7)),
    SolarTerm.XIAOMAN: (Polarity.YANG, (5, 2, 8)),
    SolarTerm.MANGZHONG: (Polarity.YANG, (6, 3, 9)),
    SolarTerm.XIAZHI: (Polarity.YIN, (9, 3, 6)),
    SolarTerm.XIAOSHU: (Polarity.YIN, (8, 2, 5)),
    SolarTerm.DASHU: (Polarity.YIN, (7, 1, 4)),
    SolarTerm.LIQIU: (Polarity.YIN, (2, 5, 8)),
    SolarTerm.CHUSHU: (Polarity.YIN, (1, 4, 7)),
    SolarTerm.BAILU: (Polarity.YIN, (9, 3, 6)),
    SolarTerm.QIUFEN: (Polarity.YIN, (7, 1, 4)),
    SolarTerm.HANLU: (Polarity.YIN, (6, 9, 3)),
    SolarTerm.SHUANGJIANG: (Polarity.YIN, (5, 8, 2)),
    SolarTerm.LIDONG: (Polarity.YIN, (6, 9, 3)),
    SolarTerm.XIAOXUE: (Polarity.YIN, (5, 8, 2)),
    SolarTerm.DAXUE: (Polarity.YIN, (4, 7, 1)),
}

# Decade head branch → period under the split-day ("chaibu") method.
_CHAIBU_YUAN: Final[Mapping[Branch, Yuan]] = {
    Branch.ZI: Yuan.UPPER,
    Branch.WU: Yuan.UPPER,
    Branch.XU: Yuan.MIDDLE,
    Branch.CHEN: Yuan.MIDDLE,
    Branch.SHEN: Yuan.LOWER,
    Branch.YIN: Yuan.LOWER,
}

# Pillar branch → period for year and month plates.
_BRANCH_YUAN: Final[Mapping[Branch, Yuan]] = {
    Branch.ZI: Yuan.UPPER,
    Branch.WU: Yuan.UPPER,
    Branch.MAO: Yuan.UPPER,
    Branch.YOU: Yuan.UPPER,
    Branch.YIN: Yuan.MIDDLE,
    Branch.SHEN: Yuan.MIDDLE,
    Branch.SI: Yuan.MIDDLE,
    Branch.HAI: Yuan.MIDDLE,
    Branch.CHEN: Yuan.LOWER,
    Branch.XU: Yuan.LOWER,
    Branch.CHOU: Yuan.LOWER,
    Branch.WEI: Yuan.LOWER,
}


def yuan_for_day(day: SexagenaryCycleEntry, method: LeapMethod, days_into_term: int) -> Yuan:
    """Pick the period of a solar term for the given day."""

    if method is LeapMethod.MAOSHAN:
        if days_into_term <= 5:
            return Yuan.UPPER
        if days_into_term <= 10:
            return Yuan.MIDDLE
        return Yuan.LOWER
    return _CHAIBU_YUAN[day.decade_head.branch]


def stage_for(
    term: SolarTerm,
    pillars: FourPillars,
    kind: PlateKind,
    method: LeapMethod,
    days_into_term: int,
) -> tuple[Polarity, int]:
    """Return the polarity and stage number (1-9) for a plate.

    Hour and day plates follow the current term and leap method. Year plates
    count the year's position in the sixty cycle; month plates read the term
    that opens the month.
    """

    if kind is PlateKind.YEAR:
        polarity, _ = TERM_STAGES[term]
        return polarity, pillars.year.cycle_index % 9 + 1
    if kind is PlateKind.MONTH:
        month_branch = pillars.month.branch
        polarity, stages = TERM_STAGES[TERM_FOR_MONTH_BRANCH[month_branch]]
        return polarity, stages[_BRANCH_YUAN[month_branch]]
    polarity, stages = TERM_STAGES[term]
    return polarity, stages[yuan_for_day(pillars.day.entry, method, days_into_term)]


def earth_plate(stage: int, polarity: Polarity) -> dict[Palace, Stem]:
    """Fly Wu through Ding around the Luoshu ring from palace ``stage``.

    Yang cycles fly forward, yin cycles backward; Yi always sits at the Center.
    """

    if not 1 <= stage <= 9:
        raise ValueError(f"stage must be within 1..9, got {stage}")
    start = LUOSHU_RING.index(Palace(stage).resolve())
    direction = 1 if polarity is Polarity.YANG else -1
    ring = len(LUOSHU_RING)
    earth = {
        LUOSHU_RING[(start + direction * step) % ring]: stem
        for step, stem in enumerate(CANONICAL_STEMS[:ring])
    }
    earth[Palace.CENTER] = CANONICAL_STEMS[ring]
    return earth


def deity_layout(start: Palace, polarity: Polarity) -> dict[Palace, Deity]:
    """Place Zhi Fu at ``start`` and the other deities around the ring."""

    first = LUOSHU_RING.index(start.resolve())
    direction = 1 if polarity is Polarity.YANG else -1
    ring = len(LUOSHU_RING)
    deities = {
        LUOSHU_RING[(first + direction * step) % ring]: deity
        for step, deity in enumerate(DEITY_ORDER)
    }
    deities[Palace.CENTER] = deities[Palace.KUN]
    return deities


__all__ = [
    "Yuan",
    "TERM_STAGES",
    "yuan_for_day",
    "stage_for",
    "earth_plate",
    "deity_layout",
]
