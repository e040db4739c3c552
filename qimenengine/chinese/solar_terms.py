"""Approximate 24 solar terms (二十四节气) using mean Gregorian dates.

The dates drift by up to a day or two against the true solar longitude; the
calendar layer trades that accuracy for a table lookup with no ephemeris.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import StrEnum
from typing import Final, Mapping

from .constants import Branch


class SolarTerm(StrEnum):
    """The 24 solar terms, in calendar order from Minor Cold."""

    XIAOHAN = "Xiaohan"
    DAHAN = "Dahan"
    LICHUN = "Lichun"
    YUSHUI = "Yushui"
    JINGZHE = "Jingzhe"
    CHUNFEN = "Chunfen"
    QINGMING = "Qingming"
    GUYU = "Guyu"
    LIXIA = "Lixia"
    XIAOMAN = "Xiaoman"
    MANGZHONG = "Mangzhong"
    XIAZHI = "Xiazhi"
    XIAOSHU = "Xiaoshu"
    DASHU = "Dashu"
    LIQIU = "Liqiu"
    CHUSHU = "Chushu"
    BAILU = "Bailu"
    QIUFEN = "Qiufen"
    HANLU = "Hanlu"
    SHUANGJIANG = "Shuangjiang"
    LIDONG = "Lidong"
    XIAOXUE = "Xiaoxue"
    DAXUE = "Daxue"
    DONGZHI = "Dongzhi"


_MEAN_START: Final[Mapping[SolarTerm, tuple[int, int]]] = {
    SolarTerm.XIAOHAN: (1, 6),
    SolarTerm.DAHAN: (1, 20),
    SolarTerm.LICHUN: (2, 4),
    SolarTerm.YUSHUI: (2, 19),
    SolarTerm.JINGZHE: (3, 6),
    SolarTerm.CHUNFEN: (3, 21),
    SolarTerm.QINGMING: (4, 5),
    SolarTerm.GUYU: (4, 20),
    SolarTerm.LIXIA: (5, 6),
    SolarTerm.XIAOMAN: (5, 21),
    SolarTerm.MANGZHONG: (6, 6),
    SolarTerm.XIAZHI: (6, 21),
    SolarTerm.XIAOSHU: (7, 7),
    SolarTerm.DASHU: (7, 23),
    SolarTerm.LIQIU: (8, 8),
    SolarTerm.CHUSHU: (8, 23),
    SolarTerm.BAILU: (9, 8),
    SolarTerm.QIUFEN: (9, 23),
    SolarTerm.HANLU: (10, 8),
    SolarTerm.SHUANGJIANG: (10, 23),
    SolarTerm.LIDONG: (11, 7),
    SolarTerm.XIAOXUE: (11, 22),
    SolarTerm.DAXUE: (12, 7),
    SolarTerm.DONGZHI: (12, 22),
}

# "Jie" terms open a solar month; the value is the month branch they start.
MONTH_OPENING_TERMS: Final[Mapping[SolarTerm, Branch]] = {
    SolarTerm.XIAOHAN: Branch.CHOU,
    SolarTerm.LICHUN: Branch.YIN,
    SolarTerm.JINGZHE: Branch.MAO,
    SolarTerm.QINGMING: Branch.CHEN,
    SolarTerm.LIXIA: Branch.SI,
    SolarTerm.MANGZHONG: Branch.WU,
    SolarTerm.XIAOSHU: Branch.WEI,
    SolarTerm.LIQIU: Branch.SHEN,
    SolarTerm.BAILU: Branch.YOU,
    SolarTerm.HANLU: Branch.XU,
    SolarTerm.LIDONG: Branch.HAI,
    SolarTerm.DAXUE: Branch.ZI,
}

TERM_FOR_MONTH_BRANCH: Final[Mapping[Branch, SolarTerm]] = {
    branch: term for term, branch in MONTH_OPENING_TERMS.items()
}


@dataclass(frozen=True)
class TermPosition:
    """Where a civil day falls relative to the solar term containing it."""

    term: SolarTerm
    start: date

    def days_into_term(self, day: date) -> int:
        """Return the 1-based day count of ``day`` within the term."""

        return (day - self.start).days + 1

    def is_term_day(self, day: date) -> bool:
        return day == self.start


def term_start(term: SolarTerm, year: int) -> date:
    """Return the mean start date of ``term`` in Gregorian ``year``."""

    month, day = _MEAN_START[term]
    return date(year, month, day)


def _latest(day: date, terms: tuple[SolarTerm, ...]) -> TermPosition:
    best: TermPosition | None = None
    for year in (day.year - 1, day.year):
        for term in terms:
            start = term_start(term, year)
            if start <= day and (best is None or start > best.start):
                best = TermPosition(term=term, start=start)
    # Dongzhi of the previous year always precedes ``day``.
    assert best is not None
    return best


def solar_term_for(day: date) -> TermPosition:
    """Return the solar term in force on ``day``."""

    return _latest(day, tuple(SolarTerm))


def month_opening_term_for(day: date) -> TermPosition:
    """Return the month-opening ("jie") term in force on ``day``."""

    return _latest(day, tuple(MONTH_OPENING_TERMS))


def is_solar_term_day(day: date) -> bool:
    """Return ``True`` when a solar term begins on ``day``."""

    return solar_term_for(day).is_term_day(day)


__all__ = [
    "SolarTerm",
    "TermPosition",
    "MONTH_OPENING_TERMS",
    "TERM_FOR_MONTH_BRANCH",
    "term_start",
    "solar_term_for",
    "month_opening_term_for",
    "is_solar_term_day",
]
