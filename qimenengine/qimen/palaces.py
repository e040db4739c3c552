"""The nine palaces (九宫) and their fixed correspondences."""

from __future__ import annotations

from enum import IntEnum, StrEnum
from typing import Final, Mapping

from ..chinese.constants import Branch, Element


class Palace(IntEnum):
    """Luoshu-numbered palaces; the Center borrows Kun for plate layout."""

    KAN = 1
    KUN = 2
    ZHEN = 3
    XUN = 4
    CENTER = 5
    QIAN = 6
    DUI = 7
    GEN = 8
    LI = 9

    @property
    def is_center(self) -> bool:
        return self is Palace.CENTER

    def resolve(self) -> Palace:
        """Return the outer palace standing in for this one (Center → Kun)."""

        return Palace.KUN if self is Palace.CENTER else self

    @property
    def element(self) -> Element:
        return PALACE_ELEMENTS[self]

    @property
    def anchor_branch(self) -> Branch:
        return ANCHOR_BRANCHES[self]

    @property
    def direction(self) -> Direction:
        return PALACE_DIRECTIONS[self]

    @property
    def opposite(self) -> Palace:
        return OPPOSITE_PALACES[self]


class Direction(StrEnum):
    NORTH = "north"
    SOUTHWEST = "southwest"
    EAST = "east"
    SOUTHEAST = "southeast"
    CENTER = "center"
    NORTHWEST = "northwest"
    WEST = "west"
    NORTHEAST = "northeast"
    SOUTH = "south"


OUTER_PALACES: Final[tuple[Palace, ...]] = tuple(p for p in Palace if p is not Palace.CENTER)

# Luoshu flying order around the ring, identical to the clockwise walk.
LUOSHU_RING: Final[tuple[Palace, ...]] = (
    Palace.KAN,
    Palace.GEN,
    Palace.ZHEN,
    Palace.XUN,
    Palace.LI,
    Palace.KUN,
    Palace.DUI,
    Palace.QIAN,
)

PALACE_ELEMENTS: Final[Mapping[Palace, Element]] = {
    Palace.KAN: Element.WATER,
    Palace.KUN: Element.EARTH,
    Palace.ZHEN: Element.WOOD,
    Palace.XUN: Element.WOOD,
    Palace.CENTER: Element.EARTH,
    Palace.QIAN: Element.METAL,
    Palace.DUI: Element.METAL,
    Palace.GEN: Element.EARTH,
    Palace.LI: Element.FIRE,
}

PALACE_DIRECTIONS: Final[Mapping[Palace, Direction]] = {
    Palace.KAN: Direction.NORTH,
    Palace.KUN: Direction.SOUTHWEST,
    Palace.ZHEN: Direction.EAST,
    Palace.XUN: Direction.SOUTHEAST,
    Palace.CENTER: Direction.CENTER,
    Palace.QIAN: Direction.NORTHWEST,
    Palace.DUI: Direction.WEST,
    Palace.GEN: Direction.NORTHEAST,
    Palace.LI: Direction.SOUTH,
}

OPPOSITE_PALACES: Final[Mapping[Palace, Palace]] = {
    Palace.KAN: Palace.LI,
    Palace.LI: Palace.KAN,
    Palace.ZHEN: Palace.DUI,
    Palace.DUI: Palace.ZHEN,
    Palace.XUN: Palace.QIAN,
    Palace.QIAN: Palace.XUN,
    Palace.KUN: Palace.GEN,
    Palace.GEN: Palace.KUN,
    Palace.CENTER: Palace.CENTER,
}

# Every branch a palace spans; the Center shares Kun's.
PALACE_BRANCHES: Final[Mapping[Palace, tuple[Branch, ...]]] = {
    Palace.KAN: (Branch.ZI,),
    Palace.KUN: (Branch.WEI, Branch.SHEN),
    Palace.ZHEN: (Branch.MAO,),
    Palace.XUN: (Branch.CHEN, Branch.SI),
    Palace.CENTER: (Branch.WEI, Branch.SHEN),
    Palace.QIAN: (Branch.XU, Branch.HAI),
    Palace.DUI: (Branch.YOU,),
    Palace.GEN: (Branch.CHOU, Branch.YIN),
    Palace.LI: (Branch.WU,),
}

# Single representative branch used for storage and clash checks.
ANCHOR_BRANCHES: Final[Mapping[Palace, Branch]] = {
    Palace.KAN: Branch.ZI,
    Palace.KUN: Branch.WEI,
    Palace.ZHEN: Branch.MAO,
    Palace.XUN: Branch.CHEN,
    Palace.CENTER: Branch.WEI,
    Palace.QIAN: Branch.XU,
    Palace.DUI: Branch.YOU,
    Palace.GEN: Branch.CHOU,
    Palace.LI: Branch.WU,
}

BRANCH_PALACES: Final[Mapping[Branch, Palace]] = {
    Branch.ZI: Palace.KAN,
    Branch.CHOU: Palace.GEN,
    Branch.YIN: Palace.GEN,
    Branch.MAO: Palace.ZHEN,
    Branch.CHEN: Palace.XUN,
    Branch.SI: Palace.XUN,
    Branch.WU: Palace.LI,
    Branch.WEI: Palace.KUN,
    Branch.SHEN: Palace.KUN,
    Branch.YOU: Palace.DUI,
    Branch.XU: Palace.QIAN,
    Branch.HAI: Palace.QIAN,
}

# Transit horse (驿马) branch by the triad of the day branch.
HORSE_BRANCHES: Final[Mapping[Branch, Branch]] = {
    Branch.SHEN: Branch.YIN,
    Branch.ZI: Branch.YIN,
    Branch.CHEN: Branch.YIN,
    Branch.YIN: Branch.SHEN,
    Branch.WU: Branch.SHEN,
    Branch.XU: Branch.SHEN,
    Branch.HAI: Branch.SI,
    Branch.MAO: Branch.SI,
    Branch.WEI: Branch.SI,
    Branch.SI: Branch.HAI,
    Branch.YOU: Branch.HAI,
    Branch.CHOU: Branch.HAI,
}


def palace_for_branch(branch: Branch) -> Palace:
    return BRANCH_PALACES[branch]


def void_palaces(void_branches: tuple[Branch, ...]) -> frozenset[Palace]:
    """Return every palace spanning at least one of ``void_branches``."""

    voids = set(void_branches)
    return frozenset(
        palace for palace, branches in PALACE_BRANCHES.items() if voids.intersection(branches)
    )


def horse_palace(day_branch: Branch) -> Palace:
    return BRANCH_PALACES[HORSE_BRANCHES[day_branch]]


__all__ = [
    "Palace",
    "Direction",
    "OUTER_PALACES",
    "LUOSHU_RING",
    "PALACE_ELEMENTS",
    "PALACE_DIRECTIONS",
    "OPPOSITE_PALACES",
    "PALACE_BRANCHES",
    "ANCHOR_BRANCHES",
    "BRANCH_PALACES",
    "HORSE_BRANCHES",
    "palace_for_branch",
    "void_palaces",
    "horse_palace",
]
