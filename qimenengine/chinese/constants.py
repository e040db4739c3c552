"""Lookup tables for Heavenly Stems, Earthly Branches and the five elements."""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Mapping


class Element(StrEnum):
    """The five elements (五行)."""

    WOOD = "Wood"
    FIRE = "Fire"
    EARTH = "Earth"
    METAL = "Metal"
    WATER = "Water"

    def generates(self) -> Element:
        """Return the element produced by this one in the generation cycle."""

        return GENERATES[self]

    def overcomes(self) -> Element:
        """Return the element controlled by this one in the control cycle."""

        return OVERCOMES[self]


class Stem(StrEnum):
    """The ten Heavenly Stems (天干)."""

    JIA = "Jia"
    YI = "Yi"
    BING = "Bing"
    DING = "Ding"
    WU = "Wu"
    JI = "Ji"
    GENG = "Geng"
    XIN = "Xin"
    REN = "Ren"
    GUI = "Gui"

    @property
    def ordinal(self) -> int:
        return _STEM_INDEX[self]

    @property
    def element(self) -> Element:
        return STEM_ELEMENTS[self]

    @property
    def is_yang(self) -> bool:
        return self.ordinal % 2 == 0

    @property
    def glyph(self) -> str:
        return _STEM_GLYPHS[self.ordinal]


class Branch(StrEnum):
    """The twelve Earthly Branches (地支)."""

    ZI = "Zi"
    CHOU = "Chou"
    YIN = "Yin"
    MAO = "Mao"
    CHEN = "Chen"
    SI = "Si"
    WU = "Wu"
    WEI = "Wei"
    SHEN = "Shen"
    YOU = "You"
    XU = "Xu"
    HAI = "Hai"

    @property
    def ordinal(self) -> int:
        return _BRANCH_INDEX[self]

    @property
    def element(self) -> Element:
        return BRANCH_ELEMENTS[self]

    @property
    def animal(self) -> str:
        return _BRANCH_ANIMALS[self.ordinal]

    @property
    def glyph(self) -> str:
        return _BRANCH_GLYPHS[self.ordinal]

    def clash(self) -> Branch:
        """Return the branch six positions away (六冲)."""

        return branch_for_index(self.ordinal + 6)


HEAVENLY_STEMS: Final[tuple[Stem, ...]] = tuple(Stem)
EARTHLY_BRANCHES: Final[tuple[Branch, ...]] = tuple(Branch)

_STEM_INDEX: Final[Mapping[Stem, int]] = {stem: idx for idx, stem in enumerate(HEAVENLY_STEMS)}
_BRANCH_INDEX: Final[Mapping[Branch, int]] = {
    branch: idx for idx, branch in enumerate(EARTHLY_BRANCHES)
}
_STEM_GLYPHS: Final[str] = "甲乙丙丁戊己庚辛壬癸"
_BRANCH_GLYPHS: Final[str] = "子丑寅卯辰巳午未申酉戌亥"
_BRANCH_ANIMALS: Final[tuple[str, ...]] = (
    "Rat",
    "Ox",
    "Tiger",
    "Rabbit",
    "Dragon",
    "Snake",
    "Horse",
    "Goat",
    "Monkey",
    "Rooster",
    "Dog",
    "Pig",
)

GENERATES: Final[Mapping[Element, Element]] = {
    Element.WOOD: Element.FIRE,
    Element.FIRE: Element.EARTH,
    Element.EARTH: Element.METAL,
    Element.METAL: Element.WATER,
    Element.WATER: Element.WOOD,
}

OVERCOMES: Final[Mapping[Element, Element]] = {
    Element.WOOD: Element.EARTH,
    Element.FIRE: Element.METAL,
    Element.EARTH: Element.WATER,
    Element.METAL: Element.WOOD,
    Element.WATER: Element.FIRE,
}

STEM_ELEMENTS: Final[Mapping[Stem, Element]] = {
    Stem.JIA: Element.WOOD,
    Stem.YI: Element.WOOD,
    Stem.BING: Element.FIRE,
    Stem.DING: Element.FIRE,
    Stem.WU: Element.EARTH,
    Stem.JI: Element.EARTH,
    Stem.GENG: Element.METAL,
    Stem.XIN: Element.METAL,
    Stem.REN: Element.WATER,
    Stem.GUI: Element.WATER,
}

BRANCH_ELEMENTS: Final[Mapping[Branch, Element]] = {
    Branch.ZI: Element.WATER,
    Branch.CHOU: Element.EARTH,
    Branch.YIN: Element.WOOD,
    Branch.MAO: Element.WOOD,
    Branch.CHEN: Element.EARTH,
    Branch.SI: Element.FIRE,
    Branch.WU: Element.FIRE,
    Branch.WEI: Element.EARTH,
    Branch.SHEN: Element.METAL,
    Branch.YOU: Element.METAL,
    Branch.XU: Element.EARTH,
    Branch.HAI: Element.WATER,
}

# Branches a given branch punishes or harms (刑).
BRANCH_PUNISHMENTS: Final[Mapping[Branch, tuple[Branch, ...]]] = {
    Branch.ZI: (Branch.MAO,),
    Branch.CHOU: (Branch.XU, Branch.WEI),
    Branch.YIN: (Branch.SI, Branch.SHEN),
    Branch.MAO: (Branch.ZI,),
    Branch.CHEN: (Branch.CHEN,),
    Branch.SI: (Branch.YIN, Branch.SHEN),
    Branch.WU: (Branch.WU,),
    Branch.WEI: (Branch.CHOU, Branch.XU),
    Branch.SHEN: (Branch.YIN, Branch.SI),
    Branch.YOU: (Branch.YOU,),
    Branch.XU: (Branch.CHOU, Branch.WEI),
    Branch.HAI: (Branch.HAI,),
}

# Storage ("tomb") branch of each element (墓库).
STORAGE_BRANCHES: Final[Mapping[Element, Branch]] = {
    Element.WOOD: Branch.WEI,
    Element.FIRE: Branch.XU,
    Element.EARTH: Branch.XU,
    Element.METAL: Branch.CHOU,
    Element.WATER: Branch.CHEN,
}

# Stem pairs that combine (天干五合); symmetric.
STEM_COMBINATIONS: Final[Mapping[Stem, Stem]] = {
    Stem.JIA: Stem.JI,
    Stem.JI: Stem.JIA,
    Stem.YI: Stem.GENG,
    Stem.GENG: Stem.YI,
    Stem.BING: Stem.XIN,
    Stem.XIN: Stem.BING,
    Stem.DING: Stem.REN,
    Stem.REN: Stem.DING,
    Stem.WU: Stem.GUI,
    Stem.GUI: Stem.WU,
}


def stem_for_index(index: int) -> Stem:
    """Return the Heavenly Stem for ``index`` (0-9)."""

    return HEAVENLY_STEMS[index % len(HEAVENLY_STEMS)]


def branch_for_index(index: int) -> Branch:
    """Return the Earthly Branch for ``index`` (0-11)."""

    return EARTHLY_BRANCHES[index % len(EARTHLY_BRANCHES)]


def branches_clash(first: Branch, second: Branch) -> bool:
    return first.clash() is second


__all__ = [
    "Element",
    "Stem",
    "Branch",
    "HEAVENLY_STEMS",
    "EARTHLY_BRANCHES",
    "GENERATES",
    "OVERCOMES",
    "STEM_ELEMENTS",
    "BRANCH_ELEMENTS",
    "BRANCH_PUNISHMENTS",
    "STORAGE_BRANCHES",
    "STEM_COMBINATIONS",
    "stem_for_index",
    "branch_for_index",
    "branches_clash",
]
