"""Gates, stars and deities laid over the nine palaces."""

from __future__ import annotations

from enum import StrEnum
from typing import Final, Mapping

from ..chinese.constants import Element, Stem
from .palaces import Palace


class Gate(StrEnum):
    """The eight gates (八门)."""

    REST = "Rest"
    LIFE = "Life"
    HARM = "Harm"
    DELUSION = "Delusion"
    SCENERY = "Scenery"
    DEATH = "Death"
    FEAR = "Fear"
    OPEN = "Open"

    @property
    def home(self) -> Palace:
        return GATE_HOMES[self]

    @property
    def element(self) -> Element:
        return GATE_ELEMENTS[self]


class Star(StrEnum):
    """The nine stars (九星)."""

    PENG = "TianPeng"
    RUI = "TianRui"
    CHONG = "TianChong"
    FU = "TianFu"
    QIN = "TianQin"
    XIN = "TianXin"
    ZHU = "TianZhu"
    REN = "TianRen"
    YING = "TianYing"

    @property
    def home(self) -> Palace:
        return STAR_HOMES[self]

    @property
    def element(self) -> Element:
        return STAR_ELEMENTS[self]


class Deity(StrEnum):
    """The eight deities (八神) of the spirit layer."""

    ZHI_FU = "ZhiFu"
    TENG_SHE = "TengShe"
    TAI_YIN = "TaiYin"
    LIU_HE = "LiuHe"
    BAI_HU = "BaiHu"
    XUAN_WU = "XuanWu"
    JIU_DI = "JiuDi"
    JIU_TIAN = "JiuTian"

    @property
    def element(self) -> Element:
        return DEITY_ELEMENTS[self]


GATE_HOMES: Final[Mapping[Gate, Palace]] = {
    Gate.REST: Palace.KAN,
    Gate.LIFE: Palace.GEN,
    Gate.HARM: Palace.ZHEN,
    Gate.DELUSION: Palace.XUN,
    Gate.SCENERY: Palace.LI,
    Gate.DEATH: Palace.KUN,
    Gate.FEAR: Palace.DUI,
    Gate.OPEN: Palace.QIAN,
}

# Canonical walking order; follows the clockwise ring from Kan.
GATE_ORDER: Final[tuple[Gate, ...]] = tuple(Gate)

GATE_ELEMENTS: Final[Mapping[Gate, Element]] = {
    Gate.REST: Element.WATER,
    Gate.LIFE: Element.EARTH,
    Gate.HARM: Element.WOOD,
    Gate.DELUSION: Element.WOOD,
    Gate.SCENERY: Element.FIRE,
    Gate.DEATH: Element.EARTH,
    Gate.FEAR: Element.METAL,
    Gate.OPEN: Element.METAL,
}

GOOD_GATES: Final[frozenset[Gate]] = frozenset({Gate.OPEN, Gate.REST, Gate.LIFE})
HARSH_GATES: Final[frozenset[Gate]] = frozenset({Gate.DEATH, Gate.FEAR, Gate.DELUSION})

STAR_HOMES: Final[Mapping[Star, Palace]] = {
    Star.PENG: Palace.KAN,
    Star.RUI: Palace.KUN,
    Star.CHONG: Palace.ZHEN,
    Star.FU: Palace.XUN,
    Star.QIN: Palace.CENTER,
    Star.XIN: Palace.QIAN,
    Star.ZHU: Palace.DUI,
    Star.REN: Palace.GEN,
    Star.YING: Palace.LI,
}

# Walking order of the eight ring stars, by Luoshu number of their home
# palace (1, 2, 3, 4, 6, 7, 8, 9); Qin stays merged at the Center.
STAR_ORDER: Final[tuple[Star, ...]] = (
    Star.PENG,
    Star.RUI,
    Star.CHONG,
    Star.FU,
    Star.XIN,
    Star.ZHU,
    Star.REN,
    Star.YING,
)

STAR_ELEMENTS: Final[Mapping[Star, Element]] = {
    Star.PENG: Element.WATER,
    Star.RUI: Element.EARTH,
    Star.CHONG: Element.WOOD,
    Star.FU: Element.WOOD,
    Star.QIN: Element.EARTH,
    Star.XIN: Element.METAL,
    Star.ZHU: Element.METAL,
    Star.REN: Element.EARTH,
    Star.YING: Element.FIRE,
}

DEITY_ORDER: Final[tuple[Deity, ...]] = tuple(Deity)

DEITY_ELEMENTS: Final[Mapping[Deity, Element]] = {
    Deity.ZHI_FU: Element.EARTH,
    Deity.TENG_SHE: Element.FIRE,
    Deity.TAI_YIN: Element.METAL,
    Deity.LIU_HE: Element.WOOD,
    Deity.BAI_HU: Element.METAL,
    Deity.XUAN_WU: Element.WATER,
    Deity.JIU_DI: Element.EARTH,
    Deity.JIU_TIAN: Element.METAL,
}

# Stems laid on the plate in this order (三奇六仪).
CANONICAL_STEMS: Final[tuple[Stem, ...]] = (
    Stem.WU,
    Stem.JI,
    Stem.GENG,
    Stem.XIN,
    Stem.REN,
    Stem.GUI,
    Stem.DING,
    Stem.BING,
    Stem.YI,
)

THREE_WONDERS: Final[frozenset[Stem]] = frozenset({Stem.YI, Stem.BING, Stem.DING})
SIX_INSTRUMENTS: Final[frozenset[Stem]] = frozenset(
    {Stem.WU, Stem.JI, Stem.GENG, Stem.XIN, Stem.REN, Stem.GUI}
)


def gate_at_home(palace: Palace) -> Gate | None:
    """Return the gate whose home is ``palace``, if any."""

    for gate, home in GATE_HOMES.items():
        if home is palace:
            return gate
    return None


def star_at_home(palace: Palace) -> Star | None:
    for star, home in STAR_HOMES.items():
        if home is palace:
            return star
    return None


__all__ = [
    "Gate",
    "Star",
    "Deity",
    "GATE_HOMES",
    "GATE_ORDER",
    "GATE_ELEMENTS",
    "GOOD_GATES",
    "HARSH_GATES",
    "STAR_HOMES",
    "STAR_ORDER",
    "STAR_ELEMENTS",
    "DEITY_ORDER",
    "DEITY_ELEMENTS",
    "CANONICAL_STEMS",
    "THREE_WONDERS",
    "SIX_INSTRUMENTS",
    "gate_at_home",
    "star_at_home",
]
