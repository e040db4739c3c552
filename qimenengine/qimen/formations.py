"""Formation (格局) detection over a constructed plate.

Checks that depend on a gate or deity skip the Center, which only mirrors
Kun. Checks that read the heaven stem alone include it.
"""

from __future__ import annotations

from typing import Callable, Final, Iterable, Mapping

from ..chinese.constants import STEM_COMBINATIONS, Stem
from .palaces import BRANCH_PALACES, OUTER_PALACES, Palace
from .plate import Auspice, Formation, Plate, PlateKind
from .symbols import (
    GOOD_GATES,
    HARSH_GATES,
    SIX_INSTRUMENTS,
    THREE_WONDERS,
    Deity,
    Gate,
    Star,
)

FAV = Auspice.FAVORABLE
BAD = Auspice.UNFAVORABLE
NEU = Auspice.NEUTRAL

# Wonder → the gate it pairs with best.
_WONDER_GATES: Final[Mapping[Stem, Gate]] = {
    Stem.YI: Gate.OPEN,
    Stem.BING: Gate.LIFE,
    Stem.DING: Gate.REST,
}

# Stem → palace where it is stored in its tomb.
_TOMB_PALACES: Final[Mapping[Stem, Palace]] = {
    Stem.YI: Palace.KUN,
    Stem.BING: Palace.QIAN,
    Stem.DING: Palace.QIAN,
    Stem.WU: Palace.QIAN,
    Stem.JI: Palace.QIAN,
    Stem.GENG: Palace.GEN,
    Stem.XIN: Palace.GEN,
    Stem.REN: Palace.XUN,
    Stem.GUI: Palace.XUN,
}

# Instrument → palace where its hidden Jia meets punishment.
_PUNISHMENT_PALACES: Final[Mapping[Stem, Palace]] = {
    Stem.WU: Palace.ZHEN,
    Stem.JI: Palace.KUN,
    Stem.GENG: Palace.GEN,
    Stem.XIN: Palace.LI,
    Stem.REN: Palace.XUN,
    Stem.GUI: Palace.XUN,
}

# Day stem → the hour stem that never meets it (五不遇时).
_UNMET_HOURS: Final[Mapping[Stem, Stem]] = {
    Stem.JIA: Stem.GENG,
    Stem.YI: Stem.XIN,
    Stem.BING: Stem.REN,
    Stem.DING: Stem.GUI,
    Stem.WU: Stem.JIA,
    Stem.JI: Stem.YI,
    Stem.GENG: Stem.BING,
    Stem.XIN: Stem.DING,
    Stem.REN: Stem.WU,
    Stem.GUI: Stem.JI,
}

# (heaven stem, earth stem) → (name, auspice, description).
STEM_PAIR_FORMATIONS: Final[Mapping[tuple[Stem, Stem], tuple[str, Auspice, str]]] = {
    (Stem.WU, Stem.BING): ("Green Dragon Returns", FAV, "Wu over Bing"),
    (Stem.BING, Stem.WU): ("Bird Falls into Nest", FAV, "Bing over Wu"),
    (Stem.YI, Stem.XIN): ("Green Dragon Escapes", BAD, "Yi over Xin"),
    (Stem.XIN, Stem.YI): ("White Tiger Rampant", BAD, "Xin over Yi"),
    (Stem.DING, Stem.GUI): ("Red Bird Enters River", BAD, "Ding over Gui"),
    (Stem.GUI, Stem.DING): ("Snake Writhes", BAD, "Gui over Ding"),
    (Stem.GENG, Stem.GUI): ("Great Obstruction", BAD, "Geng over Gui"),
    (Stem.GENG, Stem.REN): ("Minor Obstruction", BAD, "Geng over Ren"),
    (Stem.GENG, Stem.JI): ("Punishment Obstruction", BAD, "Geng over Ji"),
    (Stem.GENG, Stem.BING): ("Metal Enters Fire", BAD, "Geng over Bing"),
    (Stem.BING, Stem.GENG): ("Fire Enters Metal", BAD, "Bing over Geng"),
    (Stem.GENG, Stem.WU): ("Hidden Palace", BAD, "Geng over Wu"),
    (Stem.WU, Stem.GENG): ("Flying Palace", BAD, "Wu over Geng"),
}

# Escape formations: (name, wonder, gate, predicate on the palace).
_ESCAPES: Final[tuple[tuple[str, Stem, Gate, Callable[[Plate, Palace], bool]], ...]] = (
    ("Heaven Escape", Stem.BING, Gate.LIFE, lambda p, g: p.stars.get(g) is Star.XIN),
    ("Earth Escape", Stem.YI, Gate.OPEN, lambda p, g: p.earth.get(g) is Stem.JI),
    ("Human Escape", Stem.DING, Gate.REST, lambda p, g: p.deities.get(g) is Deity.TAI_YIN),
    ("Spirit Escape", Stem.BING, Gate.LIFE, lambda p, g: p.deities.get(g) is Deity.JIU_TIAN),
    ("Ghost Escape", Stem.YI, Gate.LIFE, lambda p, g: p.deities.get(g) is Deity.JIU_DI),
    ("Dragon Escape", Stem.YI, Gate.REST, lambda p, g: p.deities.get(g) is Deity.LIU_HE),
    ("Tiger Escape", Stem.YI, Gate.OPEN, lambda p, g: p.deities.get(g) is Deity.TAI_YIN),
    ("Wind Escape", Stem.YI, Gate.OPEN, lambda p, g: p.stars.get(g) is Star.FU),
    (
        "Cloud Escape",
        Stem.YI,
        Gate.REST,
        lambda p, g: p.deities.get(g) is Deity.LIU_HE and p.stars.get(g) is Star.RUI,
    ),
)

FUYIN_THRESHOLD: Final[int] = 8
FANYIN_THRESHOLD: Final[int] = 6


def _one(name: str, auspice: Auspice, description: str, *palaces: Palace) -> Formation:
    return Formation(name=name, auspice=auspice, description=description, palaces=palaces)


def _wonder_formations(plate: Plate) -> Iterable[Formation]:
    for palace in OUTER_PALACES:
        stem = plate.heaven[palace]
        if stem not in THREE_WONDERS:
            continue
        gate = plate.gates.get(palace)
        deity = plate.deities.get(palace)
        if gate in GOOD_GATES:
            yield _one("Wonder Finds Envoy", FAV, f"{stem} with the {gate} gate", palace)
        if deity is Deity.ZHI_FU:
            yield _one("Wonder Meets Noble", FAV, f"{stem} with Zhi Fu", palace)
        if _WONDER_GATES[stem] is gate:
            yield _one("Wonder Finds Gate", FAV, f"{stem} matched with the {gate} gate", palace)
        if (
            stem is Stem.DING
            and gate in (Gate.OPEN, Gate.REST)
            and deity in (Deity.TAI_YIN, Deity.LIU_HE)
        ):
            yield _one("Jade Maiden Guards Gate", FAV, f"Ding with {gate} and {deity}", palace)
        for name, wonder, escape_gate, extra in _ESCAPES:
            if stem is wonder and gate is escape_gate and extra(plate, palace):
                yield _one(name, FAV, f"{stem} with the {gate} gate", palace)


def _gate_coercion(plate: Plate) -> Iterable[Formation]:
    for palace in OUTER_PALACES:
        gate = plate.gates[palace]
        if gate.element.overcomes() is palace.element:
            yield _one("Gate Coercion", BAD, f"{gate} gate overcomes its palace", palace)


def _stem_formations(plate: Plate) -> Iterable[Formation]:
    for palace in Palace:
        heaven = plate.heaven[palace]
        earth = plate.earth[palace]
        if _TOMB_PALACES.get(heaven) is palace:
            name = "Wonder Enters Tomb" if heaven in THREE_WONDERS else "Enters Tomb"
            yield _one(name, BAD, f"{heaven} stored in its tomb", palace)
        if _PUNISHMENT_PALACES.get(heaven) is palace:
            yield _one("Instrument Punished", BAD, f"{heaven} meets punishment", palace)
        pair = STEM_PAIR_FORMATIONS.get((heaven, earth))
        if pair is not None:
            name, auspice, description = pair
            yield _one(name, auspice, description, palace)
        if palace is not Palace.CENTER and STEM_COMBINATIONS.get(heaven) is earth:
            yield _one(f"{heaven}-{earth} Combination", FAV, f"{heaven} combines with {earth}", palace)


def _gate_deity_formations(plate: Plate) -> Iterable[Formation]:
    for palace in OUTER_PALACES:
        stem = plate.heaven[palace]
        gate = plate.gates[palace]
        deity = plate.deities.get(palace)
        if gate is Gate.LIFE and deity is Deity.LIU_HE:
            yield _one("Dragon Rides Life", FAV, "Life gate with Liu He", palace)
        if stem is Stem.GENG and gate is Gate.OPEN and deity is Deity.BAI_HU:
            yield _one("Tiger Rages", BAD, "Geng with the Open gate and Bai Hu", palace)
        if palace is Palace.QIAN and stem is Stem.WU and gate in (Gate.DEATH, Gate.FEAR):
            yield _one("Heaven Net Spread", BAD, f"Wu with the {gate} gate in Qian", palace)
        if palace is Palace.XUN and stem is Stem.GUI and gate in (Gate.DEATH, Gate.DELUSION):
            yield _one("Earth Net Cover", BAD, f"Gui with the {gate} gate in Xun", palace)
        if stem is Stem.GENG and gate is Gate.DELUSION:
            yield _one("Heaven Prison", BAD, "Geng with the Delusion gate", palace)


def _chant_formations(plate: Plate) -> Iterable[Formation]:
    leader = plate.leader_palace
    if plate.star_palace is leader:
        yield _one("Star Hidden Chant", NEU, "leader star rests at home", leader)
    if plate.gate_palace is leader:
        yield _one("Gate Hidden Chant", NEU, "acting gate rests at home", leader)
    if sum(1 for p in Palace if plate.heaven[p] is plate.earth[p]) >= FUYIN_THRESHOLD:
        yield _one("Heaven-Earth Hidden Chant", NEU, "heaven stems repeat the earth plate")

    if plate.star_palace is leader.opposite:
        yield _one("Star Reverse Chant", NEU, "leader star opposite its home", plate.star_palace)
    if plate.gate_palace is leader.opposite:
        yield _one("Gate Reverse Chant", NEU, "acting gate opposite its home", plate.gate_palace)
    reversed_count = sum(
        1
        for p in OUTER_PALACES
        if p.opposite is not Palace.CENTER and plate.heaven[p] is plate.earth[p.opposite]
    )
    if reversed_count >= FANYIN_THRESHOLD:
        yield _one("Heaven-Earth Reverse Chant", NEU, "heaven stems face their earth opposites")


def _hour_formations(plate: Plate) -> Iterable[Formation]:
    day = plate.pillars.day.entry
    hour = plate.pillars.hour.entry
    if _UNMET_HOURS[day.stem] is hour.stem:
        yield _one("Five Unmet Hour", BAD, f"{hour.stem} hour overcomes the {day.stem} day")

    day_stem = day.resolve_stem()
    hour_stem = hour.resolve_stem()
    hour_heaven = plate.heaven_palace_of(hour_stem)
    day_heaven = plate.heaven_palace_of(day_stem)
    if hour_heaven is not None and hour_heaven is plate.earth_palace_of(day_stem):
        yield _one("Flying Stem", BAD, "hour stem flies onto the day stem", hour_heaven)
    if day_heaven is not None and day_heaven is plate.earth_palace_of(hour_stem):
        yield _one("Hidden Stem", BAD, "day stem hides on the hour stem", day_heaven)

    palace = BRANCH_PALACES[hour.branch]
    stem = plate.heaven[palace]
    gate = plate.gates[palace]
    if stem in THREE_WONDERS and gate in GOOD_GATES:
        yield _one("Heaven Reveals Hour", FAV, f"{stem} with the {gate} gate", palace)
    if stem in SIX_INSTRUMENTS and gate in HARSH_GATES:
        yield _one("Earth Private Gate", BAD, f"{stem} with the {gate} gate", palace)


def detect_formations(plate: Plate) -> tuple[Formation, ...]:
    """Return every formation present on ``plate`` in detection order."""

    found: list[Formation] = []
    found.extend(_wonder_formations(plate))
    found.extend(_gate_coercion(plate))
    found.extend(_stem_formations(plate))
    found.extend(_gate_deity_formations(plate))
    found.extend(_chant_formations(plate))
    if plate.kind is PlateKind.HOUR:
        found.extend(_hour_formations(plate))
    return tuple(found)


__all__ = [
    "STEM_PAIR_FORMATIONS",
    "detect_formations",
]
