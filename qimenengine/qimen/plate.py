"""Immutable plate model produced once per queried moment."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Final, Mapping

from ..chinese.constants import Stem
from ..chinese.four_pillars import FourPillars, Pillar
from ..chinese.sexagenary import SexagenaryCycleEntry
from ..chinese.solar_terms import SolarTerm
from .palaces import Palace
from .symbols import Deity, Gate, Star


class PlateKind(StrEnum):
    """Which pillar drives the plate (时盘/日盘/月盘/年盘)."""

    HOUR = "hour"
    DAY = "day"
    MONTH = "month"
    YEAR = "year"


class LeapMethod(StrEnum):
    """How the upper/middle/lower stage is chosen within a solar term."""

    CHAIBU = "chaibu"
    MAOSHAN = "maoshan"


class Polarity(StrEnum):
    """Yang cycles rotate clockwise, yin cycles counterclockwise."""

    YANG = "yang"
    YIN = "yin"

    @property
    def clockwise(self) -> bool:
        return self is Polarity.YANG


class Auspice(StrEnum):
    FAVORABLE = "favorable"
    UNFAVORABLE = "unfavorable"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Formation:
    """A named configuration (格局) and the palaces it covers."""

    name: str
    auspice: Auspice
    description: str
    palaces: tuple[Palace, ...] = ()

    def covers(self, palace: Palace) -> bool:
        return palace in self.palaces


# Palace maps held as read-only proxies.
_LAYER_FIELDS: Final[tuple[str, ...]] = ("earth", "heaven", "gates", "stars", "deities")


@dataclass(frozen=True)
class Plate:
    """Fully constructed rotating plate for one (date, slot) pair.

    Stem, gate and star maps cover all nine palaces; the Center's gate and
    deity mirror Kun and its star is always Tian Qin.
    """

    year: int
    month: int
    day: int
    hour: int
    kind: PlateKind
    leap_method: LeapMethod
    polarity: Polarity
    stage: int
    solar_term: SolarTerm
    solar_term_day: bool
    pillars: FourPillars
    decade_head: SexagenaryCycleEntry
    leader_stem: Stem
    leader_palace: Palace
    leader_star: Star
    leader_gate: Gate
    star_palace: Palace
    gate_palace: Palace
    earth: Mapping[Palace, Stem]
    heaven: Mapping[Palace, Stem]
    gates: Mapping[Palace, Gate]
    stars: Mapping[Palace, Star]
    deities: Mapping[Palace, Deity]
    void_palaces: frozenset[Palace]
    horse_palace: Palace | None
    day_stem_palace: Palace
    hour_stem_palace: Palace
    formations: tuple[Formation, ...] = field(default=())

    def __post_init__(self) -> None:
        for name in _LAYER_FIELDS:
            object.__setattr__(self, name, MappingProxyType(dict(getattr(self, name))))

    @property
    def moment(self) -> datetime:
        return datetime(self.year, self.month, self.day, self.hour)

    @property
    def reference_pillar(self) -> Pillar:
        return pillar_for_kind(self.pillars, self.kind)

    def is_void(self, palace: Palace) -> bool:
        return palace in self.void_palaces

    def heaven_palace_of(self, stem: Stem) -> Palace | None:
        """Return the palace holding ``stem`` on the heaven plate, if any."""

        return _find(self.heaven, stem)

    def earth_palace_of(self, stem: Stem) -> Palace | None:
        return _find(self.earth, stem)

    def gate_palace_of(self, gate: Gate) -> Palace | None:
        return _find(self.gates, gate, skip_center=True)

    def star_palace_of(self, star: Star) -> Palace | None:
        return _find(self.stars, star)

    def deity_palace_of(self, deity: Deity) -> Palace | None:
        return _find(self.deities, deity, skip_center=True)

    def favorable_formations(self) -> tuple[Formation, ...]:
        return tuple(f for f in self.formations if f.auspice is Auspice.FAVORABLE)

    def unfavorable_formations(self) -> tuple[Formation, ...]:
        return tuple(f for f in self.formations if f.auspice is Auspice.UNFAVORABLE)


def _find(layer: Mapping[Palace, object], value: object, skip_center: bool = False) -> Palace | None:
    for palace in Palace:
        if skip_center and palace is Palace.CENTER:
            continue
        if layer.get(palace) is value:
            return palace
    return None


def pillar_for_kind(pillars: FourPillars, kind: PlateKind) -> Pillar:
    """Return the pillar that drives a plate of ``kind``."""

    if kind is PlateKind.HOUR:
        return pillars.hour
    if kind is PlateKind.DAY:
        return pillars.day
    if kind is PlateKind.MONTH:
        return pillars.month
    return pillars.year


__all__ = [
    "PlateKind",
    "LeapMethod",
    "Polarity",
    "Auspice",
    "Formation",
    "Plate",
    "pillar_for_kind",
]
