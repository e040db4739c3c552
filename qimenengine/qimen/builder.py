"""Default plate builder composing calendar, earth plate and rotation."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Mapping, Protocol

from ..chinese.constants import Stem
from ..chinese.four_pillars import compute_four_pillars
from ..chinese.sexagenary import SexagenaryCycleEntry
from ..chinese.solar_terms import solar_term_for
from .earth import deity_layout, earth_plate, stage_for
from .formations import detect_formations
from .palaces import Palace, horse_palace, void_palaces
from .plate import LeapMethod, Plate, PlateKind
from .zhuanpan import construct_layers, stem_palace

LOG = logging.getLogger(__name__)


class PlateBuilder(Protocol):
    """Callback producing a :class:`Plate` for one (date, slot) pair.

    Implementations must be pure: the same arguments always yield an equal
    plate. Structurally invalid dates raise :class:`ValueError`.
    """

    def __call__(
        self,
        year: int,
        month: int,
        day: int,
        hour: int,
        kind: PlateKind,
        leap_method: LeapMethod,
    ) -> Plate:
        ...


def _stem_palace(heaven: Mapping[Palace, Stem], entry: SexagenaryCycleEntry) -> Palace:
    palace = stem_palace(heaven, entry.resolve_stem())
    return (palace or Palace.KUN).resolve()


def build_plate(
    year: int,
    month: int,
    day: int,
    hour: int,
    kind: PlateKind = PlateKind.HOUR,
    leap_method: LeapMethod = LeapMethod.CHAIBU,
) -> Plate:
    """Build the rotating plate for the given local civil moment."""

    moment = datetime(year, month, day, hour)
    pillars = compute_four_pillars(moment)
    position = solar_term_for(moment.date())
    polarity, stage = stage_for(
        position.term,
        pillars,
        kind,
        leap_method,
        position.days_into_term(moment.date()),
    )
    earth = earth_plate(stage, polarity)
    layers = construct_layers(earth, pillars, polarity, kind)
    deities = deity_layout(layers.star_palace, polarity)
    reference = layers.decade_head

    plate = Plate(
        year=year,
        month=month,
        day=day,
        hour=hour,
        kind=kind,
        leap_method=leap_method,
        polarity=polarity,
        stage=stage,
        solar_term=position.term,
        solar_term_day=position.is_term_day(moment.date()),
        pillars=pillars,
        decade_head=reference,
        leader_stem=layers.leader_stem,
        leader_palace=layers.leader_palace,
        leader_star=layers.leader_star,
        leader_gate=layers.leader_gate,
        star_palace=layers.star_palace,
        gate_palace=layers.gate_palace,
        earth=earth,
        heaven=layers.heaven,
        gates=layers.gates,
        stars=layers.stars,
        deities=deities,
        void_palaces=void_palaces(reference.void_branches),
        horse_palace=horse_palace(pillars.day.branch),
        day_stem_palace=_stem_palace(layers.heaven, pillars.day.entry),
        hour_stem_palace=_stem_palace(layers.heaven, pillars.hour.entry),
    )
    plate = replace(plate, formations=detect_formations(plate))
    LOG.debug(
        "built %s plate %s polarity=%s stage=%d formations=%d",
        kind,
        moment.isoformat(),
        polarity,
        stage,
        len(plate.formations),
    )
    return plate


__all__ = ["PlateBuilder", "build_plate"]
