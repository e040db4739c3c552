"""Rotating-plate ("zhuan pan") construction of heaven stems, gates and stars."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

from ..chinese.constants import Stem
from ..chinese.four_pillars import FourPillars
from ..chinese.sexagenary import SexagenaryCycleEntry
from .palaces import Palace
from .plate import PlateKind, Polarity, pillar_for_kind
from .rotation import ring_rotate, rotate
from .symbols import (
    CANONICAL_STEMS,
    GATE_ORDER,
    STAR_ORDER,
    Gate,
    Star,
    gate_at_home,
    star_at_home,
)

LOG = logging.getLogger(__name__)

DEFAULT_GATE = Gate.DEATH
DEFAULT_STAR = Star.RUI


@dataclass(frozen=True)
class RotatedLayers:
    """Heaven-plate, gate and star layers derived for one moment."""

    decade_head: SexagenaryCycleEntry
    leader_stem: Stem
    leader_palace: Palace
    leader_gate: Gate
    leader_star: Star
    gate_palace: Palace
    star_palace: Palace
    heaven: Mapping[Palace, Stem]
    gates: Mapping[Palace, Gate]
    stars: Mapping[Palace, Star]


def stem_palace(earth: Mapping[Palace, Stem], stem: Stem) -> Palace | None:
    """Return the palace holding ``stem`` on ``earth`` by linear scan."""

    for palace in Palace:
        if earth.get(palace) is stem:
            return palace
    return None


def heaven_plate(
    earth: Mapping[Palace, Stem], governing: Stem, clockwise: bool
) -> dict[Palace, Stem]:
    """Lay the nine stems out from the governing stem's earth palace.

    ``governing`` must already have any hidden Jia resolved to its decade
    leader.
    """

    start = stem_palace(earth, governing)
    if start is None:
        LOG.debug("governing stem %s missing from earth plate; using Kun", governing)
        start = Palace.KUN
    start = start.resolve()
    return {rotate(start, steps, clockwise): stem for steps, stem in enumerate(CANONICAL_STEMS)}


def gate_layout(
    leader_palace: Palace, branch_steps: int, clockwise: bool
) -> tuple[Gate, Palace, dict[Palace, Gate]]:
    """Return the acting gate, its falling palace and the full gate map."""

    acting = gate_at_home(leader_palace.resolve()) or DEFAULT_GATE
    falling = ring_rotate(leader_palace, branch_steps, clockwise)
    first = GATE_ORDER.index(acting)
    gates = {
        ring_rotate(falling, step, clockwise): GATE_ORDER[(first + step) % len(GATE_ORDER)]
        for step in range(len(GATE_ORDER))
    }
    gates[Palace.CENTER] = gates[Palace.KUN]
    return acting, falling, gates


def star_layout(
    leader_palace: Palace, branch_steps: int, clockwise: bool
) -> tuple[Star, Palace, dict[Palace, Star]]:
    """Return the acting star, its falling palace and the full star map."""

    acting = star_at_home(leader_palace.resolve()) or DEFAULT_STAR
    falling = ring_rotate(leader_palace, branch_steps, clockwise)
    first = STAR_ORDER.index(acting)
    stars = {
        ring_rotate(falling, step, clockwise): STAR_ORDER[(first + step) % len(STAR_ORDER)]
        for step in range(len(STAR_ORDER))
    }
    stars[Palace.CENTER] = Star.QIN
    return acting, falling, stars


def construct_layers(
    earth: Mapping[Palace, Stem],
    pillars: FourPillars,
    polarity: Polarity,
    kind: PlateKind = PlateKind.HOUR,
) -> RotatedLayers:
    """Derive the heaven plate, gates and stars from the earth plate.

    The reference pillar (hour pillar for hour plates, and so on) selects the
    governing stem, the active decade and the number of branch steps the
    acting gate and star travel from the leader's palace.
    """

    reference = pillar_for_kind(pillars, kind).entry
    decade_head = reference.decade_head
    leader_stem = reference.leader_stem
    leader_palace = (stem_palace(earth, leader_stem) or Palace.KUN).resolve()
    clockwise = polarity.clockwise

    heaven = heaven_plate(earth, reference.resolve_stem(), clockwise)
    branch_steps = reference.branch.ordinal
    leader_gate, gate_palace, gates = gate_layout(leader_palace, branch_steps, clockwise)
    leader_star, star_palace, stars = star_layout(leader_palace, branch_steps, clockwise)

    return RotatedLayers(
        decade_head=decade_head,
        leader_stem=leader_stem,
        leader_palace=leader_palace,
        leader_gate=leader_gate,
        leader_star=leader_star,
        gate_palace=gate_palace,
        star_palace=star_palace,
        heaven=heaven,
        gates=gates,
        stars=stars,
    )


__all__ = [
    "RotatedLayers",
    "DEFAULT_GATE",
    "DEFAULT_STAR",
    "stem_palace",
    "heaven_plate",
    "gate_layout",
    "star_layout",
    "construct_layers",
]
