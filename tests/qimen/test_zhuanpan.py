from __future__ import annotations

from qimenengine.chinese.constants import Stem
from qimenengine.qimen.earth import earth_plate
from qimenengine.qimen.palaces import OUTER_PALACES, Palace
from qimenengine.qimen.plate import PlateKind, Polarity
from qimenengine.qimen.symbols import GATE_HOMES, STAR_HOMES, Gate, Star
from qimenengine.qimen.zhuanpan import (
    construct_layers,
    gate_layout,
    heaven_plate,
    star_layout,
    stem_palace,
)
from tests.helpers import pillars_from_indices

# Yang stage 1: Kan Wu, Gen Ji, Zhen Geng, Xun Xin, Li Ren, Kun Gui,
# Dui Ding, Qian Bing, Center Yi.
EARTH = earth_plate(1, Polarity.YANG)


def test_jia_zi_hour_keeps_stems_and_gates_home() -> None:
    """A Jia-Zi hour on yang stage 1 leaves stems and gates in place."""

    layers = construct_layers(EARTH, pillars_from_indices(0, 2, 0, 0), Polarity.YANG)

    assert layers.leader_stem is Stem.WU
    assert layers.leader_palace is Palace.KAN
    assert layers.leader_gate is Gate.REST
    assert layers.leader_star is Star.PENG
    assert layers.gate_palace is Palace.KAN
    assert layers.star_palace is Palace.KAN
    for gate, home in GATE_HOMES.items():
        assert layers.gates[home] is gate
    assert layers.stars[STAR_HOMES[Star.PENG]] is Star.PENG
    assert layers.heaven[Palace.KAN] is Stem.WU
    assert layers.heaven[Palace.CENTER] is Stem.REN


def test_star_layout_without_steps() -> None:
    """Stars walk the ring in Luoshu-number order from the falling palace."""

    acting, falling, stars = star_layout(Palace.KAN, 0, True)

    assert acting is Star.PENG
    assert falling is Palace.KAN
    assert stars == {
        Palace.KAN: Star.PENG,
        Palace.GEN: Star.RUI,
        Palace.ZHEN: Star.CHONG,
        Palace.XUN: Star.FU,
        Palace.LI: Star.XIN,
        Palace.KUN: Star.ZHU,
        Palace.DUI: Star.REN,
        Palace.QIAN: Star.YING,
        Palace.CENTER: Star.QIN,
    }


def test_bing_yin_hour_rotates_clockwise() -> None:
    """The governing Bing starts the heaven plate at its earth palace, Qian."""

    layers = construct_layers(EARTH, pillars_from_indices(0, 2, 0, 2), Polarity.YANG)

    assert layers.heaven == {
        Palace.QIAN: Stem.WU,
        Palace.KAN: Stem.JI,
        Palace.GEN: Stem.GENG,
        Palace.ZHEN: Stem.XIN,
        Palace.CENTER: Stem.REN,
        Palace.XUN: Stem.GUI,
        Palace.LI: Stem.DING,
        Palace.KUN: Stem.BING,
        Palace.DUI: Stem.YI,
    }
    # Yin is the third branch: two steps from Kan.
    assert layers.gate_palace is Palace.ZHEN
    assert layers.gates[Palace.ZHEN] is Gate.REST
    assert layers.gates[Palace.XUN] is Gate.LIFE
    assert layers.gates[Palace.GEN] is Gate.OPEN
    assert layers.gates[Palace.CENTER] is layers.gates[Palace.KUN] is Gate.DELUSION
    assert layers.star_palace is Palace.ZHEN
    assert layers.stars == {
        Palace.ZHEN: Star.PENG,
        Palace.XUN: Star.RUI,
        Palace.LI: Star.CHONG,
        Palace.KUN: Star.FU,
        Palace.DUI: Star.XIN,
        Palace.QIAN: Star.ZHU,
        Palace.KAN: Star.REN,
        Palace.GEN: Star.YING,
        Palace.CENTER: Star.QIN,
    }


def test_bing_yin_hour_rotates_counterclockwise_for_yin() -> None:
    """Yin polarity walks the same sequences the other way around."""

    layers = construct_layers(EARTH, pillars_from_indices(0, 2, 0, 2), Polarity.YIN)

    assert layers.heaven[Palace.QIAN] is Stem.WU
    assert layers.heaven[Palace.DUI] is Stem.JI
    assert layers.heaven[Palace.CENTER] is Stem.REN
    assert layers.heaven[Palace.XUN] is Stem.GUI
    assert layers.heaven[Palace.KAN] is Stem.YI
    assert layers.gate_palace is Palace.DUI
    assert layers.gates[Palace.DUI] is Gate.REST
    assert layers.gates[Palace.KUN] is Gate.LIFE
    assert layers.stars[Palace.DUI] is Star.PENG
    assert layers.stars[Palace.KUN] is Star.RUI
    assert layers.stars[Palace.LI] is Star.CHONG


def test_reference_pillar_follows_plate_kind() -> None:
    """Day plates are driven by the day pillar instead of the hour."""

    pillars = pillars_from_indices(0, 2, 2, 0)
    hour_layers = construct_layers(EARTH, pillars, Polarity.YANG, PlateKind.HOUR)
    day_layers = construct_layers(EARTH, pillars, Polarity.YANG, PlateKind.DAY)

    assert hour_layers.gate_palace is Palace.KAN
    assert day_layers.gate_palace is Palace.ZHEN


def test_layouts_cover_each_outer_palace_once() -> None:
    """Gate and star maps hold every symbol once around the ring."""

    for start in Palace:
        for steps in range(12):
            for clockwise in (True, False):
                _, _, gates = gate_layout(start, steps, clockwise)
                _, _, stars = star_layout(start, steps, clockwise)
                assert {gates[p] for p in OUTER_PALACES} == set(Gate)
                assert {stars[p] for p in OUTER_PALACES} == set(Star) - {Star.QIN}
                assert gates[Palace.CENTER] is gates[Palace.KUN]


def test_center_leader_borrows_kun() -> None:
    """A leader sitting at the Center acts from Kun with the Death gate."""

    acting, falling, _ = gate_layout(Palace.CENTER, 0, True)
    assert acting is Gate.DEATH
    assert falling is Palace.KUN
    star, _, _ = star_layout(Palace.CENTER, 0, True)
    assert star is Star.RUI


def test_missing_governing_stem_falls_back_to_kun() -> None:
    """A governing stem absent from the earth plate starts from Kun."""

    earth = {palace: stem for palace, stem in EARTH.items() if stem is not Stem.GUI}
    assert stem_palace(earth, Stem.GUI) is None
    heaven = heaven_plate(earth, Stem.GUI, True)
    assert heaven[Palace.KUN] is Stem.WU
    assert len(set(heaven.values())) == 9
