from __future__ import annotations

from qimenengine.chinese.constants import Stem
from qimenengine.qimen import Auspice, Palace, Plate, PlateKind, build_plate
from qimenengine.qimen.formations import detect_formations
from qimenengine.qimen.symbols import Deity, Gate
from tests.helpers import with_layers


def _named(plate: Plate, name: str) -> list:
    return [f for f in plate.formations if f.name == name]


def test_detect_formations_matches_builder(spring_plate: Plate) -> None:
    """Built plates carry the detector's output."""

    assert spring_plate.formations == detect_formations(spring_plate)
    favorable = set(spring_plate.favorable_formations())
    unfavorable = set(spring_plate.unfavorable_formations())
    assert favorable.isdisjoint(unfavorable)


def test_stem_pair_formation(spring_plate: Plate) -> None:
    """Yi over Xin is the Green Dragon Escapes."""

    plate = with_layers(spring_plate, heaven={Palace.LI: Stem.YI}, earth={Palace.LI: Stem.XIN})
    found = _named(plate, "Green Dragon Escapes")
    assert len(found) == 1
    assert found[0].auspice is Auspice.UNFAVORABLE
    assert found[0].palaces == (Palace.LI,)
    assert found[0].covers(Palace.LI)


def test_wonder_with_good_gate(spring_plate: Plate) -> None:
    """Yi with the Open gate finds both an envoy and its own gate."""

    plate = with_layers(spring_plate, heaven={Palace.KAN: Stem.YI}, gates={Palace.KAN: Gate.OPEN})
    assert _named(plate, "Wonder Finds Envoy")
    assert _named(plate, "Wonder Finds Gate")[0].palaces == (Palace.KAN,)


def test_gate_and_deity_formations(spring_plate: Plate) -> None:
    """Gate/deity combinations are read per outer palace."""

    plate = with_layers(
        spring_plate,
        heaven={Palace.DUI: Stem.GENG},
        gates={Palace.LI: Gate.LIFE, Palace.DUI: Gate.OPEN},
        deities={Palace.LI: Deity.LIU_HE, Palace.DUI: Deity.BAI_HU},
    )
    assert _named(plate, "Dragon Rides Life")[0].auspice is Auspice.FAVORABLE
    assert _named(plate, "Tiger Rages")[0].palaces == (Palace.DUI,)


def test_gate_coercion(spring_plate: Plate) -> None:
    """A metal gate in a wood palace coerces it."""

    plate = with_layers(spring_plate, gates={Palace.ZHEN: Gate.OPEN})
    assert any(f.covers(Palace.ZHEN) for f in _named(plate, "Gate Coercion"))


def test_heaven_earth_hidden_chant(spring_plate: Plate) -> None:
    """A heaven plate copying the earth plate is a hidden chant."""

    plate = with_layers(spring_plate, heaven=dict(spring_plate.earth))
    chant = _named(plate, "Heaven-Earth Hidden Chant")
    assert chant and chant[0].auspice is Auspice.NEUTRAL


def test_five_unmet_hour_only_on_hour_plates(jia_zi_plate: Plate) -> None:
    """A Geng hour on a Jia day never meets; day plates skip hour checks."""

    assert _named(jia_zi_plate, "Five Unmet Hour")
    assert _named(jia_zi_plate, "Five Unmet Hour")[0].auspice is Auspice.UNFAVORABLE
    day_plate = build_plate(2000, 1, 7, 12, PlateKind.DAY)
    assert not _named(day_plate, "Five Unmet Hour")
    assert not _named(build_plate(2000, 1, 7, 10), "Five Unmet Hour")
