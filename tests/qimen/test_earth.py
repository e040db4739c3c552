from __future__ import annotations

import pytest

from qimenengine.chinese.constants import Stem
from qimenengine.chinese.solar_terms import SolarTerm
from qimenengine.qimen.earth import Yuan, deity_layout, earth_plate, stage_for, yuan_for_day
from qimenengine.qimen.palaces import Palace
from qimenengine.qimen.plate import LeapMethod, PlateKind, Polarity
from qimenengine.qimen.symbols import Deity
from tests.helpers import pillars_from_indices


@pytest.mark.parametrize("stage", range(1, 10))
@pytest.mark.parametrize("polarity", list(Polarity))
def test_earth_plate_places_nine_distinct_stems(stage: int, polarity: Polarity) -> None:
    """Every palace holds a stem, none repeats and Yi sits at the Center."""

    earth = earth_plate(stage, polarity)
    assert set(earth) == set(Palace)
    assert len(set(earth.values())) == 9
    assert Stem.JIA not in earth.values()
    assert earth[Palace.CENTER] is Stem.YI


def test_earth_plate_directions() -> None:
    """Yang stages walk forward from the stage palace, yin stages backward."""

    yang = earth_plate(5, Polarity.YANG)
    assert yang[Palace.KUN] is Stem.WU
    assert yang[Palace.DUI] is Stem.JI
    assert yang[Palace.KAN] is Stem.XIN

    yin = earth_plate(9, Polarity.YIN)
    assert yin[Palace.LI] is Stem.WU
    assert yin[Palace.XUN] is Stem.JI
    assert yin[Palace.KUN] is Stem.BING


@pytest.mark.parametrize("stage", [0, 10])
def test_earth_plate_rejects_unknown_stage(stage: int) -> None:
    """Stages live in 1..9."""

    with pytest.raises(ValueError):
        earth_plate(stage, Polarity.YANG)


def test_stage_for_split_day_method() -> None:
    """Chaibu reads the period from the day's decade head."""

    jia_zi_day = pillars_from_indices(40, 2, 0, 0)
    jia_xu_day = pillars_from_indices(40, 2, 13, 0)
    jia_shen_day = pillars_from_indices(40, 2, 27, 0)

    assert stage_for(SolarTerm.DONGZHI, jia_zi_day, PlateKind.HOUR, LeapMethod.CHAIBU, 1) == (
        Polarity.YANG,
        1,
    )
    assert stage_for(SolarTerm.DONGZHI, jia_xu_day, PlateKind.HOUR, LeapMethod.CHAIBU, 1) == (
        Polarity.YANG,
        7,
    )
    assert stage_for(SolarTerm.XIAZHI, jia_shen_day, PlateKind.HOUR, LeapMethod.CHAIBU, 1) == (
        Polarity.YIN,
        6,
    )


def test_stage_for_day_count_method() -> None:
    """Maoshan splits the term into five-day periods."""

    pillars = pillars_from_indices(40, 2, 0, 0)
    day = pillars.day.entry
    assert yuan_for_day(day, LeapMethod.MAOSHAN, 5) is Yuan.UPPER
    assert yuan_for_day(day, LeapMethod.MAOSHAN, 6) is Yuan.MIDDLE
    assert yuan_for_day(day, LeapMethod.MAOSHAN, 14) is Yuan.LOWER
    assert stage_for(SolarTerm.LICHUN, pillars, PlateKind.HOUR, LeapMethod.MAOSHAN, 7) == (
        Polarity.YANG,
        5,
    )


def test_stage_for_year_and_month_plates() -> None:
    """Year plates count the cycle; month plates read the month's opening term."""

    pillars = pillars_from_indices(40, 2, 0, 0)
    assert stage_for(SolarTerm.DONGZHI, pillars, PlateKind.YEAR, LeapMethod.CHAIBU, 1) == (
        Polarity.YANG,
        5,
    )
    # Bing-Yin month: Lichun, middle period.
    assert stage_for(SolarTerm.DONGZHI, pillars, PlateKind.MONTH, LeapMethod.CHAIBU, 1) == (
        Polarity.YANG,
        5,
    )


def test_deity_layout_walks_with_polarity() -> None:
    """Zhi Fu leads and the Center mirrors Kun."""

    yang = deity_layout(Palace.KAN, Polarity.YANG)
    assert yang[Palace.KAN] is Deity.ZHI_FU
    assert yang[Palace.GEN] is Deity.TENG_SHE
    assert yang[Palace.QIAN] is Deity.JIU_TIAN
    assert yang[Palace.CENTER] is yang[Palace.KUN] is Deity.XUAN_WU

    yin = deity_layout(Palace.CENTER, Polarity.YIN)
    assert yin[Palace.KUN] is Deity.ZHI_FU
    assert yin[Palace.LI] is Deity.TENG_SHE
    assert {yin[p] for p in Palace if p is not Palace.CENTER} == set(Deity)
