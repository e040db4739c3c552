from __future__ import annotations

from dataclasses import replace

import pytest

from qimenengine.chinese.constants import Branch
from qimenengine.infrastructure.profiles import ProfileError
from qimenengine.qimen import Auspice, Palace, Plate
from qimenengine.shensha import (
    calculate_spirits,
    load_spirit_rules,
    month_clash,
    parse_spirit_rules,
    year_clash,
)
from tests.helpers import pillars_from_indices


def _rules(*entries: dict) -> tuple:
    return parse_spirit_rules({"spirits": list(entries)})


def test_bundled_rules_load() -> None:
    """The packaged profile defines every documented spirit."""

    names = [rule.name for rule in load_spirit_rules()]
    assert names == [
        "tian_yi_gui_ren",
        "ri_ma",
        "hua_gai",
        "yue_de",
        "lu_shen",
        "tao_hua",
        "tian_yi",
        "tai_sui",
        "yang_ren",
        "ding_ma",
    ]
    assert load_spirit_rules() is load_spirit_rules()


def test_heavenly_virtue_is_not_scored(spring_plate: Plate) -> None:
    """Tian De stays out of the bundled overlay."""

    overlay = calculate_spirits(spring_plate)
    assert "tian_de" not in {spirit.name for spirit in overlay.spirits}
    assert "天德" not in {spirit.label for spirit in overlay.spirits}


def test_overlay_score_is_weight_sum(spring_plate: Plate) -> None:
    """The aggregate equals the sum of the present spirits' weights."""

    overlay = calculate_spirits(spring_plate)
    assert overlay.spirits
    assert overlay.score == sum(spirit.weight for spirit in overlay.spirits)
    grouped = overlay.grouped()
    assert sum(len(group) for group in grouped.values()) == len(overlay.spirits)
    for spirit in overlay.favorable:
        assert spirit.auspice is Auspice.FAVORABLE


def test_branch_targets_use_branch_palaces(spring_plate: Plate) -> None:
    """Branch targets land on their fixed palace; two targets give two spirits."""

    rules = _rules(
        {
            "name": "noble",
            "keys": ["day_stem"],
            "weight": 15,
            "auspice": "favorable",
            "table": {"Wu": ["Chou", "Wei"]},
        }
    )
    overlay = calculate_spirits(spring_plate, rules)
    assert [s.palace for s in overlay.spirits] == [Palace.GEN, Palace.KUN]
    assert overlay.score == 30
    assert overlay.at(Palace.KUN)[0].name == "noble"


def test_multi_key_rule_deduplicates_targets(spring_plate: Plate) -> None:
    """Independent sub-checks report a shared target once."""

    rules = _rules(
        {
            "name": "canopy",
            "keys": ["year_branch", "day_branch"],
            "table": {"*": "Xu"},
        }
    )
    overlay = calculate_spirits(spring_plate, rules)
    assert len(overlay.spirits) == 1
    assert overlay.spirits[0].palace is Palace.QIAN
    assert overlay.neutral == overlay.spirits


def test_stem_targets_scan_the_plate(spring_plate: Plate) -> None:
    """Stems are located by scanning; a hidden Jia is never found."""

    rules = _rules(
        {
            "name": "visible",
            "keys": ["day_stem"],
            "target": "stem",
            "layer": "heaven",
            "table": {"*": "Ding"},
        },
        {
            "name": "hidden",
            "keys": ["day_stem"],
            "target": "stem",
            "table": {"*": "Jia"},
        },
        {
            "name": "mixed",
            "keys": ["month_branch"],
            "table": {"*": {"stem": "Yi"}},
        },
    )
    overlay = calculate_spirits(spring_plate, rules)
    names = [s.name for s in overlay.spirits]
    assert names == ["visible", "mixed"]
    assert spring_plate.heaven[overlay.spirits[0].palace].value == "Ding"
    assert overlay.spirits[1].palace is Palace.CENTER


def test_unmatched_keys_produce_nothing(spring_plate: Plate) -> None:
    """Rules without an entry for the key are skipped."""

    rules = _rules({"name": "none", "keys": ["day_branch"], "table": {"Zi": "Wu"}})
    assert calculate_spirits(spring_plate, rules).spirits == ()


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"spirits": [{"keys": ["day_stem"]}]},
        {"spirits": [{"name": "x", "keys": []}]},
        {"spirits": [{"name": "x", "keys": ["hour_stem"]}]},
        {"spirits": [{"name": "x", "keys": ["day_stem"], "table": {"Jia": "Moon"}}]},
    ],
)
def test_malformed_rules_raise(payload: dict) -> None:
    """Profile problems surface as ProfileError."""

    with pytest.raises(ProfileError):
        parse_spirit_rules(payload)


def test_year_and_month_clash(spring_plate: Plate) -> None:
    """A day branch opposite the year or month branch is a clash."""

    # Day Wu-Wu (54) against a Jia-Zi year (0) and a Bing-Zi month (12).
    clashing = replace(spring_plate, pillars=pillars_from_indices(0, 12, 54, 0))
    assert year_clash(clashing)
    assert month_clash(clashing)
    assert spring_plate.pillars.day.branch is Branch.YIN
    assert not year_clash(spring_plate)
