from __future__ import annotations

from datetime import date

import pytest

from qimenengine.chinese.constants import Branch, Element, Stem
from qimenengine.chinese.sexagenary import sexagenary_entry_for_index, sexagenary_index
from qimenengine.chinese.solar_terms import (
    SolarTerm,
    is_solar_term_day,
    month_opening_term_for,
    solar_term_for,
)


def test_sexagenary_index_round_trip() -> None:
    """Stem/branch pairs map back to their cycle index."""

    assert sexagenary_index(Stem.JIA, Branch.ZI) == 0
    assert sexagenary_index(Stem.GUI, Branch.HAI) == 59
    assert sexagenary_entry_for_index(61).label() == "Yi-Chou"
    with pytest.raises(ValueError):
        sexagenary_index(Stem.JIA, Branch.CHOU)


@pytest.mark.parametrize(
    ("index", "leader", "voids"),
    [
        (0, Stem.WU, (Branch.XU, Branch.HAI)),
        (13, Stem.JI, (Branch.SHEN, Branch.YOU)),
        (25, Stem.GENG, (Branch.WU, Branch.WEI)),
        (30, Stem.XIN, (Branch.CHEN, Branch.SI)),
        (47, Stem.REN, (Branch.YIN, Branch.MAO)),
        (59, Stem.GUI, (Branch.ZI, Branch.CHOU)),
    ],
)
def test_decade_leader_and_void_pair(index: int, leader: Stem, voids: tuple[Branch, Branch]) -> None:
    """Each decade hides Jia under one instrument and leaves two branches void."""

    entry = sexagenary_entry_for_index(index)
    assert entry.leader_stem is leader
    assert entry.void_branches == voids
    assert entry.decade_head.stem is Stem.JIA


def test_hidden_jia_resolves_to_leader() -> None:
    """Only a Jia stem is replaced by the decade leader."""

    assert sexagenary_entry_for_index(30).resolve_stem() is Stem.XIN
    assert sexagenary_entry_for_index(31).resolve_stem() is Stem.YI


def test_element_cycles() -> None:
    """Generation and control cycles close after five steps."""

    element = Element.WOOD
    for _ in range(5):
        element = element.generates()
    assert element is Element.WOOD
    assert Element.WATER.overcomes() is Element.FIRE
    assert Branch.ZI.clash() is Branch.WU


def test_solar_term_lookup() -> None:
    """Terms start on their mean dates and carry across the new year."""

    position = solar_term_for(date(2024, 3, 15))
    assert position.term is SolarTerm.JINGZHE
    assert position.days_into_term(date(2024, 3, 15)) == 10

    winter = solar_term_for(date(2024, 1, 2))
    assert winter.term is SolarTerm.DONGZHI
    assert winter.start == date(2023, 12, 22)

    assert month_opening_term_for(date(2024, 1, 2)).term is SolarTerm.DAXUE
    assert is_solar_term_day(date(2024, 3, 6))
    assert not is_solar_term_day(date(2024, 3, 7))
