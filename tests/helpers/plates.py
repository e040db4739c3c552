from __future__ import annotations

from dataclasses import replace
from typing import Any

from qimenengine.chinese.four_pillars import FourPillars, Pillar
from qimenengine.chinese.sexagenary import sexagenary_entry_for_index
from qimenengine.qimen.formations import detect_formations
from qimenengine.qimen.plate import Plate


def _pillar(index: int) -> Pillar:
    entry = sexagenary_entry_for_index(index)
    return Pillar(stem=entry.stem, branch=entry.branch, cycle_index=entry.index)


def pillars_from_indices(year: int, month: int, day: int, hour: int) -> FourPillars:
    """Return four pillars built from sixty-cycle indices."""

    return FourPillars(
        year=_pillar(year),
        month=_pillar(month),
        day=_pillar(day),
        hour=_pillar(hour),
    )


def with_layers(plate: Plate, *, redetect: bool = True, **layers: Any) -> Plate:
    """Return ``plate`` with individual palace entries overridden.

    Keyword arguments name a layer (``heaven``, ``earth``, ``gates``,
    ``stars``, ``deities``) and map palaces to replacement symbols; any other
    keyword replaces the field outright.
    """

    changes: dict[str, Any] = {}
    for name, value in layers.items():
        if name in {"heaven", "earth", "gates", "stars", "deities"}:
            changes[name] = {**getattr(plate, name), **value}
        else:
            changes[name] = value
    updated = replace(plate, **changes)
    if redetect:
        updated = replace(updated, formations=detect_formations(updated))
    return updated
