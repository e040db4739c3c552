"""Four Pillars (BaZi) computation logic."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, tzinfo
from typing import Sequence

from .constants import Branch, Stem
from .sexagenary import (
    SexagenaryCycleEntry,
    day_cycle_index,
    hour_cycle_index,
    month_cycle_index,
    sexagenary_entry_for_index,
    year_cycle_index,
)


@dataclass(frozen=True)
class Pillar:
    """A single pillar made up of a Heavenly Stem and Earthly Branch."""

    stem: Stem
    branch: Branch
    cycle_index: int

    def label(self) -> str:
        return self.entry.label()

    @property
    def entry(self) -> SexagenaryCycleEntry:
        return sexagenary_entry_for_index(self.cycle_index)


@dataclass(frozen=True)
class FourPillars:
    """Container for the year, month, day, and hour pillars."""

    year: Pillar
    month: Pillar
    day: Pillar
    hour: Pillar

    def ordered_pillars(self) -> Sequence[Pillar]:
        return (self.year, self.month, self.day, self.hour)


def _build_pillar(index: int) -> Pillar:
    entry = sexagenary_entry_for_index(index)
    return Pillar(stem=entry.stem, branch=entry.branch, cycle_index=entry.index)


def _local_wall_time(moment: datetime, tz: tzinfo | None) -> datetime:
    if moment.tzinfo is None:
        return moment
    if tz is not None:
        moment = moment.astimezone(tz)
    return moment.replace(tzinfo=None)


def compute_four_pillars(moment: datetime, *, timezone: tzinfo | None = None) -> FourPillars:
    """Compute the Four Pillars for ``moment``.

    Parameters
    ----------
    moment:
        Datetime representing the event. Naive datetimes are read as local
        civil time; aware datetimes use their own wall clock.
    timezone:
        Override timezone used to read an aware ``moment``. Ignored for naive
        inputs.
    """

    local = _local_wall_time(moment, timezone)
    return FourPillars(
        year=_build_pillar(year_cycle_index(local)),
        month=_build_pillar(month_cycle_index(local)),
        day=_build_pillar(day_cycle_index(local)),
        hour=_build_pillar(hour_cycle_index(local)),
    )


__all__ = ["Pillar", "FourPillars", "compute_four_pillars"]
