"""Auspicious-time (择日) search over rotating plates.

:class:`AuspiciousTimeSearch` walks every two-hour slot of an inclusive date
range, fetches or builds one plate per slot through an injected builder,
filters and scores it, then returns the best candidates in descending score
order. Request validation fails loudly before any plate is built; lookup gaps
inside a plate only lower the score.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from enum import StrEnum
from typing import Any, Final, Mapping

from ..config.settings import Settings, default_settings
from ..core.plate_cache import PlateCache, PlateKey
from ..qimen.builder import PlateBuilder
from ..qimen.palaces import OUTER_PALACES, Direction, Palace
from ..qimen.plate import LeapMethod, Plate, PlateKind
from ..qimen.symbols import Gate
from ..shensha import SpiritRule, calculate_spirits, month_clash, year_clash
from ..yongshen import (
    Category,
    ReferenceAnalysis,
    ReferenceProfile,
    analyze_references,
)

LOG = logging.getLogger(__name__)

SLOT_HOURS: Final[tuple[int, ...]] = tuple(range(0, 24, 2))

# Good gates in fixed reporting order (Open, Rest, Life).
_GOOD_GATE_ORDER: Final[tuple[Gate, ...]] = (Gate.OPEN, Gate.REST, Gate.LIFE)


class SearchRequestError(ValueError):
    """Raised when a search request is rejected before scanning starts."""


class BuilderNotConfiguredError(RuntimeError):
    """Raised when a search runs without a plate builder."""

    def __init__(self) -> None:
        super().__init__("plate builder callback not configured")


class Grade(StrEnum):
    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"


_RECOMMENDATIONS: Final[Mapping[Grade, str]] = {
    Grade.EXCELLENT: "highly favorable for {topic}: strong formations and well-placed references",
    Grade.GOOD: "favorable for {topic}: the overall pattern is sound",
    Grade.FAIR: "average for {topic}: usable with care",
    Grade.POOR: "unfavorable for {topic}: consider another time",
}


@dataclass(frozen=True)
class SearchRequest:
    """Parameters for one search; ``None`` fields fall back to settings."""

    start: date | str
    end: date | str
    category: Category = Category.OTHER
    limit: int | None = None
    min_score: float | None = None
    include_direction: bool = False
    exclude_solar_term_day: bool = False
    exclude_year_clash: bool = False
    exclude_month_clash: bool = False
    plate_kind: PlateKind | None = None
    leap_method: LeapMethod | None = None


@dataclass(frozen=True)
class ScoreBreakdown:
    total: int
    pattern: int
    reference: int
    spirit: int
    recommendation: str


@dataclass(frozen=True)
class GateDirection:
    gate: Gate
    palace: Palace
    direction: Direction


@dataclass(frozen=True)
class ReferenceDirection:
    name: str
    palace: Palace
    direction: Direction


@dataclass(frozen=True)
class DirectionInfo:
    good_gates: tuple[GateDirection, ...]
    references: tuple[ReferenceDirection, ...]


@dataclass(frozen=True)
class SearchResult:
    """One ranked slot together with the plate it was scored from."""

    moment: datetime
    score: ScoreBreakdown
    grade: Grade
    highlights: tuple[str, ...]
    warnings: tuple[str, ...]
    plate: Plate = field(repr=False)
    direction: DirectionInfo | None = None

    def as_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "moment": self.moment.isoformat(),
            "score": self.score.total,
            "breakdown": {
                "pattern": self.score.pattern,
                "reference": self.score.reference,
                "spirit": self.score.spirit,
            },
            "grade": self.grade.value,
            "recommendation": self.score.recommendation,
            "highlights": list(self.highlights),
            "warnings": list(self.warnings),
        }
        if self.direction is not None:
            payload["direction"] = {
                "good_gates": [
                    {"gate": g.gate.value, "palace": int(g.palace), "direction": g.direction.value}
                    for g in self.direction.good_gates
                ],
                "references": [
                    {"name": r.name, "palace": int(r.palace), "direction": r.direction.value}
                    for r in self.direction.references
                ],
            }
        return payload


@dataclass(frozen=True)
class _Window:
    start: date
    end: date
    limit: int
    min_score: float
    kind: PlateKind
    leap_method: LeapMethod

    def days(self) -> list[date]:
        span = (self.end - self.start).days
        return [self.start + timedelta(days=offset) for offset in range(span + 1)]


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _clamp(value: float, low: float = 0, high: float = 100) -> float:
    return max(low, min(high, value))


def _parse_day(raw: date | str, label: str) -> date:
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    try:
        text = str(raw).strip()
        if "T" in text or " " in text:
            return datetime.fromisoformat(text).date()
        return date.fromisoformat(text)
    except ValueError as exc:
        raise SearchRequestError(f"unparsable {label} date: {raw!r}") from exc


def grade_for(score: float, settings: Settings) -> Grade:
    scoring = settings.scoring
    if score >= scoring.excellent_threshold:
        return Grade.EXCELLENT
    if score >= scoring.good_threshold:
        return Grade.GOOD
    if score >= scoring.fair_threshold:
        return Grade.FAIR
    return Grade.POOR


def recommendation_for(grade: Grade, category: Category) -> str:
    return _RECOMMENDATIONS[grade].format(topic=category.value.replace("_", " "))


def placed_good_gates(plate: Plate) -> list[tuple[Gate, Palace]]:
    """Return good gates standing in a non-void outer palace."""

    placed: list[tuple[Gate, Palace]] = []
    for gate in _GOOD_GATE_ORDER:
        palace = plate.gate_palace_of(gate)
        if palace is not None and not plate.is_void(palace):
            placed.append((gate, palace))
    return placed


def pattern_score(plate: Plate, settings: Settings) -> int:
    """Formation score: base, plus/minus per formation, bonus for a placed good gate."""

    scoring = settings.scoring
    score = scoring.pattern_base
    score += scoring.favorable_bonus * len(plate.favorable_formations())
    score += scoring.unfavorable_penalty * len(plate.unfavorable_formations())
    if placed_good_gates(plate):
        score += scoring.good_gate_bonus
    return int(_clamp(score))


def reference_score(analysis: ReferenceAnalysis, settings: Settings) -> int:
    mean = analysis.mean_score()
    if mean is None:
        return _round_half_up(settings.scoring.default_reference_score)
    return _round_half_up(mean)


def highlights_for(plate: Plate, analysis: ReferenceAnalysis, settings: Settings) -> tuple[str, ...]:
    found = [formation.name for formation in plate.favorable_formations()]
    found += [f"{gate.value} gate in position" for gate, _ in placed_good_gates(plate)]
    for ref in analysis.references:
        if ref.score >= settings.search.strong_reference_score and not ref.void and not ref.storage:
            found.append(f"{ref.name} in good condition")
    if plate.horse_palace is not None and not plate.is_void(plate.horse_palace):
        found.append("transit horse present")
    return tuple(found[: settings.search.max_highlights])


def warnings_for(plate: Plate, settings: Settings) -> tuple[str, ...]:
    found = [formation.name for formation in plate.unfavorable_formations()]
    if plate.is_void(plate.day_stem_palace):
        found.append("day stem void")
    if plate.is_void(plate.hour_stem_palace):
        found.append("hour stem void")
    return tuple(found[: settings.search.max_warnings])


def direction_info(plate: Plate, analysis: ReferenceAnalysis) -> DirectionInfo:
    """Directions of the good gates (void or not) and the primary references."""

    gates: list[GateDirection] = []
    for gate in _GOOD_GATE_ORDER:
        for palace in OUTER_PALACES:
            if plate.gates.get(palace) is gate:
                gates.append(GateDirection(gate=gate, palace=palace, direction=palace.direction))
                break
    references = tuple(
        ReferenceDirection(name=ref.name, palace=ref.palace, direction=ref.palace.direction)
        for ref in analysis.primary
    )
    return DirectionInfo(good_gates=tuple(gates), references=references)


class AuspiciousTimeSearch:
    """Rank the two-hour slots of a date range for one inquiry category.

    The plate cache is owned by the instance; pass a shared
    :class:`PlateCache` to reuse plates across searches.
    """

    def __init__(
        self,
        builder: PlateBuilder | None = None,
        cache: PlateCache | None = None,
        settings: Settings | None = None,
        *,
        spirit_rules: Sequence[SpiritRule] | None = None,
        reference_profile: ReferenceProfile | None = None,
    ) -> None:
        self.settings = settings or default_settings()
        self.builder = builder
        self.cache = cache if cache is not None else PlateCache(self.settings.cache.capacity)
        self._spirit_rules = spirit_rules
        self._reference_profile = reference_profile

    def set_builder(self, builder: PlateBuilder) -> None:
        self.builder = builder

    def clear_cache(self) -> None:
        self.cache.clear()

    # -------------------- validation --------------------

    def _validate(self, request: SearchRequest) -> _Window:
        if self.builder is None:
            raise BuilderNotConfiguredError()
        start = _parse_day(request.start, "start")
        end = _parse_day(request.end, "end")
        if end < start:
            raise SearchRequestError("end date precedes start date")
        max_days = self.settings.search.max_range_days
        if (end - start).days + 1 > max_days:
            raise SearchRequestError(f"search range exceeds {max_days} days")
        limit = self.settings.search.default_limit if request.limit is None else request.limit
        if limit < 1:
            raise SearchRequestError("limit must be positive")
        min_score = (
            self.settings.search.default_min_score
            if request.min_score is None
            else request.min_score
        )
        if not 0 <= min_score <= 100:
            raise SearchRequestError("min_score must be within [0, 100]")
        return _Window(
            start=start,
            end=end,
            limit=limit,
            min_score=min_score,
            kind=request.plate_kind or PlateKind(self.settings.plate.kind),
            leap_method=request.leap_method or LeapMethod(self.settings.plate.leap_method),
        )

    # -------------------- scanning --------------------

    def plate_for(
        self, day: date, hour: int, kind: PlateKind, leap_method: LeapMethod
    ) -> Plate:
        """Return the cached plate for the slot, building it on a miss."""

        key: PlateKey = (day.year, day.month, day.day, hour, kind.value, leap_method.value)
        plate = self.cache.get(key)
        if plate is not None:
            LOG.debug("plate cache hit %s", key)
            return plate
        if self.builder is None:
            raise BuilderNotConfiguredError()
        LOG.debug("plate cache miss %s; building", key)
        plate = self.builder(day.year, day.month, day.day, hour, kind, leap_method)
        self.cache.put(key, plate)
        return plate

    def _rejected_by_filters(self, plate: Plate, request: SearchRequest) -> str | None:
        if request.exclude_solar_term_day and plate.solar_term_day:
            return "solar term day"
        if request.exclude_year_clash and year_clash(plate):
            return "year clash"
        if request.exclude_month_clash and month_clash(plate):
            return "month clash"
        return None

    def evaluate(self, plate: Plate, category: Category) -> tuple[ScoreBreakdown, ReferenceAnalysis]:
        """Score ``plate`` for ``category``."""

        scoring = self.settings.scoring
        analysis = analyze_references(plate, category, profile=self._reference_profile)
        overlay = calculate_spirits(plate, self._spirit_rules)
        pattern = pattern_score(plate, self.settings)
        reference = reference_score(analysis, self.settings)
        spirit = int(_clamp(scoring.spirit_base + overlay.score))
        total = _round_half_up(
            pattern * scoring.pattern_weight
            + reference * scoring.reference_weight
            + spirit * scoring.spirit_weight
        )
        total = int(_clamp(total))
        breakdown = ScoreBreakdown(
            total=total,
            pattern=pattern,
            reference=reference,
            spirit=spirit,
            recommendation=recommendation_for(grade_for(total, self.settings), category),
        )
        return breakdown, analysis

    def search(self, request: SearchRequest) -> list[SearchResult]:
        """Return at most ``limit`` results ordered by descending score."""

        window = self._validate(request)
        search_cfg = self.settings.search
        early_stop_count = search_cfg.early_stop_factor * window.limit
        LOG.info(
            "auspicious-time search %s..%s for %s",
            window.start,
            window.end,
            request.category.value,
            extra={
                "event": "search_start",
                "category": request.category.value,
                "kind": window.kind.value,
            },
        )

        results: list[SearchResult] = []
        for day in window.days():
            for hour in SLOT_HOURS:
                plate = self.plate_for(day, hour, window.kind, window.leap_method)
                reason = self._rejected_by_filters(plate, request)
                if reason is not None:
                    LOG.debug("slot %s %02d:00 dropped: %s", day, hour, reason)
                    continue
                breakdown, analysis = self.evaluate(plate, request.category)
                if breakdown.total < window.min_score:
                    continue
                results.append(
                    SearchResult(
                        moment=datetime(day.year, day.month, day.day, hour),
                        score=breakdown,
                        grade=grade_for(breakdown.total, self.settings),
                        highlights=highlights_for(plate, analysis, self.settings),
                        warnings=warnings_for(plate, self.settings),
                        plate=plate,
                        direction=direction_info(plate, analysis) if request.include_direction else None,
                    )
                )
                # remaining slots of this day only
                if (
                    len(results) >= early_stop_count
                    and results[-1].score.total >= search_cfg.early_stop_score
                ):
                    break

        results.sort(key=lambda item: item.score.total, reverse=True)
        LOG.info(
            "auspicious-time search collected %d candidates",
            len(results),
            extra={"event": "search_end", "candidates": len(results)},
        )
        return results[: window.limit]


__all__ = [
    "SLOT_HOURS",
    "SearchRequestError",
    "BuilderNotConfiguredError",
    "Grade",
    "SearchRequest",
    "ScoreBreakdown",
    "GateDirection",
    "ReferenceDirection",
    "DirectionInfo",
    "SearchResult",
    "AuspiciousTimeSearch",
    "grade_for",
    "recommendation_for",
    "placed_good_gates",
    "pattern_score",
    "reference_score",
    "highlights_for",
    "warnings_for",
    "direction_info",
]
