from __future__ import annotations

from datetime import date, datetime

import pytest

from qimenengine.config import Settings, default_settings
from qimenengine.core import PlateCache
from qimenengine.electional import (
    AuspiciousTimeSearch,
    BuilderNotConfiguredError,
    Grade,
    SearchRequest,
    SearchRequestError,
)
from qimenengine.electional.search import grade_for, placed_good_gates
from qimenengine.qimen import LeapMethod, Plate, PlateKind, build_plate
from qimenengine.qimen.symbols import Gate
from qimenengine.shensha import month_clash, year_clash
from qimenengine.yongshen import Category


class CountingBuilder:
    """Plate builder that records every slot it is asked for."""

    def __init__(self) -> None:
        self.calls: list[tuple[int, int, int, int]] = []

    def __call__(
        self, year: int, month: int, day: int, hour: int, kind: PlateKind, leap_method: LeapMethod
    ) -> Plate:
        self.calls.append((year, month, day, hour))
        return build_plate(year, month, day, hour, kind, leap_method)


@pytest.fixture
def builder() -> CountingBuilder:
    return CountingBuilder()


def _summary(results) -> list[tuple[datetime, int]]:
    return [(item.moment, item.score.total) for item in results]


def test_missing_builder_raises() -> None:
    search = AuspiciousTimeSearch()
    with pytest.raises(BuilderNotConfiguredError, match="plate builder callback not configured"):
        search.search(SearchRequest("2024-03-01", "2024-03-01"))


@pytest.mark.parametrize(
    "request_",
    [
        SearchRequest("2024-13-01", "2024-03-02"),
        SearchRequest("2024-03-01", "not a date"),
        SearchRequest("2024-03-02", "2024-03-01"),
        SearchRequest(date(2024, 1, 1), date(2024, 12, 31)),
        SearchRequest("2024-03-01", "2024-03-02", limit=0),
        SearchRequest("2024-03-01", "2024-03-02", min_score=101),
        SearchRequest("2024-03-01", "2024-03-02", min_score=-1),
    ],
)
def test_invalid_requests_fail_before_building(
    builder: CountingBuilder, request_: SearchRequest
) -> None:
    """Rejected requests never reach the plate builder."""

    search = AuspiciousTimeSearch(builder)
    with pytest.raises(SearchRequestError):
        search.search(request_)
    assert builder.calls == []
    assert len(search.cache) == 0


def test_full_year_is_accepted(builder: CountingBuilder) -> None:
    """A 365-day inclusive span is the largest accepted range."""

    search = AuspiciousTimeSearch(builder)
    window = search._validate(SearchRequest("2023-01-01", "2023-12-31"))
    assert len(window.days()) == 365


def test_results_are_ranked_and_bounded(builder: CountingBuilder) -> None:
    """Results are sorted by score, capped by limit and above min_score."""

    search = AuspiciousTimeSearch(builder)
    results = search.search(
        SearchRequest("2024-03-10", "2024-03-12", category=Category.WEALTH, limit=5, min_score=0)
    )
    assert len(results) == 5
    totals = [item.score.total for item in results]
    assert totals == sorted(totals, reverse=True)
    for item in results:
        assert 0 <= item.score.total <= 100
        assert item.grade is grade_for(item.score.total, search.settings)
        assert item.moment.hour % 2 == 0
        assert "wealth" in item.score.recommendation
        assert item.direction is None


def test_min_score_filters_candidates(builder: CountingBuilder) -> None:
    search = AuspiciousTimeSearch(builder)
    everything = search.search(SearchRequest("2024-03-10", "2024-03-10", limit=12, min_score=0))
    threshold = everything[len(everything) // 2].score.total
    kept = search.search(
        SearchRequest("2024-03-10", "2024-03-10", limit=12, min_score=threshold)
    )
    assert kept
    assert all(item.score.total >= threshold for item in kept)
    assert len(kept) == sum(1 for item in everything if item.score.total >= threshold)


def test_warm_cache_returns_identical_results(builder: CountingBuilder) -> None:
    """Cached plates score exactly like freshly built ones."""

    request = SearchRequest("2024-05-02", "2024-05-03", limit=24, min_score=0)
    cold = AuspiciousTimeSearch(CountingBuilder()).search(request)

    warm = AuspiciousTimeSearch(builder, PlateCache(100))
    warm.search(SearchRequest("2024-05-01", "2024-05-04", limit=48, min_score=0))
    built = len(builder.calls)
    assert built == 48
    assert _summary(warm.search(request)) == _summary(cold)
    assert len(builder.calls) == built

    warm.clear_cache()
    assert len(warm.cache) == 0


def test_cache_key_includes_plate_kind(builder: CountingBuilder) -> None:
    search = AuspiciousTimeSearch(builder)
    search.search(SearchRequest("2024-05-01", "2024-05-01", min_score=0))
    search.search(
        SearchRequest("2024-05-01", "2024-05-01", min_score=0, plate_kind=PlateKind.DAY)
    )
    assert len(builder.calls) == 24
    assert len(search.cache) == 24


def test_solar_term_day_filter(builder: CountingBuilder) -> None:
    """The term-day filter drops every slot of the term's first day."""

    search = AuspiciousTimeSearch(builder)
    span = SearchRequest("2024-03-01", "2024-03-10", limit=120, min_score=0)
    unfiltered = search.search(span)
    term_slots = [item for item in unfiltered if item.plate.solar_term_day]
    assert len(term_slots) == 12

    filtered = search.search(
        SearchRequest("2024-03-01", "2024-03-10", limit=120, min_score=0, exclude_solar_term_day=True)
    )
    assert len(filtered) == 108
    assert not any(item.plate.solar_term_day for item in filtered)


def test_clash_filters(builder: CountingBuilder) -> None:
    search = AuspiciousTimeSearch(builder)
    results = search.search(
        SearchRequest(
            "2024-03-01",
            "2024-03-31",
            limit=400,
            min_score=0,
            exclude_year_clash=True,
            exclude_month_clash=True,
        )
    )
    assert results
    assert not any(year_clash(item.plate) or month_clash(item.plate) for item in results)
    assert len(results) < 31 * 12


def test_early_stop_only_ends_the_current_day(builder: CountingBuilder) -> None:
    """Once enough strong results exist each remaining day stops after one slot."""

    settings = Settings(search={"early_stop_score": 0, "early_stop_factor": 1})
    search = AuspiciousTimeSearch(builder, settings=settings)
    results = search.search(SearchRequest("2024-06-01", "2024-06-03", limit=1, min_score=0))
    assert len(results) == 1
    assert [call[3] for call in builder.calls] == [0, 0, 0]


def test_include_direction(builder: CountingBuilder) -> None:
    search = AuspiciousTimeSearch(builder)
    results = search.search(
        SearchRequest(
            "2024-03-15",
            "2024-03-15",
            category=Category.TRAVEL,
            limit=3,
            min_score=0,
            include_direction=True,
        )
    )
    assert results
    for item in results:
        direction = item.direction
        assert direction is not None
        assert [g.gate for g in direction.good_gates] == [Gate.OPEN, Gate.REST, Gate.LIFE]
        for entry in direction.good_gates:
            assert item.plate.gates[entry.palace] is entry.gate
            assert entry.direction is entry.palace.direction
        payload = item.as_dict()
        assert payload["direction"]["good_gates"][0]["gate"] == "Open"
        assert payload["moment"] == item.moment.isoformat()
        assert payload["grade"] == item.grade.value


def test_evaluate_combines_weighted_scores(spring_plate: Plate) -> None:
    """The composite is the rounded weighted sum of the three sub-scores."""

    settings = default_settings()
    search = AuspiciousTimeSearch(build_plate, settings=settings)
    breakdown, analysis = search.evaluate(spring_plate, Category.EXAM)
    scoring = settings.scoring
    raw = (
        breakdown.pattern * scoring.pattern_weight
        + breakdown.reference * scoring.reference_weight
        + breakdown.spirit * scoring.spirit_weight
    )
    assert abs(breakdown.total - raw) <= 0.5
    assert analysis.category is Category.EXAM
    expected_pattern = (
        scoring.pattern_base
        + scoring.favorable_bonus * len(spring_plate.favorable_formations())
        + scoring.unfavorable_penalty * len(spring_plate.unfavorable_formations())
        + (scoring.good_gate_bonus if placed_good_gates(spring_plate) else 0)
    )
    assert breakdown.pattern == max(0, min(100, expected_pattern))


@pytest.mark.parametrize(
    ("score", "grade"),
    [(100, Grade.EXCELLENT), (80, Grade.EXCELLENT), (79, Grade.GOOD), (65, Grade.GOOD), (50, Grade.FAIR), (49, Grade.POOR)],
)
def test_grade_thresholds(score: int, grade: Grade) -> None:
    assert grade_for(score, default_settings()) is grade
