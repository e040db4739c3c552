"""Auspicious-time search utilities."""

from .search import (
    AuspiciousTimeSearch,
    BuilderNotConfiguredError,
    DirectionInfo,
    Grade,
    ScoreBreakdown,
    SearchRequest,
    SearchRequestError,
    SearchResult,
)

__all__ = [
    "AuspiciousTimeSearch",
    "BuilderNotConfiguredError",
    "DirectionInfo",
    "Grade",
    "ScoreBreakdown",
    "SearchRequest",
    "SearchRequestError",
    "SearchResult",
]
