"""Physical rotation of palaces around the eight-palace ring.

Rotating plates ("zhuan pan") move symbols around the ring by spatial
adjacency instead of flying through the Luoshu numbers. Two walks are
provided: :func:`rotate` covers all nine palaces by inserting the Center as the
fifth slot, and :func:`ring_rotate` stays on the eight outer palaces.
"""

from __future__ import annotations

from typing import Final

from .palaces import Palace

CLOCKWISE_ORDER: Final[tuple[Palace, ...]] = (
    Palace.KAN,
    Palace.GEN,
    Palace.ZHEN,
    Palace.XUN,
    Palace.LI,
    Palace.KUN,
    Palace.DUI,
    Palace.QIAN,
)

COUNTERCLOCKWISE_ORDER: Final[tuple[Palace, ...]] = (
    Palace.KAN,
    Palace.QIAN,
    Palace.DUI,
    Palace.KUN,
    Palace.LI,
    Palace.XUN,
    Palace.ZHEN,
    Palace.GEN,
)

CENTER_SLOT: Final[int] = 4
NINE_SLOTS: Final[int] = 9


def _order(clockwise: bool) -> tuple[Palace, ...]:
    return CLOCKWISE_ORDER if clockwise else COUNTERCLOCKWISE_ORDER


def resolve_center(palace: Palace) -> Palace:
    """Return ``palace`` with the Center replaced by its borrowed palace (Kun)."""

    return palace.resolve()


def rotate(start: Palace, steps: int, clockwise: bool) -> Palace:
    """Return the palace ``steps`` slots from ``start`` on the nine-slot ring.

    The sequence starts at ``start`` and follows the physical order, with the
    Center inserted as the fifth element. ``start`` must be an outer palace and
    ``steps`` must lie in ``0..8``.
    """

    if start is Palace.CENTER:
        raise ValueError("rotation must start from an outer palace")
    if not 0 <= steps < NINE_SLOTS:
        raise ValueError(f"steps must be within 0..8, got {steps}")
    if steps == CENTER_SLOT:
        return Palace.CENTER
    order = _order(clockwise)
    offset = steps - 1 if steps > CENTER_SLOT else steps
    return order[(order.index(start) + offset) % len(order)]


def ring_rotate(start: Palace, steps: int, clockwise: bool) -> Palace:
    """Return the outer palace ``steps`` places from ``start`` around the ring.

    The Center is read as Kun and ``steps`` wraps modulo eight.
    """

    order = _order(clockwise)
    return order[(order.index(start.resolve()) + steps) % len(order)]


def rotation_sequence(start: Palace, clockwise: bool) -> tuple[Palace, ...]:
    """Return all nine palaces in :func:`rotate` order from ``start``."""

    return tuple(rotate(start, steps, clockwise) for steps in range(NINE_SLOTS))


__all__ = [
    "CLOCKWISE_ORDER",
    "COUNTERCLOCKWISE_ORDER",
    "rotate",
    "ring_rotate",
    "resolve_center",
    "rotation_sequence",
]
