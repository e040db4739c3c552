"""Spirit (神煞) overlay calculated from static correspondence rules."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Mapping, Sequence

from .chinese.constants import Branch, Stem, branches_clash
from .infrastructure.profiles import ProfileError, load_profile_yaml
from .qimen.palaces import Palace, palace_for_branch
from .qimen.plate import Auspice, Plate

LOG = logging.getLogger(__name__)

DEFAULT_SPIRIT_RULES: Final[str] = "spirit_rules.yaml"
WILDCARD: Final[str] = "*"


class KeyKind(StrEnum):
    """Pillar value a spirit rule is keyed by."""

    DAY_STEM = "day_stem"
    DAY_BRANCH = "day_branch"
    MONTH_BRANCH = "month_branch"
    YEAR_BRANCH = "year_branch"


class StemLayer(StrEnum):
    HEAVEN = "heaven"
    EARTH = "earth"


Target = Branch | Stem


@dataclass(frozen=True)
class SpiritRule:
    """One correspondence rule, e.g. the noble helper keyed by day stem."""

    name: str
    label: str
    keys: tuple[KeyKind, ...]
    table: Mapping[str, tuple[Target, ...]]
    weight: int
    auspice: Auspice
    layer: StemLayer = StemLayer.EARTH
    description: str = ""

    def targets_for(self, key: str) -> tuple[Target, ...]:
        return self.table.get(key) or self.table.get(WILDCARD) or ()


@dataclass(frozen=True)
class Spirit:
    """A spirit present on the plate, anchored to a single palace."""

    name: str
    label: str
    auspice: Auspice
    palace: Palace
    weight: int
    description: str = ""


@dataclass(frozen=True)
class SpiritOverlay:
    """All spirits found on one plate."""

    spirits: tuple[Spirit, ...]

    @property
    def score(self) -> int:
        return sum(spirit.weight for spirit in self.spirits)

    def grouped(self) -> dict[Auspice, tuple[Spirit, ...]]:
        """Bucket spirits into favorable, unfavorable and neutral."""

        return {
            auspice: tuple(s for s in self.spirits if s.auspice is auspice) for auspice in Auspice
        }

    @property
    def favorable(self) -> tuple[Spirit, ...]:
        return self.grouped()[Auspice.FAVORABLE]

    @property
    def unfavorable(self) -> tuple[Spirit, ...]:
        return self.grouped()[Auspice.UNFAVORABLE]

    @property
    def neutral(self) -> tuple[Spirit, ...]:
        return self.grouped()[Auspice.NEUTRAL]

    def at(self, palace: Palace) -> tuple[Spirit, ...]:
        return tuple(s for s in self.spirits if s.palace is palace)


def _parse_target(raw: Any, default: str, rule: str) -> Target:
    kind = default
    value = raw
    if isinstance(raw, Mapping):
        if len(raw) != 1:
            raise ProfileError(f"spirit '{rule}': target mapping must hold one entry")
        kind, value = next(iter(raw.items()))
    try:
        if kind == "branch":
            return Branch(str(value))
        if kind == "stem":
            return Stem(str(value))
    except ValueError as exc:
        raise ProfileError(f"spirit '{rule}': unknown {kind} '{value}'") from exc
    raise ProfileError(f"spirit '{rule}': unknown target kind '{kind}'")


def _parse_rule(payload: Mapping[str, Any]) -> SpiritRule:
    name = str(payload.get("name") or "")
    if not name:
        raise ProfileError("spirit rule without a name")
    try:
        keys = tuple(KeyKind(str(key)) for key in payload.get("keys") or ())
        auspice = Auspice(str(payload.get("auspice", "neutral")))
        layer = StemLayer(str(payload.get("layer", "earth")))
    except ValueError as exc:
        raise ProfileError(f"spirit '{name}': {exc}") from exc
    if not keys:
        raise ProfileError(f"spirit '{name}': at least one key is required")
    default_kind = str(payload.get("target", "branch"))
    table: dict[str, tuple[Target, ...]] = {}
    for key, raw in (payload.get("table") or {}).items():
        values = raw if isinstance(raw, list) else [raw]
        table[str(key)] = tuple(_parse_target(value, default_kind, name) for value in values)
    return SpiritRule(
        name=name,
        label=str(payload.get("label", name)),
        keys=keys,
        table=table,
        weight=int(payload.get("weight", 0)),
        auspice=auspice,
        layer=layer,
        description=str(payload.get("description", "")),
    )


def parse_spirit_rules(payload: Mapping[str, Any]) -> tuple[SpiritRule, ...]:
    """Validate a spirit profile mapping into typed rules."""

    entries = payload.get("spirits")
    if not isinstance(entries, list):
        raise ProfileError("spirit profile must define a 'spirits' list")
    return tuple(_parse_rule(entry) for entry in entries)


@lru_cache(maxsize=1)
def _default_spirit_rules() -> tuple[SpiritRule, ...]:
    return parse_spirit_rules(load_profile_yaml(DEFAULT_SPIRIT_RULES))


def load_spirit_rules(path: str | Path | None = None) -> tuple[SpiritRule, ...]:
    """Return spirit rules from ``path`` or the bundled profile."""

    if path is None:
        return _default_spirit_rules()
    return parse_spirit_rules(load_profile_yaml(path))


def key_value(plate: Plate, kind: KeyKind) -> str:
    pillars = plate.pillars
    if kind is KeyKind.DAY_STEM:
        return pillars.day.stem.value
    if kind is KeyKind.DAY_BRANCH:
        return pillars.day.branch.value
    if kind is KeyKind.MONTH_BRANCH:
        return pillars.month.branch.value
    return pillars.year.branch.value


def locate_target(plate: Plate, target: Target, layer: StemLayer) -> Palace | None:
    """Return the palace of ``target``; ``None`` when a stem is not on the plate."""

    if isinstance(target, Branch):
        return palace_for_branch(target)
    if layer is StemLayer.HEAVEN:
        return plate.heaven_palace_of(target)
    return plate.earth_palace_of(target)


def calculate_spirits(plate: Plate, rules: Sequence[SpiritRule] | None = None) -> SpiritOverlay:
    """Resolve every rule against ``plate``; unresolved rules add nothing."""

    found: list[Spirit] = []
    for rule in load_spirit_rules() if rules is None else rules:
        seen: set[tuple[type, str]] = set()
        for kind in rule.keys:
            for target in rule.targets_for(key_value(plate, kind)):
                marker = (type(target), target.value)
                if marker in seen:
                    continue
                seen.add(marker)
                palace = locate_target(plate, target, rule.layer)
                if palace is None:
                    LOG.debug("spirit %s: %s not on the %s plate", rule.name, target, rule.layer)
                    continue
                found.append(
                    Spirit(
                        name=rule.name,
                        label=rule.label,
                        auspice=rule.auspice,
                        palace=palace,
                        weight=rule.weight,
                        description=rule.description,
                    )
                )
    return SpiritOverlay(spirits=tuple(found))


def year_clash(plate: Plate) -> bool:
    """Return ``True`` when the day branch clashes with the year branch (岁破)."""

    return branches_clash(plate.pillars.day.branch, plate.pillars.year.branch)


def month_clash(plate: Plate) -> bool:
    """Return ``True`` when the day branch clashes with the month branch (月破)."""

    return branches_clash(plate.pillars.day.branch, plate.pillars.month.branch)


__all__ = [
    "KeyKind",
    "StemLayer",
    "SpiritRule",
    "Spirit",
    "SpiritOverlay",
    "parse_spirit_rules",
    "load_spirit_rules",
    "calculate_spirits",
    "locate_target",
    "year_clash",
    "month_clash",
]
