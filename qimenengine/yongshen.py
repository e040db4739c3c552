"""Target-reference (用神) resolution and scoring for inquiry categories.

Each inquiry category names a handful of references (a gate, star, stem or
spirit). They are located on a built plate, graded by season, emptiness,
storage, clash, relation to the day stem and surrounding formations, and
scored on a 0-100 scale. Descriptors that cannot be located are dropped.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from pathlib import Path
from typing import Any, Final, Mapping, Sequence

from .chinese.constants import (
    BRANCH_PUNISHMENTS,
    STORAGE_BRANCHES,
    Branch,
    Element,
    Stem,
)
from .infrastructure.profiles import ProfileError, load_profile_yaml, require_mapping
from .qimen.palaces import HORSE_BRANCHES, Palace
from .qimen.plate import Auspice, Formation, Plate
from .qimen.symbols import Deity, Gate, Star
from .shensha import StemLayer

LOG = logging.getLogger(__name__)

DEFAULT_REFERENCE_RULES: Final[str] = "reference_rules.yaml"
BASE_SCORE: Final[int] = 50


class Category(StrEnum):
    """Closed set of inquiry categories (事类)."""

    WEALTH = "wealth"
    MARRIAGE = "marriage"
    ILLNESS = "illness"
    TRAVEL = "travel"
    LAWSUIT = "lawsuit"
    EXAM = "exam"
    CAREER = "career"
    LOST_ITEM = "lost_item"
    PROPERTY = "property"
    PROMOTION = "promotion"
    PREGNANCY = "pregnancy"
    MISSING_PERSON = "missing_person"
    PARTNERSHIP = "partnership"
    OTHER = "other"


class ReferenceKind(StrEnum):
    GATE = "gate"
    STAR = "star"
    STEM = "stem"
    SPIRIT = "spirit"


class SeasonalState(StrEnum):
    """Seasonal strength (旺相休囚死), strongest first."""

    THRIVING = "thriving"
    SUPPORTED = "supported"
    RESTING = "resting"
    TRAPPED = "trapped"
    DEAD = "dead"

    @property
    def rank(self) -> int:
        return _STATE_RANKS[self]


class DayRelation(StrEnum):
    """How a reference's element relates to the day stem's element."""

    SAME = "same"
    GENERATES_DAY = "generates_day"
    OVERCOMES_DAY = "overcomes_day"
    DAY_GENERATES = "day_generates"
    DAY_OVERCOMES = "day_overcomes"


class PartyRelation(StrEnum):
    """Element relation from the host's side toward the guest."""

    SAME = "same"
    HOST_OVERCOMES = "host_overcomes"
    GUEST_OVERCOMES = "guest_overcomes"
    HOST_GENERATES = "host_generates"
    GUEST_GENERATES = "guest_generates"


class Dominance(StrEnum):
    HOST = "host"
    GUEST = "guest"
    EVEN = "even"


_STATE_RANKS: Final[Mapping[SeasonalState, int]] = {
    SeasonalState.THRIVING: 5,
    SeasonalState.SUPPORTED: 4,
    SeasonalState.RESTING: 3,
    SeasonalState.TRAPPED: 2,
    SeasonalState.DEAD: 1,
}

_SEASON_ELEMENTS: Final[Mapping[Branch, Element]] = {
    Branch.YIN: Element.WOOD,
    Branch.MAO: Element.WOOD,
    Branch.SI: Element.FIRE,
    Branch.WU: Element.FIRE,
    Branch.SHEN: Element.METAL,
    Branch.YOU: Element.METAL,
    Branch.HAI: Element.WATER,
    Branch.ZI: Element.WATER,
    Branch.CHEN: Element.EARTH,
    Branch.XU: Element.EARTH,
    Branch.CHOU: Element.EARTH,
    Branch.WEI: Element.EARTH,
}


def _season_row(ruling: Element) -> dict[Element, SeasonalState]:
    row = {
        ruling: SeasonalState.THRIVING,
        ruling.generates(): SeasonalState.SUPPORTED,
        ruling.overcomes(): SeasonalState.DEAD,
    }
    for element in Element:
        if element.generates() is ruling:
            row[element] = SeasonalState.RESTING
        elif element.overcomes() is ruling:
            row[element] = SeasonalState.TRAPPED
    return row


# Month branch × element → seasonal state.
SEASONAL_STATES: Final[Mapping[Branch, Mapping[Element, SeasonalState]]] = {
    branch: _season_row(ruling) for branch, ruling in _SEASON_ELEMENTS.items()
}

_HORSE: Final[str] = "horse"

_RELATION_PHRASES: Final[Mapping[PartyRelation, str]] = {
    PartyRelation.HOST_OVERCOMES: "host holds the initiative",
    PartyRelation.GUEST_OVERCOMES: "guest holds the initiative",
    PartyRelation.SAME: "the sides are evenly matched",
    PartyRelation.HOST_GENERATES: "host gives more than it gains",
    PartyRelation.GUEST_GENERATES: "guest supports the host",
}

_DOMINANCE_PHRASES: Final[Mapping[Dominance, str]] = {
    Dominance.HOST: "host in better condition",
    Dominance.GUEST: "guest in better condition",
    Dominance.EVEN: "both sides in similar condition",
}


@dataclass(frozen=True)
class ReferenceDescriptor:
    """Configured reference such as ``gate:Life`` or ``stem:Wu@earth``."""

    kind: ReferenceKind
    name: str
    layer: StemLayer = StemLayer.HEAVEN

    @classmethod
    def parse(cls, text: str) -> ReferenceDescriptor:
        kind, sep, rest = str(text).partition(":")
        if not sep or not rest:
            raise ProfileError(f"reference descriptor '{text}' must read kind:name")
        name, _, layer = rest.partition("@")
        try:
            return cls(
                kind=ReferenceKind(kind.strip()),
                name=name.strip(),
                layer=StemLayer(layer.strip()) if layer else StemLayer.HEAVEN,
            )
        except ValueError as exc:
            raise ProfileError(f"reference descriptor '{text}': {exc}") from exc

    def label(self) -> str:
        if self.layer is StemLayer.EARTH:
            return f"{self.name} (earth)"
        return self.name


@dataclass(frozen=True)
class CategoryRule:
    category: Category
    label: str
    primary: tuple[ReferenceDescriptor, ...]
    secondary: tuple[ReferenceDescriptor, ...]
    host_guest: bool = False


@dataclass(frozen=True)
class ReferenceWeights:
    """Additive score adjustments applied around the base score of 50."""

    state: Mapping[SeasonalState, int]
    void: int
    storage: int
    clash: int
    formation: Mapping[Auspice, int]
    relation: Mapping[DayRelation, int]


@dataclass(frozen=True)
class ReferenceProfile:
    categories: Mapping[Category, CategoryRule]
    weights: ReferenceWeights
    spirit_aliases: Mapping[str, Deity]

    def rule_for(self, category: Category) -> CategoryRule | None:
        return self.categories.get(category)

    def normalize_spirit(self, name: str) -> Deity | None:
        alias = self.spirit_aliases.get(name)
        if alias is not None:
            return alias
        try:
            return Deity(name)
        except ValueError:
            return None


@dataclass(frozen=True)
class ResolvedReference:
    """A descriptor bound to a palace with its derived condition and score."""

    descriptor: ReferenceDescriptor
    primary: bool
    palace: Palace
    element: Element
    state: SeasonalState
    void: bool
    storage: bool
    clash: bool
    day_relation: DayRelation
    formations: tuple[Formation, ...]
    score: int

    @property
    def name(self) -> str:
        return self.descriptor.label()


@dataclass(frozen=True)
class HostGuestComparison:
    """Day stem (host) versus hour stem (guest)."""

    host_palace: Palace
    guest_palace: Palace
    host_state: SeasonalState
    guest_state: SeasonalState
    relation: PartyRelation
    dominance: Dominance
    verdict: str


@dataclass(frozen=True)
class YearCommand:
    """Where the querent's birth-year stem (年命) falls on the plate."""

    stem: Stem
    palace: Palace
    state: SeasonalState
    void: bool


@dataclass(frozen=True)
class ReferenceAnalysis:
    category: Category
    references: tuple[ResolvedReference, ...]
    host_guest: HostGuestComparison | None = None
    year_command: YearCommand | None = None

    @property
    def primary(self) -> tuple[ResolvedReference, ...]:
        return tuple(ref for ref in self.references if ref.primary)

    @property
    def secondary(self) -> tuple[ResolvedReference, ...]:
        return tuple(ref for ref in self.references if not ref.primary)

    def mean_score(self) -> float | None:
        """Return the average reference score, or ``None`` when nothing resolved."""

        if not self.references:
            return None
        return sum(ref.score for ref in self.references) / len(self.references)


# -------------------- Profile loading --------------------


def _int_map(section: Mapping[str, Any], enum: type[StrEnum], label: str) -> dict[Any, int]:
    try:
        return {enum(str(key)): int(value) for key, value in section.items()}
    except (TypeError, ValueError) as exc:
        raise ProfileError(f"reference weights '{label}': {exc}") from exc


def parse_reference_profile(payload: Mapping[str, Any]) -> ReferenceProfile:
    """Validate a reference profile mapping."""

    raw_weights = require_mapping(payload, "weights")
    weights = ReferenceWeights(
        state=_int_map(require_mapping(raw_weights, "state"), SeasonalState, "state"),
        void=int(raw_weights.get("void", 0)),
        storage=int(raw_weights.get("storage", 0)),
        clash=int(raw_weights.get("clash", 0)),
        formation=_int_map(require_mapping(raw_weights, "formation"), Auspice, "formation"),
        relation=_int_map(require_mapping(raw_weights, "relation"), DayRelation, "relation"),
    )

    aliases: dict[str, Deity] = {}
    for alias, target in (payload.get("spirit_aliases") or {}).items():
        try:
            aliases[str(alias)] = Deity(str(target))
        except ValueError as exc:
            raise ProfileError(f"spirit alias '{alias}': {exc}") from exc

    categories: dict[Category, CategoryRule] = {}
    for key, entry in require_mapping(payload, "categories").items():
        try:
            category = Category(str(key))
        except ValueError as exc:
            raise ProfileError(f"unknown category '{key}'") from exc
        if not isinstance(entry, Mapping):
            raise ProfileError(f"category '{key}' must be a mapping")
        categories[category] = CategoryRule(
            category=category,
            label=str(entry.get("label", key)),
            primary=tuple(ReferenceDescriptor.parse(d) for d in entry.get("primary") or ()),
            secondary=tuple(ReferenceDescriptor.parse(d) for d in entry.get("secondary") or ()),
            host_guest=bool(entry.get("host_guest", False)),
        )
    return ReferenceProfile(categories=categories, weights=weights, spirit_aliases=aliases)


@lru_cache(maxsize=1)
def _default_reference_profile() -> ReferenceProfile:
    return parse_reference_profile(load_profile_yaml(DEFAULT_REFERENCE_RULES))


def load_reference_profile(path: str | Path | None = None) -> ReferenceProfile:
    """Return the reference profile at ``path`` or the bundled default."""

    if path is None:
        return _default_reference_profile()
    return parse_reference_profile(load_profile_yaml(path))


# -------------------- Element helpers --------------------


def seasonal_state(month_branch: Branch, element: Element) -> SeasonalState:
    return SEASONAL_STATES[month_branch][element]


def day_relation(element: Element, day_element: Element) -> DayRelation:
    """Classify ``element`` against the day stem's element."""

    if element is day_element:
        return DayRelation.SAME
    if element.generates() is day_element:
        return DayRelation.GENERATES_DAY
    if element.overcomes() is day_element:
        return DayRelation.OVERCOMES_DAY
    if day_element.generates() is element:
        return DayRelation.DAY_GENERATES
    return DayRelation.DAY_OVERCOMES


def party_relation(host: Element, guest: Element) -> PartyRelation:
    if host is guest:
        return PartyRelation.SAME
    if host.overcomes() is guest:
        return PartyRelation.HOST_OVERCOMES
    if guest.overcomes() is host:
        return PartyRelation.GUEST_OVERCOMES
    if host.generates() is guest:
        return PartyRelation.HOST_GENERATES
    return PartyRelation.GUEST_GENERATES


def is_stored(palace: Palace, element: Element) -> bool:
    return palace.anchor_branch is STORAGE_BRANCHES[element]


def is_clashed(palace: Palace, day_branch: Branch) -> bool:
    return palace.anchor_branch in BRANCH_PUNISHMENTS[day_branch]


# -------------------- Resolution --------------------


def _resolve_stem(
    plate: Plate, descriptor: ReferenceDescriptor
) -> tuple[Palace, Element] | None:
    name = descriptor.name
    if name == "day_stem":
        return plate.day_stem_palace, plate.pillars.day.stem.element
    if name == "hour_stem":
        return plate.hour_stem_palace, plate.pillars.hour.stem.element
    if name == "six_instruments":
        stem = plate.leader_stem
    else:
        try:
            stem = Stem(name)
        except ValueError:
            return None
    if descriptor.layer is StemLayer.EARTH:
        palace = plate.earth_palace_of(stem)
    else:
        palace = plate.heaven_palace_of(stem)
    if palace is None:
        return None
    return palace, stem.element


def _resolve_horse(plate: Plate) -> tuple[Palace, Element] | None:
    if plate.horse_palace is None:
        return None
    return plate.horse_palace, HORSE_BRANCHES[plate.pillars.day.branch].element


def resolve_descriptor(
    plate: Plate, descriptor: ReferenceDescriptor, profile: ReferenceProfile
) -> tuple[Palace, Element] | None:
    """Return the palace and element of ``descriptor``, or ``None``."""

    kind = descriptor.kind
    if descriptor.name == _HORSE and kind in (ReferenceKind.STEM, ReferenceKind.SPIRIT):
        return _resolve_horse(plate)
    if kind is ReferenceKind.STEM:
        return _resolve_stem(plate, descriptor)
    if kind is ReferenceKind.GATE:
        try:
            gate = Gate(descriptor.name)
        except ValueError:
            return None
        palace = plate.gate_palace_of(gate)
        return None if palace is None else (palace, gate.element)
    if kind is ReferenceKind.STAR:
        try:
            star = Star(descriptor.name)
        except ValueError:
            return None
        palace = plate.star_palace_of(star)
        return None if palace is None else (palace, star.element)
    deity = profile.normalize_spirit(descriptor.name)
    if deity is None:
        return None
    palace = plate.deity_palace_of(deity)
    return None if palace is None else (palace, deity.element)


def score_reference(
    plate: Plate,
    descriptor: ReferenceDescriptor,
    palace: Palace,
    element: Element,
    weights: ReferenceWeights,
    *,
    primary: bool = True,
) -> ResolvedReference:
    """Grade a located reference and compute its clamped score."""

    pillars = plate.pillars
    state = seasonal_state(pillars.month.branch, element)
    void = plate.is_void(palace)
    storage = is_stored(palace, element)
    clash = is_clashed(palace, pillars.day.branch)
    relation = day_relation(element, pillars.day.stem.element)
    formations = tuple(
        f for f in plate.formations if f.auspice is not Auspice.NEUTRAL and f.covers(palace)
    )

    score = BASE_SCORE + weights.state.get(state, 0) + weights.relation.get(relation, 0)
    if void:
        score += weights.void
    if storage:
        score += weights.storage
    if clash:
        score += weights.clash
    score += sum(weights.formation.get(f.auspice, 0) for f in formations)

    return ResolvedReference(
        descriptor=descriptor,
        primary=primary,
        palace=palace,
        element=element,
        state=state,
        void=void,
        storage=storage,
        clash=clash,
        day_relation=relation,
        formations=formations,
        score=max(0, min(100, score)),
    )


def compare_host_guest(plate: Plate) -> HostGuestComparison:
    """Compare the day stem (host) with the hour stem (guest)."""

    month_branch = plate.pillars.month.branch
    host_palace = plate.day_stem_palace
    guest_palace = plate.hour_stem_palace
    host_state = seasonal_state(month_branch, host_palace.element)
    guest_state = seasonal_state(month_branch, guest_palace.element)
    relation = party_relation(
        plate.pillars.day.stem.element, plate.pillars.hour.stem.element
    )
    if host_state.rank > guest_state.rank:
        dominance = Dominance.HOST
    elif host_state.rank < guest_state.rank:
        dominance = Dominance.GUEST
    else:
        dominance = Dominance.EVEN
    verdict = f"{_DOMINANCE_PHRASES[dominance]}; {_RELATION_PHRASES[relation]}"
    return HostGuestComparison(
        host_palace=host_palace,
        guest_palace=guest_palace,
        host_state=host_state,
        guest_state=guest_state,
        relation=relation,
        dominance=dominance,
        verdict=verdict,
    )


def year_command(plate: Plate, year_stem: Stem) -> YearCommand:
    """Locate ``year_stem`` on the earth plate, falling back to the day stem.

    The seasonal state is read from the palace's element.
    """

    palace = plate.earth_palace_of(year_stem) or plate.day_stem_palace
    return YearCommand(
        stem=year_stem,
        palace=palace,
        state=seasonal_state(plate.pillars.month.branch, palace.element),
        void=plate.is_void(palace),
    )


def _resolve_all(
    plate: Plate,
    descriptors: Sequence[ReferenceDescriptor],
    profile: ReferenceProfile,
    primary: bool,
) -> list[ResolvedReference]:
    resolved: list[ResolvedReference] = []
    for descriptor in descriptors:
        located = resolve_descriptor(plate, descriptor, profile)
        if located is None:
            LOG.debug("reference %s:%s not found on plate", descriptor.kind, descriptor.name)
            continue
        palace, element = located
        resolved.append(
            score_reference(plate, descriptor, palace, element, profile.weights, primary=primary)
        )
    return resolved


def analyze_references(
    plate: Plate,
    category: Category,
    *,
    year_stem: Stem | None = None,
    profile: ReferenceProfile | None = None,
) -> ReferenceAnalysis:
    """Resolve and score the category's references on ``plate``."""

    profile = profile or load_reference_profile()
    rule = profile.rule_for(category)
    if rule is None:
        LOG.debug("no reference rule configured for %s", category)
        return ReferenceAnalysis(category=category, references=())
    references = _resolve_all(plate, rule.primary, profile, True)
    references += _resolve_all(plate, rule.secondary, profile, False)
    return ReferenceAnalysis(
        category=category,
        references=tuple(references),
        host_guest=compare_host_guest(plate) if rule.host_guest else None,
        year_command=year_command(plate, year_stem) if year_stem is not None else None,
    )


__all__ = [
    "Category",
    "ReferenceKind",
    "SeasonalState",
    "DayRelation",
    "PartyRelation",
    "Dominance",
    "SEASONAL_STATES",
    "ReferenceDescriptor",
    "CategoryRule",
    "ReferenceWeights",
    "ReferenceProfile",
    "ResolvedReference",
    "HostGuestComparison",
    "YearCommand",
    "ReferenceAnalysis",
    "parse_reference_profile",
    "load_reference_profile",
    "seasonal_state",
    "day_relation",
    "party_relation",
    "is_stored",
    "is_clashed",
    "resolve_descriptor",
    "score_reference",
    "compare_host_guest",
    "year_command",
    "analyze_references",
]
