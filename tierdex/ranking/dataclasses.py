"""ABOUTME: Data classes for ranking views.
ABOUTME: Contains RankingView, ScoredEntity, RankingEntry, SkippedEntity and RankingResult."""

from dataclasses import dataclass
from enum import StrEnum

from tierdex.battle.dataclasses import Moveset
from tierdex.models import Entity


class RankingView(StrEnum):
    """The kind of ranking a result was produced for."""

    OVERALL = "overall"
    BY_TYPE = "by_type"
    COUNTERS = "counters"
    PVP = "pvp"
    CUSTOM = "custom"


@dataclass(frozen=True)
class ScoredEntity:
    """An entity with its score for one view, before ranking.

    Attributes:
        entity: The scored entity.
        score: View score (higher is better).
        best_moveset: Moveset behind the score, if any.
        best_attack_type: Attack type behind the score, if any.
        effectiveness: Type multiplier of `best_attack_type` against the view's target.
    """

    entity: Entity
    score: float
    best_moveset: Moveset | None = None
    best_attack_type: str | None = None
    effectiveness: float | None = None


@dataclass(frozen=True)
class RankingEntry:
    """One ranked entity within a view.

    Attributes:
        species_id: Entity identity.
        name: Display name.
        types: Entity types.
        rank: 1-based position; ties keep input order.
        tier: Tier label from the view's own score distribution.
        score: View score.
        percentile: 0-100, higher is better.
        family_id: Evolution family of the entity.
        lowest_dex_number: Family sort key.
        best_moveset: Moveset behind the score, if any.
        best_attack_type: Attack type behind the score, if any.
        effectiveness: Multiplier of `best_attack_type` against the target, if any.
        estimated: True if the entity's stats were defaulted.
    """

    species_id: str
    name: str
    types: tuple[str, ...]
    rank: int
    tier: str
    score: float
    percentile: int
    family_id: str
    lowest_dex_number: int
    best_moveset: Moveset | None = None
    best_attack_type: str | None = None
    effectiveness: float | None = None
    estimated: bool = False


@dataclass(frozen=True)
class SkippedEntity:
    """An entity excluded from a view, with the reason."""

    species_id: str | None
    reason: str


@dataclass(frozen=True)
class RankingResult:
    """A complete ranking view.

    Attributes:
        view: Which ranking this is.
        key: The attack or defend type for by-type/counter views, else None.
        entries: Ranked entries, best first.
        skipped: Entities excluded from the view.
        breakpoints: Jenks class lower bounds used for the tiers.
        labels: Tier labels the breakpoints map to, best first.
    """

    view: RankingView
    key: str | None = None
    entries: tuple[RankingEntry, ...] = ()
    skipped: tuple[SkippedEntity, ...] = ()
    breakpoints: tuple[float, ...] = ()
    labels: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.entries)

    def get(self, species_id: str) -> RankingEntry | None:
        """Return the entry for `species_id`, if ranked in this view."""
        return next((entry for entry in self.entries if entry.species_id == species_id), None)

    @property
    def skipped_ids(self) -> list[str | None]:
        """Ids of the entities excluded from this view."""
        return [skip.species_id for skip in self.skipped]

    def by_tier(self) -> dict[str, list[RankingEntry]]:
        """Group entries by tier label, in label order, omitting empty tiers."""
        groups: dict[str, list[RankingEntry]] = {label: [] for label in self.labels}
        for entry in self.entries:
            groups.setdefault(entry.tier, []).append(entry)
        return {label: entries for label, entries in groups.items() if entries}
