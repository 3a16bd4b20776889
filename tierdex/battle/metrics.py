# ABOUTME: Performance metrics: TDO, eDPS, per-matchup and raid-wide evaluation, and PVP composite scores.
# ABOUTME: Raises InsufficientDataError instead of reporting a zero score when no moveset exists.

import logging
import math
from collections.abc import Mapping, Sequence
from typing import Any

from tierdex.battle.dataclasses import LeagueScore, PerformanceResult, PvpComposite, RaidAnalysis
from tierdex.battle.formulas import effective_dps, total_damage_output
from tierdex.battle.moveset import MovesetOptimizer
from tierdex.config import RankingConfig
from tierdex.errors import InsufficientDataError, ValidationError
from tierdex.evolution.families import EvolutionFamily
from tierdex.models import Entity, Move
from tierdex.repository import resolve_moves
from tierdex.utils.type_chart import TYPES

logger = logging.getLogger(__name__)

PVP_SCORE_MIN = 0.0
PVP_SCORE_MAX = 100.0

# Single-type raid targets: every type but normal
RAID_TARGET_TYPES: tuple[str, ...] = tuple(t for t in TYPES if t != "normal")


class PerformanceMetricsEngine:
    """Turns moveset results into TDO/eDPS figures and PVP composites.

    Args:
        config: Engine configuration.
        optimizer: Moveset optimizer; built from the config if omitted.
    """

    def __init__(self, config: RankingConfig | None = None, optimizer: MovesetOptimizer | None = None) -> None:
        self.config = config or RankingConfig()
        self.optimizer = optimizer or MovesetOptimizer(self.config)

    def tdo(self, entity: Entity, dps: float, enemy_dps: float | None = None) -> float:
        """Total damage dealt before fainting under a reference incoming DPS.

        Args:
            entity: The attacker (effective defense and stamina are used).
            dps: The attacker's DPS.
            enemy_dps: Incoming DPS; defaults to `config.enemy_dps`.

        Returns:
            dps * hp / (enemy_dps * (200 / def)).
        """
        if dps < 0:
            raise ValidationError(f"dps must be >= 0, got {dps}", entity.species_id)
        stats = self.optimizer.stats_for(entity)
        incoming = self.config.enemy_dps if enemy_dps is None else enemy_dps
        return total_damage_output(dps, stats.stamina, stats.defense, incoming)

    def edps(self, dps: float, tdo: float) -> float:
        """Effective DPS: dps * tdo / (tdo + relobby_constant)."""
        return effective_dps(dps, tdo, self.config.relobby_constant)

    def evaluate(
        self,
        entity: Entity,
        fast_moves: Sequence[Move],
        charged_moves: Sequence[Move],
        defender_types: Sequence[str],
    ) -> PerformanceResult:
        """Evaluate an entity's best moveset against one defending type-set.

        Args:
            entity: The attacker.
            fast_moves: Candidate fast moves.
            charged_moves: Candidate charged moves.
            defender_types: Types of the target; empty for a neutral target.

        Returns:
            PerformanceResult for the best moveset.

        Raises:
            InsufficientDataError: If no fast/charged pair is available.
        """
        moveset = self.optimizer.best_moveset(entity, fast_moves, charged_moves, defender_types)
        if moveset is None:
            raise InsufficientDataError(entity.species_id)

        charged_energy = moveset.charged.eps
        dpe = moveset.charged.dps / charged_energy if charged_energy > 0 else 0.0
        return PerformanceResult(
            dps=moveset.dps,
            eps=moveset.fast.eps,
            dpe=dpe,
            tdo=moveset.tdo,
            edps=self.edps(moveset.dps, moveset.tdo),
            best_moveset=moveset,
            estimated=entity.estimated,
        )

    def raid_analysis(self, entity: Entity, fast_moves: Sequence[Move], charged_moves: Sequence[Move]) -> RaidAnalysis:
        """Evaluate an entity against every single-type raid target.

        Args:
            entity: The attacker.
            fast_moves: Candidate fast moves.
            charged_moves: Candidate charged moves.

        Returns:
            RaidAnalysis with one result per target type, the averages and the
            target type the entity performs best against.

        Raises:
            InsufficientDataError: If no fast/charged pair is available.
        """
        by_type = {t: self.evaluate(entity, fast_moves, charged_moves, (t,)) for t in RAID_TARGET_TYPES}
        results = list(by_type.values())
        return RaidAnalysis(
            species_id=entity.species_id,
            by_type=by_type,
            average_dps=sum(r.dps for r in results) / len(results),
            average_edps=sum(r.edps for r in results) / len(results),
            best_type=max(by_type, key=lambda t: by_type[t].dps),
            estimated=entity.estimated,
        )

    def family_raid_analysis(
        self,
        family: EvolutionFamily,
        entities: Sequence[Entity],
        moves: Mapping[str, Move],
    ) -> dict[str, RaidAnalysis]:
        """Run `raid_analysis` for every member of an evolution family.

        Members missing from `entities` or without a usable move pair are left
        out of the result and logged.

        Args:
            family: Family as built by EvolutionFamilyBuilder.
            entities: Entities to look members up in.
            moves: Move catalogue keyed by move id.

        Returns:
            species_id -> RaidAnalysis, in family member order.
        """
        by_id = {entity.species_id: entity for entity in entities}
        analysis: dict[str, RaidAnalysis] = {}
        for species_id in family.members:
            entity = by_id.get(species_id)
            if entity is None:
                logger.warning("Family %s member %s not found", family.family_id, species_id)
                continue
            try:
                analysis[species_id] = self.raid_analysis(entity, *resolve_moves(entity, moves))
            except InsufficientDataError as e:
                logger.info("No raid analysis for %s: %s", species_id, e.detail)
        return analysis


def _league_value(league: str, entry: Any) -> float | None:
    """Score of one league entry, or None when the entity is not ranked there.

    Accepts a LeagueScore, a ``{"rank": ..., "score": ...}`` mapping or a bare number.
    """
    if entry is None:
        return None
    if isinstance(entry, LeagueScore):
        return entry.score
    if isinstance(entry, Mapping):
        entry = entry.get("score")
        if entry is None:
            return None
    if isinstance(entry, bool):
        raise ValidationError(f"league '{league}' score must be a number, got {entry!r}")
    try:
        return float(entry)
    except (TypeError, ValueError):
        raise ValidationError(f"league '{league}' score must be a number, got {entry!r}") from None


def pvp_composite(league_scores: Mapping[str, Any] | None) -> PvpComposite:
    """Average per-league PVP scores across the leagues with data.

    Args:
        league_scores: League name to LeagueScore, ``{"rank", "score"}`` mapping,
            bare score, or None when the entity is not ranked in that league.
            None for the whole mapping means unranked everywhere.

    Returns:
        PvpComposite; unranked (score UNRANKED_SCORE, no leagues) if no league
        has data. Scores are clamped to 0-100 and NaN entries are ignored.

    Raises:
        ValidationError: If the mapping or one of its scores is malformed.
    """
    if league_scores is None:
        return PvpComposite()
    if not isinstance(league_scores, Mapping):
        raise ValidationError(f"league scores must be a mapping, got {type(league_scores).__name__}")

    clamped: dict[str, float] = {}
    for league, entry in league_scores.items():
        raw = _league_value(league, entry)
        if raw is None:
            continue
        if math.isnan(raw):
            logger.warning("Ignoring NaN PVP score for league %s", league)
            continue
        clamped[league] = max(PVP_SCORE_MIN, min(PVP_SCORE_MAX, raw))

    if not clamped:
        return PvpComposite()

    leagues = tuple(clamped)
    # First league wins ties for best league
    best_league = max(leagues, key=lambda name: clamped[name])
    return PvpComposite(
        score=sum(clamped.values()) / len(clamped),
        leagues=leagues,
        best_league=best_league,
        league_scores=clamped,
    )
