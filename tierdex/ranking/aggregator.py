# ABOUTME: Orchestrates battle metrics, Jenks tiers and family metadata into ranking views.
# ABOUTME: Produces overall, by-type, counter and PVP rankings with rank, tier and percentile.

import hashlib
import json
import logging
import math
from collections import OrderedDict
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from tierdex.battle.dataclasses import PerformanceResult
from tierdex.battle.metrics import PerformanceMetricsEngine, pvp_composite
from tierdex.config import RankingConfig
from tierdex.errors import EmptyPopulationError, InsufficientDataError, ValidationError
from tierdex.evolution.families import EvolutionFamilyBuilder, FamilyInfo
from tierdex.models import Entity, Move
from tierdex.ranking.dataclasses import RankingEntry, RankingResult, RankingView, ScoredEntity, SkippedEntity
from tierdex.ranking.jenks import TierClassifier
from tierdex.repository import parse_entity, parse_move, resolve_moves
from tierdex.utils.type_chart import NEUTRAL_VALUE, TYPES, TypeEffectivenessResolver, normalize_type

logger = logging.getLogger(__name__)

EntityInput = Entity | Mapping[str, Any]
LeagueInput = Mapping[str, Any] | None

# A typeless reference target: every multiplier is neutral
NEUTRAL_TARGET: tuple[str, ...] = ()

UNRANKED_REASON = "unranked in every league"


def percentile_for(rank: int, count: int) -> int:
    """Percentile of a 1-based rank in a population, rounded half up.

    Args:
        rank: 1-based rank.
        count: Population size.

    Returns:
        round((1 - (rank - 1) / count) * 100), within 0-100.
    """
    if count <= 0:
        return 0
    return math.floor((1 - (rank - 1) / count) * 100 + 0.5)


def _preferred_pool(fast: list[Move], charged: list[Move], attack_type: str) -> tuple[list[Move], list[Move]]:
    """Prefer moves of `attack_type`; fall back to the full list per category."""
    typed_fast = [m for m in fast if m.type == attack_type]
    typed_charged = [m for m in charged if m.type == attack_type]
    return typed_fast or fast, typed_charged or charged


class RankingAggregator:
    """Builds ranking views over a population of entities.

    Services are injected; any left out are built from `config`. The
    aggregator keeps no state between requests other than an optional memo of
    finished views keyed by a content hash of their inputs.

    Args:
        moves: Move catalogue as Move objects or raw records (a mapping keyed by id or an iterable).
        config: Engine configuration.
        resolver: Type chart resolver.
        metrics: Performance metrics engine.
        classifier: Jenks tier classifier.
        family_builder: Evolution family builder.
    """

    def __init__(
        self,
        moves: Mapping[str, Move | Mapping[str, Any]] | Iterable[Move | Mapping[str, Any]],
        config: RankingConfig | None = None,
        resolver: TypeEffectivenessResolver | None = None,
        metrics: PerformanceMetricsEngine | None = None,
        classifier: TierClassifier | None = None,
        family_builder: EvolutionFamilyBuilder | None = None,
    ) -> None:
        self.config = config or RankingConfig()
        self.resolver = resolver or TypeEffectivenessResolver(self.config.type_scale)
        self.metrics = metrics or PerformanceMetricsEngine(self.config)
        self.classifier = classifier or TierClassifier(self.config.num_classes, self.config.tier_labels)
        self.family_builder = family_builder or EvolutionFamilyBuilder()

        records = moves.values() if isinstance(moves, Mapping) else moves
        self.moves: dict[str, Move] = {}
        for record in records:
            move = parse_move(record)
            self.moves[move.move_id] = move

        digest = hashlib.sha256()
        for move_id in sorted(self.moves):
            digest.update(self.moves[move_id].model_dump_json().encode())
        digest.update(self.config.model_dump_json().encode())
        self._base_digest = digest.hexdigest()
        self._memo: OrderedDict[tuple[str, str | None, str], RankingResult] = OrderedDict()

    # Public views

    def rank_overall(self, entities: Sequence[EntityInput]) -> RankingResult:
        """Rank entities by mean eDPS over their native types against a neutral target.

        Raises:
            EmptyPopulationError: If no entity is valid.
        """
        return self._run_view(RankingView.OVERALL, None, entities, self._score_overall)

    def rank_by_type(self, entities: Sequence[EntityInput], attack_type: str) -> RankingResult:
        """Rank the best attackers of `attack_type`.

        Only entities of that type, or with a move of that type, are ranked.
        The score is the mean eDPS against every defending type weak to
        `attack_type`, preferring moves of `attack_type`.

        Raises:
            ValidationError: If `attack_type` is unknown.
            EmptyPopulationError: If no entity is valid.
        """
        atk = normalize_type(attack_type)
        targets = [(t,) for t in self.resolver.weak_to(atk)] or [NEUTRAL_TARGET]

        def score(entity: Entity, fast: list[Move], charged: list[Move]) -> ScoredEntity | None:
            if atk not in entity.types and not any(m.type == atk for m in (*fast, *charged)):
                return None
            pool = _preferred_pool(fast, charged, atk)
            results = [self.metrics.evaluate(entity, *pool, target) for target in targets]
            best = max(results, key=lambda r: r.edps)
            return ScoredEntity(
                entity=entity,
                score=sum(r.edps for r in results) / len(results),
                best_moveset=best.best_moveset,
                best_attack_type=atk,
            )

        return self._run_view(RankingView.BY_TYPE, atk, entities, score)

    def rank_counters(self, entities: Sequence[EntityInput], defend_type: str) -> RankingResult:
        """Rank the best attackers against a defending type.

        Every attack type the entity has a move of that is super effective on
        `defend_type` is tried with its moves preferred; the one with the
        highest eDPS against the target is kept along with its multiplier.
        Entities with no super-effective move are not part of this view.

        Raises:
            ValidationError: If `defend_type` is unknown.
            EmptyPopulationError: If no entity is valid.
        """
        target = (normalize_type(defend_type),)

        def score(entity: Entity, fast: list[Move], charged: list[Move]) -> ScoredEntity | None:
            # Only types the entity has a move of
            candidates = list(dict.fromkeys(m.type for m in (*fast, *charged)))
            best: ScoredEntity | None = None
            insufficient: InsufficientDataError | None = None
            for attack_type in candidates:
                multiplier = self.resolver.effectiveness(attack_type, target)
                if multiplier <= NEUTRAL_VALUE:
                    continue
                try:
                    result = self.metrics.evaluate(entity, *_preferred_pool(fast, charged, attack_type), target)
                except InsufficientDataError as e:
                    insufficient = e
                    continue
                if best is None or result.edps > best.score:
                    best = ScoredEntity(
                        entity=entity,
                        score=result.edps,
                        best_moveset=result.best_moveset,
                        best_attack_type=attack_type,
                        effectiveness=multiplier,
                    )
            if best is None and insufficient is not None:
                raise insufficient
            return best

        return self._run_view(RankingView.COUNTERS, target[0], entities, score)

    def rank_pvp(
        self,
        entities: Sequence[EntityInput],
        league_scores: Mapping[str, LeagueInput],
    ) -> RankingResult:
        """Rank entities by composite PVP score across leagues.

        Args:
            entities: Entities to rank.
            league_scores: species_id -> {league: LeagueScore, {"rank", "score"} mapping, score or None}.

        Returns:
            The PVP view; entities unranked in every league or with malformed
            league data are skipped.

        Raises:
            EmptyPopulationError: If no entity is valid.
        """

        def score(entity: Entity, fast: list[Move], charged: list[Move]) -> ScoredEntity:
            composite = pvp_composite(league_scores.get(entity.species_id))
            if not composite.is_ranked:
                raise InsufficientDataError(entity.species_id, UNRANKED_REASON)
            return ScoredEntity(entity=entity, score=composite.score)

        league_digest = hashlib.sha256(json.dumps(league_scores, sort_keys=True, default=repr).encode()).hexdigest()
        return self._run_view(RankingView.PVP, None, entities, score, league_digest)

    def rank_all_types(self, entities: Sequence[EntityInput]) -> dict[str, RankingResult]:
        """Run `rank_by_type` for every attack type."""
        return {t: self.rank_by_type(entities, t) for t in TYPES}

    def rank_all_counters(self, entities: Sequence[EntityInput]) -> dict[str, RankingResult]:
        """Run `rank_counters` for every defending type."""
        return {t: self.rank_counters(entities, t) for t in TYPES}

    def rank_scores(
        self,
        scored: Sequence[ScoredEntity],
        view: RankingView = RankingView.CUSTOM,
        key: str | None = None,
        skipped: Sequence[SkippedEntity] = (),
        families: Mapping[str, FamilyInfo] | None = None,
    ) -> RankingResult:
        """Rank pre-scored entities and assign tiers from their own distribution.

        Args:
            scored: Entities with their view scores, in input order.
            view: View kind recorded on the result.
            key: View key recorded on the result.
            skipped: Entities already excluded from the view.
            families: Family metadata; built from `scored` if omitted.

        Returns:
            RankingResult with dense 1-based ranks, tiers and percentiles.
        """
        if families is None:
            families = self.family_builder.build([s.entity for s in scored])

        # sorted() is stable: equal scores keep input order
        ordered = sorted(scored, key=lambda s: -s.score)
        breakpoints, tiers = self.classifier.assign([s.score for s in ordered], self.config.num_classes)
        count = len(ordered)

        entries = []
        for index, (item, tier) in enumerate(zip(ordered, tiers, strict=True)):
            rank = index + 1
            info = families.get(item.entity.species_id)
            entries.append(
                RankingEntry(
                    species_id=item.entity.species_id,
                    name=item.entity.name,
                    types=item.entity.types,
                    rank=rank,
                    tier=tier,
                    score=item.score,
                    percentile=percentile_for(rank, count),
                    family_id=info.family_id if info else item.entity.species_id,
                    lowest_dex_number=info.lowest_dex_number if info else item.entity.sort_dex,
                    best_moveset=item.best_moveset,
                    best_attack_type=item.best_attack_type,
                    effectiveness=item.effectiveness,
                    estimated=item.entity.estimated,
                )
            )

        label = view.value if key is None else f"{view.value}:{key}"
        logger.info("Ranked %d entities for %s (%d skipped)", count, label, len(skipped))
        return RankingResult(
            view=view,
            key=key,
            entries=tuple(entries),
            skipped=tuple(skipped),
            breakpoints=tuple(breakpoints),
            labels=self.classifier.labels,
        )

    # Internals

    def _score_overall(self, entity: Entity, fast: list[Move], charged: list[Move]) -> ScoredEntity:
        results: list[tuple[str, PerformanceResult]] = []
        for native in entity.types:
            pool = _preferred_pool(fast, charged, native)
            results.append((native, self.metrics.evaluate(entity, *pool, NEUTRAL_TARGET)))
        best_type, best = max(results, key=lambda item: item[1].edps)
        return ScoredEntity(
            entity=entity,
            score=sum(r.edps for _, r in results) / len(results),
            best_moveset=best.best_moveset,
            best_attack_type=best_type,
        )

    def _validate(self, entities: Sequence[EntityInput]) -> tuple[list[Entity], list[SkippedEntity]]:
        if not entities:
            raise EmptyPopulationError("no entities to rank")

        valid: list[Entity] = []
        skipped: list[SkippedEntity] = []
        seen: set[str] = set()
        for record in entities:
            try:
                entity = parse_entity(record, self.config.allow_estimated_stats, self.config.default_stats)
                if entity.species_id in seen:
                    raise ValidationError("duplicate species id", entity.species_id)
            except ValidationError as e:
                logger.warning("Skipping invalid entity: %s", e)
                skipped.append(SkippedEntity(e.record_id, f"invalid: {e.reason}"))
                continue
            seen.add(entity.species_id)
            valid.append(entity)

        if not valid:
            raise EmptyPopulationError(f"none of the {len(entities)} entities are valid")
        return valid, skipped

    def _content_key(self, valid: Sequence[Entity], skipped: Sequence[SkippedEntity], extra: str = "") -> str:
        digest = hashlib.sha256(f"{self._base_digest}{extra}".encode())
        for entity in valid:
            data = entity.model_dump(mode="json")
            data["tags"] = sorted(data["tags"])
            digest.update(json.dumps(data, sort_keys=True).encode())
        for skip in skipped:
            digest.update(f"{skip.species_id}|{skip.reason}".encode())
        return digest.hexdigest()

    def _run_view(
        self,
        view: RankingView,
        key: str | None,
        entities: Sequence[EntityInput],
        score: Callable[[Entity, list[Move], list[Move]], ScoredEntity | None],
        extra_key: str = "",
    ) -> RankingResult:
        valid, skipped = self._validate(entities)

        memo_key = (view.value, key, self._content_key(valid, skipped, extra_key))
        if self.config.memoize and memo_key in self._memo:
            logger.debug("Using memoized %s ranking", view.value)
            self._memo.move_to_end(memo_key)
            return self._memo[memo_key]

        scored: list[ScoredEntity] = []
        for entity in valid:
            fast, charged = resolve_moves(entity, self.moves)
            try:
                item = score(entity, fast, charged)
            except InsufficientDataError as e:
                logger.info("Excluding %s from %s: %s", entity.species_id, view.value, e.detail)
                skipped.append(SkippedEntity(entity.species_id, e.detail))
                continue
            except ValidationError as e:
                logger.warning("Excluding %s from %s: %s", entity.species_id, view.value, e)
                skipped.append(SkippedEntity(entity.species_id, f"invalid: {e.reason}"))
                continue
            if item is not None:
                scored.append(item)

        result = self.rank_scores(scored, view, key, skipped, self.family_builder.build(valid))
        if self.config.memoize:
            self._memo[memo_key] = result
            while len(self._memo) > self.config.memo_size:
                self._memo.popitem(last=False)
        return result
