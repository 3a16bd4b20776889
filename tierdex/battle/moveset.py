# ABOUTME: Exhaustive fast/charged moveset search for one entity against one defender.
# ABOUTME: Picks the pairing with the highest cycle DPS; first pairing in input order wins ties.

import logging
from collections.abc import Sequence

from tierdex.battle.dataclasses import EffectiveStats, MoveEvaluation, Moveset
from tierdex.battle.formulas import DamageModel, cycle_dps, effective_stats, per_second, total_damage_output
from tierdex.config import RankingConfig
from tierdex.errors import ValidationError
from tierdex.models import Entity, Move, MoveCategory
from tierdex.utils.type_chart import TypeEffectivenessResolver

logger = logging.getLogger(__name__)


class MovesetOptimizer:
    """Evaluates every fast x charged pairing and keeps the best.

    Args:
        config: Engine configuration (reference target, bonuses, shadow modifiers).
        resolver: Type chart resolver; built from `config.type_scale` if omitted.
        damage_model: Damage formula; built from the config multipliers if omitted.
    """

    def __init__(
        self,
        config: RankingConfig | None = None,
        resolver: TypeEffectivenessResolver | None = None,
        damage_model: DamageModel | None = None,
    ) -> None:
        self.config = config or RankingConfig()
        self.resolver = resolver or TypeEffectivenessResolver(self.config.type_scale)
        self.damage_model = damage_model or DamageModel(
            stab_multiplier=self.config.stab_multiplier,
            weather_multiplier=self.config.weather_multiplier,
        )

    def stats_for(self, entity: Entity) -> EffectiveStats:
        """Return the entity's effective stats under this configuration."""
        return effective_stats(
            entity,
            shadow_attack_multiplier=self.config.shadow_attack_multiplier,
            shadow_defense_multiplier=self.config.shadow_defense_multiplier,
        )

    def evaluate_move(
        self,
        entity: Entity,
        move: Move,
        defender_types: Sequence[str],
        stats: EffectiveStats | None = None,
    ) -> MoveEvaluation:
        """Compute damage, DPS and EPS for one move.

        Args:
            entity: The attacker.
            move: The move used.
            defender_types: Types of the target; empty for a neutral target.
            stats: Precomputed effective stats of the attacker.

        Returns:
            MoveEvaluation for the move against the reference target.
        """
        stats = stats or self.stats_for(entity)
        effectiveness = self.resolver.effectiveness(move.type, defender_types)
        is_stab = move.type in entity.types
        is_weather_boosted = move.type in self.config.weather_boosted_types
        damage = self.damage_model.damage(
            stats.attack,
            self.config.enemy_defense,
            move.power,
            effectiveness,
            is_stab=is_stab,
            is_weather_boosted=is_weather_boosted,
        )
        return MoveEvaluation(
            move_id=move.move_id,
            move_type=move.type,
            damage=damage,
            dps=per_second(damage, move.cooldown),
            eps=per_second(move.energy_amount, move.cooldown),
            effectiveness=effectiveness,
            is_stab=is_stab,
            is_weather_boosted=is_weather_boosted,
        )

    def best_moveset(
        self,
        entity: Entity,
        fast_moves: Sequence[Move],
        charged_moves: Sequence[Move],
        defender_types: Sequence[str],
    ) -> Moveset | None:
        """Find the pairing with maximum cycle DPS.

        Args:
            entity: The attacker.
            fast_moves: Candidate fast moves, in canonical order.
            charged_moves: Candidate charged moves, in canonical order.
            defender_types: Types of the target.

        Returns:
            The best Moveset, or None when either move list is empty.

        Raises:
            ValidationError: If a move is passed in the wrong list.
        """
        if not fast_moves or not charged_moves:
            return None

        for move in fast_moves:
            if move.category is not MoveCategory.FAST:
                raise ValidationError(f"'{move.move_id}' is not a fast move", entity.species_id)
        for move in charged_moves:
            if move.category is not MoveCategory.CHARGED:
                raise ValidationError(f"'{move.move_id}' is not a charged move", entity.species_id)

        stats = self.stats_for(entity)
        fast_evals = [self.evaluate_move(entity, m, defender_types, stats) for m in fast_moves]
        charged_evals = [self.evaluate_move(entity, m, defender_types, stats) for m in charged_moves]

        best: Moveset | None = None
        for fast in fast_evals:
            for charged in charged_evals:
                dps = cycle_dps(fast.dps, fast.eps, charged.dps, charged.eps)
                if best is None or dps > best.dps:
                    tdo = total_damage_output(dps, stats.stamina, stats.defense, self.config.enemy_dps)
                    best = Moveset(
                        fast_move=fast.move_id,
                        charged_move=charged.move_id,
                        dps=dps,
                        tdo=tdo,
                        fast=fast,
                        charged=charged,
                    )

        logger.debug(
            "%s vs %s: best %s/%s at %.2f DPS",
            entity.species_id,
            "/".join(defender_types) or "neutral",
            best.fast_move if best else None,
            best.charged_move if best else None,
            best.dps if best else 0.0,
        )
        return best
