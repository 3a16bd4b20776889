# ABOUTME: Battle formulas: per-move damage, per-second rates, cycle DPS, TDO and eDPS.
# ABOUTME: damage = floor(0.5 * power * atk / def) + 1, then STAB, weather and type multipliers.

import math

from tierdex.battle.dataclasses import EffectiveStats
from tierdex.errors import ValidationError
from tierdex.models import Entity

MS_PER_SECOND = 1000.0
DEFAULT_STAB_MULTIPLIER = 1.2
DEFAULT_WEATHER_MULTIPLIER = 1.2


class DamageModel:
    """Computes integer damage for a single move use.

    Args:
        stab_multiplier: Bonus for a move matching one of the user's types.
        weather_multiplier: Bonus for a move boosted by the current weather.
    """

    def __init__(
        self,
        stab_multiplier: float = DEFAULT_STAB_MULTIPLIER,
        weather_multiplier: float = DEFAULT_WEATHER_MULTIPLIER,
    ) -> None:
        self.stab_multiplier = stab_multiplier
        self.weather_multiplier = weather_multiplier

    def damage(
        self,
        attack_stat: float,
        defense_stat: float,
        power: float,
        effectiveness: float,
        is_stab: bool = False,
        is_weather_boosted: bool = False,
    ) -> int:
        """Calculate damage dealt by one use of a move.

        Args:
            attack_stat: Attacker's (effective) attack.
            defense_stat: Defender's (effective) defense.
            power: Move power; 0 means the move deals no damage.
            effectiveness: Type multiplier from the type chart.
            is_stab: Whether STAB applies.
            is_weather_boosted: Whether the weather boost applies.

        Returns:
            Damage as an integer; at least 1 for positive power and non-zero effectiveness.

        Raises:
            ValidationError: If a stat is not positive or a multiplier is negative.
        """
        if attack_stat <= 0 or defense_stat <= 0:
            raise ValidationError(f"stats must be positive (attack={attack_stat}, defense={defense_stat})")
        if power < 0 or effectiveness < 0:
            raise ValidationError(f"power and effectiveness must be >= 0 (power={power}, eff={effectiveness})")
        if power == 0:
            return 0

        damage = math.floor(0.5 * power * attack_stat / defense_stat) + 1.0
        if is_stab:
            damage *= self.stab_multiplier
        if is_weather_boosted:
            damage *= self.weather_multiplier
        damage *= effectiveness
        return math.floor(damage)


def per_second(amount: float, cooldown_ms: float) -> float:
    """Convert a per-use amount (damage or energy) into a per-second rate.

    Raises:
        ValidationError: If the cooldown is not positive.
    """
    if cooldown_ms <= 0:
        raise ValidationError(f"cooldown must be positive, got {cooldown_ms}")
    return amount / (cooldown_ms / MS_PER_SECOND)


def cycle_dps(fast_dps: float, fast_eps: float, charged_dps: float, charged_eps: float) -> float:
    """Blend fast and charged move DPS over a full energy cycle.

    cycle = (fDPS * cEPS + cDPS * fEPS) / (cEPS + fEPS). When either energy
    rate is zero the charged move can never be used, so the fast move's DPS
    is returned unchanged.
    """
    if fast_eps == 0 or charged_eps == 0:
        return fast_dps
    return (fast_dps * charged_eps + charged_dps * fast_eps) / (charged_eps + fast_eps)


def total_damage_output(dps: float, stamina: float, defense: float, enemy_dps: float) -> float:
    """Damage dealt before fainting: dps * hp / (enemy_dps * (200 / def)).

    Raises:
        ValidationError: If stamina, defense or enemy_dps is not positive.
    """
    if stamina <= 0 or defense <= 0:
        raise ValidationError(f"stats must be positive (stamina={stamina}, defense={defense})")
    if enemy_dps <= 0:
        raise ValidationError(f"enemy_dps must be positive, got {enemy_dps}")
    time_to_faint = stamina / (enemy_dps * (200.0 / defense))
    return dps * time_to_faint


def effective_dps(dps: float, tdo: float, relobby_constant: float) -> float:
    """Weight DPS by the share of time spent fighting rather than relobbying.

    eDPS = dps * tdo / (tdo + relobby). A zero TDO gives zero eDPS.
    """
    denominator = tdo + relobby_constant
    if denominator <= 0:
        return 0.0
    return dps * (tdo / denominator)


def effective_stats(
    entity: Entity,
    shadow_attack_multiplier: float = 1.2,
    shadow_defense_multiplier: float = 5 / 6,
) -> EffectiveStats:
    """Apply variant modifiers to an entity's base stats.

    Shadow entities hit harder and take more damage; every other entity
    keeps its base stats.
    """
    attack = float(entity.stats.attack)
    defense = float(entity.stats.defense)
    if entity.is_shadow:
        attack *= shadow_attack_multiplier
        defense *= shadow_defense_multiplier
    return EffectiveStats(
        attack=attack,
        defense=defense,
        stamina=float(entity.stats.stamina),
        estimated=entity.estimated,
    )
