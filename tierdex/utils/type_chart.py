# ABOUTME: Pokemon type effectiveness chart (18 types) with selectable multiplier scales.
# ABOUTME: Resolves attack multipliers against single and dual-type defenders.

from collections.abc import Iterable, Sequence
from enum import StrEnum
from functools import lru_cache

from tierdex.errors import ValidationError

NEUTRAL_VALUE = 1.0

TYPES: list[str] = [
    "normal",
    "fire",
    "water",
    "electric",
    "grass",
    "ice",
    "fighting",
    "poison",
    "ground",
    "flying",
    "psychic",
    "bug",
    "rock",
    "ghost",
    "dragon",
    "dark",
    "steel",
    "fairy",
]

VALID_TYPES = frozenset(TYPES)

# Matchup categories
SUPER = "super"
RESISTED = "resisted"
IMMUNE = "immune"


class TypeChartScale(StrEnum):
    """Multiplier convention used when materialising the chart."""

    MAINLINE = "mainline"
    GO = "go"


SCALE_MULTIPLIERS: dict[TypeChartScale, dict[str, float]] = {
    TypeChartScale.MAINLINE: {SUPER: 2.0, RESISTED: 0.5, IMMUNE: 0.0},
    TypeChartScale.GO: {SUPER: 1.6, RESISTED: 0.625, IMMUNE: 0.390625},
}

# Non-neutral matchups only: MATCHUPS[attacking_type][defending_type] -> category.
# Anything absent is neutral.
MATCHUPS: dict[str, dict[str, str]] = {
    "normal": {"rock": RESISTED, "ghost": IMMUNE, "steel": RESISTED},
    "fire": {
        "fire": RESISTED,
        "water": RESISTED,
        "grass": SUPER,
        "ice": SUPER,
        "bug": SUPER,
        "rock": RESISTED,
        "dragon": RESISTED,
        "steel": SUPER,
    },
    "water": {
        "fire": SUPER,
        "water": RESISTED,
        "grass": RESISTED,
        "ground": SUPER,
        "rock": SUPER,
        "dragon": RESISTED,
    },
    "electric": {
        "water": SUPER,
        "electric": RESISTED,
        "grass": RESISTED,
        "ground": IMMUNE,
        "flying": SUPER,
        "dragon": RESISTED,
    },
    "grass": {
        "fire": RESISTED,
        "water": SUPER,
        "grass": RESISTED,
        "poison": RESISTED,
        "ground": SUPER,
        "flying": RESISTED,
        "bug": RESISTED,
        "rock": SUPER,
        "dragon": RESISTED,
        "steel": RESISTED,
    },
    "ice": {
        "fire": RESISTED,
        "water": RESISTED,
        "grass": SUPER,
        "ice": RESISTED,
        "ground": SUPER,
        "flying": SUPER,
        "dragon": SUPER,
        "steel": RESISTED,
    },
    "fighting": {
        "normal": SUPER,
        "ice": SUPER,
        "poison": RESISTED,
        "flying": RESISTED,
        "psychic": RESISTED,
        "bug": RESISTED,
        "rock": SUPER,
        "ghost": IMMUNE,
        "dark": SUPER,
        "steel": SUPER,
        "fairy": RESISTED,
    },
    "poison": {
        "grass": SUPER,
        "poison": RESISTED,
        "ground": RESISTED,
        "rock": RESISTED,
        "ghost": RESISTED,
        "steel": IMMUNE,
        "fairy": SUPER,
    },
    "ground": {
        "fire": SUPER,
        "electric": SUPER,
        "grass": RESISTED,
        "poison": SUPER,
        "flying": IMMUNE,
        "bug": RESISTED,
        "rock": SUPER,
        "steel": SUPER,
    },
    "flying": {
        "electric": RESISTED,
        "grass": SUPER,
        "fighting": SUPER,
        "bug": SUPER,
        "rock": RESISTED,
        "steel": RESISTED,
    },
    "psychic": {"fighting": SUPER, "poison": SUPER, "psychic": RESISTED, "dark": IMMUNE, "steel": RESISTED},
    "bug": {
        "fire": RESISTED,
        "grass": SUPER,
        "fighting": RESISTED,
        "poison": RESISTED,
        "flying": RESISTED,
        "psychic": SUPER,
        "ghost": RESISTED,
        "dark": SUPER,
        "steel": RESISTED,
        "fairy": RESISTED,
    },
    "rock": {
        "fire": SUPER,
        "ice": SUPER,
        "fighting": RESISTED,
        "ground": RESISTED,
        "flying": SUPER,
        "bug": SUPER,
        "steel": RESISTED,
    },
    "ghost": {"normal": IMMUNE, "psychic": SUPER, "ghost": SUPER, "dark": RESISTED},
    "dragon": {"dragon": SUPER, "steel": RESISTED, "fairy": IMMUNE},
    "dark": {"fighting": RESISTED, "psychic": SUPER, "ghost": SUPER, "dark": RESISTED, "fairy": RESISTED},
    "steel": {
        "fire": RESISTED,
        "water": RESISTED,
        "electric": RESISTED,
        "ice": SUPER,
        "rock": SUPER,
        "steel": RESISTED,
        "fairy": SUPER,
    },
    "fairy": {
        "fire": RESISTED,
        "fighting": SUPER,
        "poison": RESISTED,
        "dragon": SUPER,
        "dark": SUPER,
        "steel": RESISTED,
    },
}


def normalize_type(type_name: str) -> str:
    """Return the canonical lowercase type id.

    Args:
        type_name: Type name in any case, e.g. "Fire" or " fire ".

    Returns:
        Lowercase type id such as "fire".

    Raises:
        ValidationError: If the name is not one of the 18 types.
    """
    normalized = type_name.strip().lower()
    if normalized not in VALID_TYPES:
        raise ValidationError(f"unknown type '{type_name}'")
    return normalized


@lru_cache(maxsize=None)
def build_effectiveness_table(scale: TypeChartScale) -> dict[str, dict[str, float]]:
    """Materialise the full 18x18 chart for a scale.

    Args:
        scale: Multiplier convention.

    Returns:
        Nested dict table[attacking_type][defending_type] covering every pair.
    """
    values = SCALE_MULTIPLIERS[scale]
    return {
        atk_type: {def_type: values.get(MATCHUPS[atk_type].get(def_type, ""), NEUTRAL_VALUE) for def_type in TYPES}
        for atk_type in TYPES
    }


@lru_cache(maxsize=4096)
def _cached_effectiveness(scale: TypeChartScale, attack_type: str, defender_types: tuple[str, ...]) -> float:
    table = build_effectiveness_table(scale)
    multiplier = NEUTRAL_VALUE
    # A repeated defender type (Fire/Fire) counts once
    for def_type in dict.fromkeys(defender_types):
        multiplier *= table[attack_type].get(def_type, NEUTRAL_VALUE)
    return multiplier


class TypeEffectivenessResolver:
    """Looks up attack multipliers for one chart scale.

    The resolver holds no mutable state; results are memoised per
    (scale, attack type, defender types) at module level.
    """

    def __init__(self, scale: TypeChartScale | str = TypeChartScale.MAINLINE) -> None:
        self.scale = TypeChartScale(scale)
        self.values = SCALE_MULTIPLIERS[self.scale]

    @property
    def super_effective(self) -> float:
        """Single-type super effective multiplier on this scale."""
        return self.values[SUPER]

    def effectiveness(self, attack_type: str, defender_types: Sequence[str]) -> float:
        """Calculate the multiplier of an attack type against a defender.

        Args:
            attack_type: The attacking type (e.g. "fire").
            defender_types: Zero, one or two defending types. An empty
                sequence is a typeless reference target and yields 1.0.

        Returns:
            Product of the per-type multipliers, always >= 0.

        Raises:
            ValidationError: If any type is unknown.
        """
        atk = normalize_type(attack_type)
        defenders = tuple(normalize_type(t) for t in defender_types)
        return _cached_effectiveness(self.scale, atk, defenders)

    def weak_to(self, attack_type: str) -> list[str]:
        """Return single defending types that take more than neutral damage from `attack_type`."""
        return [def_type for def_type in TYPES if self.effectiveness(attack_type, [def_type]) > NEUTRAL_VALUE]

    def weaknesses(self, defender_types: Sequence[str]) -> list[str]:
        """Return attacking types that hit the defender for more than neutral."""
        return [atk for atk in TYPES if self.effectiveness(atk, defender_types) > NEUTRAL_VALUE]

    def resistances(self, defender_types: Sequence[str]) -> list[str]:
        """Return attacking types the defender resists, excluding immunities."""
        immune = self.values[IMMUNE]
        return [atk for atk in TYPES if immune < self.effectiveness(atk, defender_types) < NEUTRAL_VALUE]

    def immunities(self, defender_types: Sequence[str]) -> list[str]:
        """Return attacking types at or below the immunity multiplier.

        On the GO scale immunities are not absolute, so double-resisted
        matchups can fall under the single-immunity value and are reported too.
        """
        immune = self.values[IMMUNE]
        return [atk for atk in TYPES if self.effectiveness(atk, defender_types) <= immune]

    def best_attack_type(self, attack_types: Iterable[str], defender_types: Sequence[str]) -> tuple[str | None, float]:
        """Pick the attacking type with the highest multiplier.

        Args:
            attack_types: Candidate attacking types, evaluated in order.
            defender_types: The defender's types.

        Returns:
            Tuple of (best_type, multiplier); (None, 0.0) if no candidates.
            Ties keep the first candidate.
        """
        best_type: str | None = None
        best_eff = 0.0
        for atk in attack_types:
            eff = self.effectiveness(atk, defender_types)
            if best_type is None or eff > best_eff:
                best_type = atk
                best_eff = eff
        return best_type, best_eff
