"""ABOUTME: Validated input schema for entities (Pokemon) and moves.
ABOUTME: Accepts game-master style camelCase keys as well as snake_case field names."""

from enum import StrEnum
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from tierdex.utils.type_chart import normalize_type

# Placeholder used by game-master exports for a missing second type
NO_TYPE = "none"

# Sort key for entities without a national dex number
UNKNOWN_DEX = 999


class MoveCategory(StrEnum):
    """Whether a move generates energy (fast) or spends it (charged)."""

    FAST = "fast"
    CHARGED = "charged"


class BaseStats(BaseModel):
    """Base attack, defense and stamina (HP) of a species."""

    model_config = ConfigDict(frozen=True)

    attack: int = Field(gt=0, validation_alias=AliasChoices("attack", "atk", "baseAttack"))
    defense: int = Field(gt=0, validation_alias=AliasChoices("defense", "def", "baseDefense"))
    stamina: int = Field(gt=0, validation_alias=AliasChoices("stamina", "hp", "baseStamina"))


class FamilyRef(BaseModel):
    """Evolution relations of one entity as provided by the data source."""

    model_config = ConfigDict(frozen=True)

    id: str | None = Field(default=None, validation_alias=AliasChoices("id", "familyId"))
    parent: str | None = None
    evolutions: tuple[str, ...] = ()


def _dedupe(values: Any) -> Any:
    if isinstance(values, (list, tuple)):
        return tuple(dict.fromkeys(values))
    return values


class Entity(BaseModel):
    """A Pokemon species or variant as consumed by the ranking engine.

    Attributes:
        species_id: Immutable identity, e.g. "charizard_shadow".
        name: Display name.
        dex: National dex number, None if unknown.
        types: One or two lowercase type ids.
        stats: Positive base stats.
        fast_moves: Fast move ids, in canonical (source) order without duplicates.
        charged_moves: Charged move ids, same ordering rules.
        family: Optional evolution relations.
        tags: Lowercase variant tags such as "shadow", "mega" or "regional".
        estimated: True when stats were defaulted at the repository boundary.
    """

    model_config = ConfigDict(frozen=True)

    species_id: str = Field(min_length=1, validation_alias=AliasChoices("species_id", "speciesId"))
    name: str = Field(default="", validation_alias=AliasChoices("name", "speciesName"))
    dex: int | None = Field(default=None, gt=0)
    types: tuple[str, ...] = Field(min_length=1, max_length=2)
    stats: BaseStats = Field(validation_alias=AliasChoices("stats", "baseStats"))
    fast_moves: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("fast_moves", "fastMoves"))
    charged_moves: tuple[str, ...] = Field(default=(), validation_alias=AliasChoices("charged_moves", "chargedMoves"))
    family: FamilyRef | None = None
    tags: frozenset[str] = frozenset()
    estimated: bool = False

    @field_validator("types", mode="before")
    @classmethod
    def _normalize_types(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple)):
            cleaned = [normalize_type(t) for t in value if isinstance(t, str) and t.strip().lower() != NO_TYPE]
            return tuple(dict.fromkeys(cleaned))
        return value

    @field_validator("fast_moves", "charged_moves", mode="before")
    @classmethod
    def _dedupe_moves(cls, value: Any) -> Any:
        return _dedupe(value)

    @field_validator("tags", mode="before")
    @classmethod
    def _lower_tags(cls, value: Any) -> Any:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(str(tag).lower() for tag in value)
        return value

    @model_validator(mode="after")
    def _default_name(self) -> "Entity":
        if not self.name:
            # Frozen model: fill the display name once during validation
            object.__setattr__(self, "name", self.species_id.replace("_", " ").title())
        return self

    @property
    def is_shadow(self) -> bool:
        """Whether this entity is a shadow variant."""
        return "shadow" in self.tags or self.species_id.endswith("_shadow")

    @property
    def sort_dex(self) -> int:
        """Dex number used for ordering; unknown sorts last."""
        return self.dex if self.dex is not None else UNKNOWN_DEX


class Move(BaseModel):
    """A fast or charged move.

    `energy` is signed: positive for energy gained by a fast move, negative for
    the cost of a charged move. `cooldown` is in milliseconds.
    """

    model_config = ConfigDict(frozen=True)

    move_id: str = Field(min_length=1, validation_alias=AliasChoices("move_id", "moveId"))
    name: str = ""
    type: str
    power: float = Field(ge=0)
    energy: float = Field(validation_alias=AliasChoices("energy", "energyDelta"))
    cooldown: float = Field(gt=0, validation_alias=AliasChoices("cooldown", "durationMs"))
    declared_category: MoveCategory | None = Field(default=None, validation_alias=AliasChoices("category"))

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return normalize_type(value)
        return value

    @model_validator(mode="after")
    def _check_category(self) -> "Move":
        if self.declared_category is None and self.energy == 0:
            raise ValueError("zero-energy move needs an explicit category")
        if not self.name:
            object.__setattr__(self, "name", self.move_id.replace("_", " ").title())
        return self

    @property
    def category(self) -> MoveCategory:
        """Declared category, else derived from the sign of `energy`."""
        if self.declared_category is not None:
            return self.declared_category
        return MoveCategory.FAST if self.energy > 0 else MoveCategory.CHARGED

    @property
    def is_fast(self) -> bool:
        """Whether this is a fast move."""
        return self.category is MoveCategory.FAST

    @property
    def energy_amount(self) -> float:
        """Magnitude of energy gained or spent per use."""
        return abs(self.energy)
