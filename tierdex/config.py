"""ABOUTME: Ranking engine configuration and its YAML loader.
ABOUTME: Every empirical constant (tiers, relobby time, reference enemy) is a named, overridable value."""

from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from tierdex.models import BaseStats
from tierdex.settings import settings
from tierdex.utils.type_chart import TypeChartScale, normalize_type

DEFAULT_TIER_LABELS: tuple[str, ...] = ("S+", "S", "A", "B", "C", "D")


class RankingConfig(BaseModel):
    """Tunable parameters for battle calculation and tier ranking.

    The DPS/TDO constants are empirically chosen defaults, not derived values.
    """

    model_config = ConfigDict(frozen=True)

    num_classes: int = Field(default=6, ge=1)
    """Number of Jenks classes (tiers) per view."""

    tier_labels: tuple[str, ...] = Field(default=DEFAULT_TIER_LABELS, min_length=1)
    """Tier labels from best to worst."""

    relobby_constant: float = Field(default=20.0, ge=0)
    """Seconds lost to fainting and rejoining a raid, used by eDPS."""

    enemy_dps: float = Field(default=15.0, gt=0)
    """Reference incoming damage per second used by TDO."""

    enemy_defense: float = Field(default=180.0, gt=0)
    """Defense stat of the reference raid target."""

    stab_multiplier: float = Field(default=1.2, gt=0)
    weather_multiplier: float = Field(default=1.2, gt=0)
    weather_boosted_types: frozenset[str] = frozenset()

    shadow_attack_multiplier: float = Field(default=1.2, gt=0)
    shadow_defense_multiplier: float = Field(default=5 / 6, gt=0)

    type_scale: TypeChartScale = TypeChartScale.MAINLINE

    allow_estimated_stats: bool = False
    """Substitute `default_stats` for records missing stats, flagging them as estimated."""

    default_stats: BaseStats = BaseStats(attack=200, defense=180, stamina=180)

    memoize: bool = True
    """Cache ranking views by content hash of their inputs."""

    memo_size: int = Field(default=128, ge=1)
    """Most ranking views kept in the memo; the least recently used is evicted first."""

    @field_validator("weather_boosted_types", mode="before")
    @classmethod
    def _normalize_weather_types(cls, value: object) -> object:
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(normalize_type(str(t)) for t in value)
        return value

    @property
    def worst_label(self) -> str:
        """Label assigned to scores below every breakpoint."""
        return self.tier_labels[-1]


def load_ranking_config(config_path: Path | None = None) -> RankingConfig:
    """Load ranking configuration from YAML file.

    Args:
        config_path: Path to the config file. Defaults to settings.ranking_config_path.

    Returns:
        Parsed RankingConfig object. An empty file yields the defaults.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        pydantic.ValidationError: If config file is invalid.
    """
    if config_path is None:
        config_path = settings.ranking_config_path

    if not config_path.exists():
        raise FileNotFoundError(f"Ranking config not found: {config_path}")

    with config_path.open() as f:
        raw_config = yaml.safe_load(f) or {}

    return RankingConfig.model_validate(raw_config)
