"""ABOUTME: Data classes for battle calculation results.
ABOUTME: Contains stats, move and moveset evaluations, performance and raid results, and PVP composites."""

from dataclasses import dataclass, field

# Composite score reported for entities without any league data
UNRANKED_SCORE = 0.0


@dataclass(frozen=True)
class EffectiveStats:
    """Stats after variant modifiers (e.g. shadow) have been applied.

    Attributes:
        attack: Effective attack.
        defense: Effective defense.
        stamina: Effective stamina (HP).
        estimated: True if the underlying stats were defaulted.
    """

    attack: float
    defense: float
    stamina: float
    estimated: bool = False


@dataclass(frozen=True)
class MoveEvaluation:
    """Damage and energy rates of one move against one defender.

    Attributes:
        move_id: The move's identifier.
        move_type: The move's type.
        damage: Integer damage per use.
        dps: Damage per second.
        eps: Energy per second (gain for fast moves, spend for charged moves).
        effectiveness: Type multiplier against the defender.
        is_stab: Whether STAB applied.
        is_weather_boosted: Whether the weather boost applied.
    """

    move_id: str
    move_type: str
    damage: int
    dps: float
    eps: float
    effectiveness: float
    is_stab: bool
    is_weather_boosted: bool


@dataclass(frozen=True)
class Moveset:
    """Best fast/charged pairing for one entity against one defender."""

    fast_move: str
    charged_move: str
    dps: float
    tdo: float
    fast: MoveEvaluation
    charged: MoveEvaluation


@dataclass(frozen=True)
class PerformanceResult:
    """Aggregate performance of one entity against one defending type-set.

    Attributes:
        dps: Cycle DPS of the best moveset.
        eps: Energy per second generated by the best fast move.
        dpe: Charged move damage per point of energy spent.
        tdo: Total damage output before fainting.
        edps: Effective DPS accounting for relobby time.
        best_moveset: The moveset the figures were computed from.
        estimated: True if defaulted stats were used.
    """

    dps: float
    eps: float
    dpe: float
    tdo: float
    edps: float
    best_moveset: Moveset
    estimated: bool = False


@dataclass(frozen=True)
class LeagueScore:
    """A published PVP ranking for one league."""

    rank: int
    score: float


@dataclass(frozen=True)
class PvpComposite:
    """Average PVP score across the leagues an entity is ranked in."""

    score: float = UNRANKED_SCORE
    leagues: tuple[str, ...] = ()
    best_league: str | None = None
    league_scores: dict[str, float] = field(default_factory=dict)

    @property
    def is_ranked(self) -> bool:
        """Whether at least one league contributed to the score."""
        return bool(self.leagues)


@dataclass(frozen=True)
class RaidAnalysis:
    """Performance of one entity against every single-type raid target.

    Attributes:
        species_id: The analysed entity.
        by_type: Defending type to the best-moveset result against it.
        average_dps: Mean cycle DPS over all targets.
        average_edps: Mean eDPS over all targets.
        best_type: Target type with the highest DPS; the first one wins ties.
        estimated: True if defaulted stats were used.
    """

    species_id: str
    by_type: dict[str, PerformanceResult]
    average_dps: float
    average_edps: float
    best_type: str
    estimated: bool = False
