"""ABOUTME: Battle calculation package: damage formulas, moveset search and performance metrics.
ABOUTME: Re-exports the services used by the ranking aggregator."""

from tierdex.battle.dataclasses import (
    UNRANKED_SCORE,
    EffectiveStats,
    LeagueScore,
    MoveEvaluation,
    Moveset,
    PerformanceResult,
    PvpComposite,
    RaidAnalysis,
)
from tierdex.battle.formulas import (
    DamageModel,
    cycle_dps,
    effective_dps,
    effective_stats,
    per_second,
    total_damage_output,
)
from tierdex.battle.metrics import PerformanceMetricsEngine, pvp_composite
from tierdex.battle.moveset import MovesetOptimizer

__all__ = [
    "UNRANKED_SCORE",
    "DamageModel",
    "EffectiveStats",
    "LeagueScore",
    "MoveEvaluation",
    "Moveset",
    "MovesetOptimizer",
    "PerformanceMetricsEngine",
    "PerformanceResult",
    "PvpComposite",
    "RaidAnalysis",
    "cycle_dps",
    "effective_dps",
    "effective_stats",
    "per_second",
    "pvp_composite",
    "total_damage_output",
]
