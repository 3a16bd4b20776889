"""ABOUTME: Ranking package: Jenks tiers, view aggregation and tabular export.
ABOUTME: Re-exports the public ranking API."""

from tierdex.ranking.aggregator import RankingAggregator, percentile_for
from tierdex.ranking.dataclasses import RankingEntry, RankingResult, RankingView, ScoredEntity, SkippedEntity
from tierdex.ranking.export import RANKING_SCHEMA, rankings_to_frame, tier_statistics
from tierdex.ranking.jenks import TierClassifier

__all__ = [
    "RANKING_SCHEMA",
    "RankingAggregator",
    "RankingEntry",
    "RankingResult",
    "RankingView",
    "ScoredEntity",
    "SkippedEntity",
    "TierClassifier",
    "percentile_for",
    "rankings_to_frame",
    "tier_statistics",
]
