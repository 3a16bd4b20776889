# ABOUTME: Unit tests for ranking export and tier statistics.
# ABOUTME: Tests DataFrame shape, column types, empty views and per-tier counts.

from collections.abc import Callable

import polars as pl
import pytest

from tierdex.models import Entity, Move
from tierdex.ranking.aggregator import RankingAggregator
from tierdex.ranking.dataclasses import RankingResult, RankingView
from tierdex.ranking.export import RANKING_SCHEMA, rankings_to_frame, tier_statistics

EntityFactory = Callable[..., Entity]


@pytest.fixture
def result(moves: dict[str, Move], make_entity: EntityFactory) -> RankingResult:
    """Counter view against grass with a dual-type and a single-type attacker."""
    entities = [
        make_entity("charmander"),
        make_entity("charizard", ["fire", "flying"], attack=223),
        make_entity("squirtle", ["water"], fast_moves=["water_gun"], charged_moves=["hydro_pump"]),
    ]
    return RankingAggregator(moves).rank_counters(entities, "grass")


class TestRankingsToFrame:
    """Tests for rankings_to_frame function."""

    def test_columns_and_types(self, result: RankingResult) -> None:
        """The frame follows the export schema."""
        df = rankings_to_frame(result)

        assert df.columns == list(RANKING_SCHEMA)
        assert df.schema["rank"] == pl.Int64
        assert df.schema["score"] == pl.Float64
        assert df.schema["estimated"] == pl.Boolean

    def test_rows(self, result: RankingResult) -> None:
        """One row per entry, best first, with moves and matchup details."""
        df = rankings_to_frame(result)

        assert df.height == 2
        assert df["species_id"].to_list() == ["charizard", "charmander"]
        assert df["rank"].to_list() == [1, 2]
        assert df["type2"].to_list() == ["flying", None]
        assert df["fast_move"].to_list() == ["ember", "ember"]
        assert df["best_attack_type"].to_list() == ["fire", "fire"]
        assert df["effectiveness"].to_list() == [2.0, 2.0]

    def test_empty_result(self) -> None:
        """An empty view still produces a typed frame."""
        df = rankings_to_frame(RankingResult(view=RankingView.OVERALL))

        assert df.is_empty()
        assert df.schema["percentile"] == pl.Int64
        assert df.schema["type2"] == pl.String


class TestTierStatistics:
    """Tests for tier_statistics function."""

    def test_counts(self, result: RankingResult) -> None:
        """Every label is reported, including empty tiers."""
        stats = tier_statistics(result)

        assert stats["total"] == 2
        assert stats["tiers"] == {"S+": 1, "S": 1, "A": 0, "B": 0, "C": 0, "D": 0}
        assert stats["average_score"] == pytest.approx(sum(e.score for e in result.entries) / 2)

    def test_empty(self) -> None:
        """An empty view has zero counts and a zero average."""
        stats = tier_statistics(RankingResult(view=RankingView.PVP, labels=("A", "B")))

        assert stats == {"tiers": {"A": 0, "B": 0}, "total": 0, "average_score": 0.0}
