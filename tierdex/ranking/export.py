# ABOUTME: Tabular export of ranking results as polars DataFrames.
# ABOUTME: Also summarises how a view's entries are distributed over its tiers.

from typing import Any

import polars as pl

from tierdex.ranking.dataclasses import RankingResult

RANKING_SCHEMA: dict[str, Any] = {
    "rank": pl.Int64,
    "species_id": pl.String,
    "name": pl.String,
    "type1": pl.String,
    "type2": pl.String,
    "tier": pl.String,
    "score": pl.Float64,
    "percentile": pl.Int64,
    "family_id": pl.String,
    "lowest_dex_number": pl.Int64,
    "fast_move": pl.String,
    "charged_move": pl.String,
    "best_attack_type": pl.String,
    "effectiveness": pl.Float64,
    "estimated": pl.Boolean,
}


def rankings_to_frame(result: RankingResult) -> pl.DataFrame:
    """Flatten a ranking result into one row per entry.

    Args:
        result: A ranking view.

    Returns:
        DataFrame with columns:
        - rank, species_id, name, type1, type2 (null for single-typed)
        - tier, score, percentile
        - family_id, lowest_dex_number
        - fast_move, charged_move, best_attack_type, effectiveness (null when not applicable)
        - estimated
    """
    rows: list[dict[str, Any]] = []
    for entry in result.entries:
        moveset = entry.best_moveset
        rows.append(
            {
                "rank": entry.rank,
                "species_id": entry.species_id,
                "name": entry.name,
                "type1": entry.types[0],
                "type2": entry.types[1] if len(entry.types) > 1 else None,
                "tier": entry.tier,
                "score": entry.score,
                "percentile": entry.percentile,
                "family_id": entry.family_id,
                "lowest_dex_number": entry.lowest_dex_number,
                "fast_move": moveset.fast_move if moveset else None,
                "charged_move": moveset.charged_move if moveset else None,
                "best_attack_type": entry.best_attack_type,
                "effectiveness": entry.effectiveness,
                "estimated": entry.estimated,
            }
        )
    return pl.DataFrame(rows, schema=RANKING_SCHEMA)


def tier_statistics(result: RankingResult) -> dict[str, Any]:
    """Count entries per tier and average the view's scores.

    Returns:
        Dict with "tiers" (label -> count for every label, zero included, in
        label order), "total" and "average_score" (0.0 for an empty view).
    """
    df = rankings_to_frame(result)
    counts = {label: 0 for label in result.labels}
    if df.is_empty():
        return {"tiers": counts, "total": 0, "average_score": 0.0}

    grouped = df.group_by("tier").agg(pl.len().alias("count"))
    for row in grouped.iter_rows(named=True):
        counts[row["tier"]] = row["count"]

    return {
        "tiers": counts,
        "total": df.height,
        "average_score": float(df["score"].mean()),
    }
