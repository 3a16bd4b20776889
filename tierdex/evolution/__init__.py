"""ABOUTME: Evolution family package.
ABOUTME: Re-exports the family builder and its lookup helpers."""

from tierdex.evolution.families import (
    EvolutionFamily,
    EvolutionFamilyBuilder,
    FamilyInfo,
    FamilyTree,
    Stage,
    Variant,
    all_families,
    base_name,
    evolution_chain,
    family_stats,
    sort_by_family,
    variants_of,
)

__all__ = [
    "EvolutionFamily",
    "EvolutionFamilyBuilder",
    "FamilyInfo",
    "FamilyTree",
    "Stage",
    "Variant",
    "all_families",
    "base_name",
    "evolution_chain",
    "family_stats",
    "sort_by_family",
    "variants_of",
]
