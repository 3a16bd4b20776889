# ABOUTME: Utils package for tierdex utility functions.
# ABOUTME: Contains the type chart and the effectiveness resolver.

from tierdex.utils.type_chart import (
    MATCHUPS,
    TYPES,
    VALID_TYPES,
    TypeChartScale,
    TypeEffectivenessResolver,
    build_effectiveness_table,
    normalize_type,
)

__all__ = [
    "MATCHUPS",
    "TYPES",
    "VALID_TYPES",
    "TypeChartScale",
    "TypeEffectivenessResolver",
    "build_effectiveness_table",
    "normalize_type",
]
