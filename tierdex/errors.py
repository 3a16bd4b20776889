"""ABOUTME: Error taxonomy for the ranking engine.
ABOUTME: Per-entity errors are isolated by the aggregator; only EmptyPopulationError is fatal."""


class TierdexError(Exception):
    """Base class for all errors raised by tierdex."""


class ValidationError(TierdexError, ValueError):
    """Malformed or missing entity or move data.

    Attributes:
        record_id: Identifier of the offending record, if one could be read.
        reason: Human-readable description of what is wrong.
    """

    def __init__(self, reason: str, record_id: str | None = None) -> None:
        self.reason = reason
        self.record_id = record_id
        prefix = f"{record_id}: " if record_id else ""
        super().__init__(f"{prefix}{reason}")


class InsufficientDataError(TierdexError):
    """An entity has no usable fast/charged move pair for the requested view."""

    def __init__(self, species_id: str, detail: str = "no usable fast/charged move pair") -> None:
        self.species_id = species_id
        self.detail = detail
        super().__init__(f"{species_id}: {detail}")


class DegenerateDistributionError(TierdexError):
    """Every score in a distribution is identical, so no natural breaks exist."""

    def __init__(self, value: float, count: int) -> None:
        self.value = value
        self.count = count
        super().__init__(f"All {count} scores equal {value}; breakpoints collapse to a single class")


class EmptyPopulationError(TierdexError):
    """A ranking request contained no valid entities at all."""
