"""ABOUTME: Repository boundary turning raw entity and move records into validated models.
ABOUTME: Rejects records with missing or invalid stats unless default substitution is enabled."""

import json
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pydantic

from tierdex.config import RankingConfig
from tierdex.errors import ValidationError
from tierdex.models import BaseStats, Entity, Move, MoveCategory

logger = logging.getLogger(__name__)

_STAT_KEYS = ("stats", "baseStats")
_STAT_FIELDS: dict[str, tuple[str, ...]] = {
    "attack": ("attack", "atk", "baseAttack"),
    "defense": ("defense", "def", "baseDefense"),
    "stamina": ("stamina", "hp", "baseStamina"),
}


@dataclass(frozen=True)
class RejectedRecord:
    """A raw record that failed validation."""

    record_id: str | None
    reason: str


def _record_id(record: Any, *keys: str) -> str | None:
    if isinstance(record, Mapping):
        for key in keys:
            value = record.get(key)
            if isinstance(value, str) and value:
                return value
    return None


def _describe(exc: pydantic.ValidationError) -> str:
    return "; ".join(f"{'.'.join(str(part) for part in err['loc']) or 'record'}: {err['msg']}" for err in exc.errors())


def _fill_missing_stats(record: Mapping[str, Any], defaults: BaseStats) -> dict[str, Any] | None:
    """Return a copy of `record` with missing stats defaulted, or None if nothing was missing."""
    stats_key = next((key for key in _STAT_KEYS if key in record), None)
    raw_stats = record.get(stats_key) if stats_key else None
    if raw_stats is not None and not isinstance(raw_stats, Mapping):
        return None

    raw_stats = dict(raw_stats or {})
    filled = False
    for name, aliases in _STAT_FIELDS.items():
        if all(raw_stats.get(alias) is None for alias in aliases):
            raw_stats[name] = getattr(defaults, name)
            filled = True
    if not filled:
        return None

    patched = {key: value for key, value in record.items() if key not in _STAT_KEYS}
    patched["stats"] = raw_stats
    patched["estimated"] = True
    return patched


def parse_entity(
    record: Entity | Mapping[str, Any],
    allow_estimated_stats: bool = False,
    default_stats: BaseStats | None = None,
) -> Entity:
    """Validate one raw entity record.

    Args:
        record: Raw mapping (game-master style or snake_case) or an Entity.
        allow_estimated_stats: Substitute `default_stats` for missing stats and
            flag the entity as estimated instead of rejecting it.
        default_stats: Stats used for substitution.

    Returns:
        The validated Entity.

    Raises:
        ValidationError: If the record is malformed or has missing/non-positive stats.
    """
    if isinstance(record, Entity):
        return record
    record_id = _record_id(record, "speciesId", "species_id")
    if not isinstance(record, Mapping):
        raise ValidationError(f"expected a mapping, got {type(record).__name__}", record_id)

    if allow_estimated_stats:
        patched = _fill_missing_stats(record, default_stats or RankingConfig().default_stats)
        if patched is not None:
            logger.info("Using estimated stats for %s", record_id)
            record = patched

    try:
        return Entity.model_validate(record)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc), record_id) from None


def parse_move(record: Move | Mapping[str, Any]) -> Move:
    """Validate one raw move record.

    Raises:
        ValidationError: If the record is malformed.
    """
    if isinstance(record, Move):
        return record
    record_id = _record_id(record, "moveId", "move_id")
    if not isinstance(record, Mapping):
        raise ValidationError(f"expected a mapping, got {type(record).__name__}", record_id)
    try:
        return Move.model_validate(record)
    except pydantic.ValidationError as exc:
        raise ValidationError(_describe(exc), record_id) from None


def resolve_moves(entity: Entity, moves: Mapping[str, Move]) -> tuple[list[Move], list[Move]]:
    """Look up an entity's fast and charged moves in a move catalogue.

    Unknown ids and moves listed under the wrong category are dropped, so the
    returned lists keep the entity's canonical order minus unusable entries.

    Args:
        entity: The entity whose move ids are resolved.
        moves: Catalogue keyed by move id.

    Returns:
        Tuple of (fast_moves, charged_moves).
    """
    resolved: dict[MoveCategory, list[Move]] = {MoveCategory.FAST: [], MoveCategory.CHARGED: []}
    for category, move_ids in ((MoveCategory.FAST, entity.fast_moves), (MoveCategory.CHARGED, entity.charged_moves)):
        for move_id in move_ids:
            move = moves.get(move_id)
            if move is None:
                logger.debug("%s: unknown move '%s' skipped", entity.species_id, move_id)
                continue
            if move.category is not category:
                logger.warning("%s: '%s' is not a %s move, skipped", entity.species_id, move_id, category.value)
                continue
            resolved[category].append(move)
    return resolved[MoveCategory.FAST], resolved[MoveCategory.CHARGED]


def _iter_records(raw: Any) -> Iterable[Any]:
    """Accept either a list of records or a mapping of id -> record."""
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return list(raw.values())
    if isinstance(raw, list):
        return raw
    raise ValidationError(f"expected a list or mapping of records, got {type(raw).__name__}")


@dataclass
class EntityRepository:
    """In-memory snapshot of validated entities and moves.

    Attributes:
        entities: Valid entities in source order.
        moves: Move catalogue keyed by move id.
        rejected: Records that failed validation, with reasons.
    """

    entities: list[Entity] = field(default_factory=list)
    moves: dict[str, Move] = field(default_factory=dict)
    rejected: list[RejectedRecord] = field(default_factory=list)

    @classmethod
    def from_records(
        cls,
        entity_records: Iterable[Any],
        move_records: Iterable[Any],
        config: RankingConfig | None = None,
    ) -> "EntityRepository":
        """Validate raw records, keeping the valid ones and reporting the rest.

        Args:
            entity_records: Raw entity records.
            move_records: Raw move records.
            config: Controls estimated-stat substitution.

        Returns:
            A repository holding the valid entities and moves.
        """
        config = config or RankingConfig()
        repo = cls()

        for record in move_records:
            try:
                move = parse_move(record)
            except ValidationError as e:
                logger.warning("Rejected move record: %s", e)
                repo.rejected.append(RejectedRecord(e.record_id, e.reason))
                continue
            repo.moves[move.move_id] = move

        seen: set[str] = set()
        for record in entity_records:
            try:
                entity = parse_entity(record, config.allow_estimated_stats, config.default_stats)
                if entity.species_id in seen:
                    raise ValidationError("duplicate species id", entity.species_id)
            except ValidationError as e:
                logger.warning("Rejected entity record: %s", e)
                repo.rejected.append(RejectedRecord(e.record_id, e.reason))
                continue
            seen.add(entity.species_id)
            repo.entities.append(entity)

        logger.info(
            "Loaded %d entities and %d moves (%d records rejected)",
            len(repo.entities),
            len(repo.moves),
            len(repo.rejected),
        )
        return repo

    @classmethod
    def from_json_file(cls, path: Path, config: RankingConfig | None = None) -> "EntityRepository":
        """Load a dataset file with top-level "pokemon" and "moves" collections.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValidationError: If the file is not a JSON object of record collections.
        """
        if not path.exists():
            raise FileNotFoundError(f"Dataset not found: {path}")
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValidationError(f"invalid JSON: {e}", str(path)) from None
        if not isinstance(raw, Mapping):
            raise ValidationError("dataset must be a JSON object", str(path))
        return cls.from_records(_iter_records(raw.get("pokemon")), _iter_records(raw.get("moves")), config)

    def get(self, species_id: str) -> Entity | None:
        """Return the entity with `species_id`, if loaded."""
        return next((e for e in self.entities if e.species_id == species_id), None)

    def moves_for(self, entity: Entity) -> tuple[list[Move], list[Move]]:
        """Resolve an entity's fast and charged moves against this catalogue."""
        return resolve_moves(entity, self.moves)

    def select(self, species_ids: Sequence[str]) -> list[Entity]:
        """Return the loaded entities whose ids are in `species_ids`, in repository order."""
        wanted = set(species_ids)
        return [e for e in self.entities if e.species_id in wanted]
