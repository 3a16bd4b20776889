"""ABOUTME: Groups entities into evolution families and classifies each member's stage and variants.
ABOUTME: Provides the family ordering key (lowest dex number) and chain/variant lookups."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from tierdex.errors import ValidationError
from tierdex.models import Entity

logger = logging.getLogger(__name__)

REGIONAL_MARKERS: tuple[str, ...] = ("alolan", "galarian", "hisuian", "paldean")

# Suffixes stripped (in order) to find the species a variant belongs to
_VARIANT_SUFFIXES: tuple[re.Pattern[str], ...] = (
    re.compile(r"_shadow$"),
    re.compile(r"_mega.*$"),
    re.compile(r"_(alolan|galarian|hisuian|paldean)$"),
)


class Stage(StrEnum):
    """Position of a member in its evolution line."""

    BASE = "base"
    STAGE1 = "stage1"
    STAGE2 = "stage2"


class Variant(StrEnum):
    """Variant buckets, orthogonal to the stage."""

    MEGA = "mega"
    SHADOW = "shadow"
    REGIONAL = "regional"


STAGE_NUMBERS: dict[Stage, int] = {Stage.BASE: 0, Stage.STAGE1: 1, Stage.STAGE2: 2}

FAMILY_BUCKETS: tuple[str, ...] = ("base", "stage1", "stage2", "mega", "shadow", "regional")


@dataclass(frozen=True)
class FamilyTree:
    """Family members bucketed by stage and by variant, each sorted by dex.

    A member appears in exactly one stage bucket and in any number of
    variant buckets.
    """

    base: tuple[str, ...] = ()
    stage1: tuple[str, ...] = ()
    stage2: tuple[str, ...] = ()
    mega: tuple[str, ...] = ()
    shadow: tuple[str, ...] = ()
    regional: tuple[str, ...] = ()


@dataclass(frozen=True)
class EvolutionFamily:
    """A set of entities sharing an evolution family.

    Attributes:
        family_id: Explicit family id from the data, or the species id of the
            earliest member for families built purely from links.
        members: Member species ids ordered by dex, then input order.
        lowest_dex_number: Minimum dex over all members; the family sort key.
        highest_dex_number: Maximum known dex over all members.
        tree: Stage and variant buckets.
    """

    family_id: str
    members: tuple[str, ...]
    lowest_dex_number: int
    highest_dex_number: int
    tree: FamilyTree


@dataclass(frozen=True)
class FamilyInfo:
    """Family metadata for a single entity."""

    species_id: str
    family: EvolutionFamily
    stage: Stage
    variants: frozenset[Variant]
    base_name: str
    dex: int
    can_evolve: bool

    @property
    def family_id(self) -> str:
        """Id of the family this entity belongs to."""
        return self.family.family_id

    @property
    def lowest_dex_number(self) -> int:
        """Family sort key shared by every member."""
        return self.family.lowest_dex_number

    @property
    def is_base(self) -> bool:
        """Whether the entity has no pre-evolution."""
        return self.stage is Stage.BASE

    @property
    def stage_number(self) -> int:
        """0 for base, 1 for stage 1, 2 for stage 2."""
        return STAGE_NUMBERS[self.stage]


def base_name(species_id: str) -> str:
    """Strip shadow, mega and regional suffixes from a species id.

    Args:
        species_id: Species id like "charizard_mega_x" or "raichu_alolan".

    Returns:
        Base id like "charizard" or "raichu".
    """
    name = species_id
    for pattern in _VARIANT_SUFFIXES:
        name = pattern.sub("", name)
    return name


def detect_variants(entity: Entity) -> frozenset[Variant]:
    """Detect variant buckets from tags and id/name conventions."""
    species_id = entity.species_id.lower()
    name = entity.name.lower()
    variants: set[Variant] = set()

    if "mega" in entity.tags or "_mega" in species_id or name.startswith("mega "):
        variants.add(Variant.MEGA)
    if entity.is_shadow or name.startswith("shadow "):
        variants.add(Variant.SHADOW)
    if "regional" in entity.tags or any(
        marker in species_id or marker in name or marker in entity.tags for marker in REGIONAL_MARKERS
    ):
        variants.add(Variant.REGIONAL)
    return frozenset(variants)


def classify_stage(entity: Entity) -> Stage:
    """Classify an entity as base, stage 1 or stage 2 from its relations."""
    family = entity.family
    if family is None or not family.parent:
        return Stage.BASE
    if family.evolutions:
        return Stage.STAGE1
    return Stage.STAGE2


class _DisjointSet:
    """Union-find over species ids, keeping the earliest-seen id as root."""

    def __init__(self, ids: Iterable[str]) -> None:
        self.order = {species_id: index for index, species_id in enumerate(ids)}
        self.parent = {species_id: species_id for species_id in self.order}

    def find(self, species_id: str) -> str:
        root = species_id
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[species_id] != root:
            self.parent[species_id], species_id = root, self.parent[species_id]
        return root

    def union(self, a: str, b: str) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return
        if self.order[root_a] <= self.order[root_b]:
            self.parent[root_b] = root_a
        else:
            self.parent[root_a] = root_b


class EvolutionFamilyBuilder:
    """Builds evolution families for a population of entities.

    The builder is stateless; every call to `build` starts from scratch.
    """

    def build(self, entities: Sequence[Entity]) -> dict[str, FamilyInfo]:
        """Partition entities into evolution families.

        Entities sharing a family id are grouped, as are entities linked by a
        parent or evolution reference to another entity in the input. Anything
        left over becomes a singleton family.

        Args:
            entities: Validated entities with unique species ids.

        Returns:
            Mapping species_id -> FamilyInfo covering every input entity.

        Raises:
            ValidationError: If two entities share a species id.
        """
        by_id: dict[str, Entity] = {}
        for entity in entities:
            if entity.species_id in by_id:
                raise ValidationError("duplicate species id", entity.species_id)
            by_id[entity.species_id] = entity

        groups = _DisjointSet(by_id)
        first_with_family_id: dict[str, str] = {}
        for entity in entities:
            family = entity.family
            if family is None:
                continue
            if family.id:
                anchor = first_with_family_id.setdefault(family.id, entity.species_id)
                groups.union(anchor, entity.species_id)
            for related in (family.parent, *family.evolutions):
                if related and related in by_id:
                    groups.union(entity.species_id, related)

        members_by_root: dict[str, list[Entity]] = {}
        for entity in entities:
            members_by_root.setdefault(groups.find(entity.species_id), []).append(entity)

        result: dict[str, FamilyInfo] = {}
        for members in members_by_root.values():
            family = self._build_family(members)
            for entity in members:
                result[entity.species_id] = FamilyInfo(
                    species_id=entity.species_id,
                    family=family,
                    stage=classify_stage(entity),
                    variants=detect_variants(entity),
                    base_name=base_name(entity.species_id),
                    dex=entity.sort_dex,
                    can_evolve=bool(entity.family and entity.family.evolutions),
                )

        logger.info("Built %d evolution families for %d entities", len(members_by_root), len(result))
        return result

    def _build_family(self, members: list[Entity]) -> EvolutionFamily:
        # sorted() is stable, so equal dex numbers keep input order
        ordered = sorted(members, key=lambda e: e.sort_dex)
        explicit_ids = sorted({m.family.id for m in members if m.family is not None and m.family.id})
        family_id = explicit_ids[0] if explicit_ids else ordered[0].species_id
        if len(explicit_ids) > 1:
            logger.warning("Linked members carry several family ids %s; using %s", explicit_ids, family_id)

        buckets: dict[str, list[str]] = {name: [] for name in FAMILY_BUCKETS}
        for entity in ordered:
            buckets[classify_stage(entity).value].append(entity.species_id)
            for variant in sorted(detect_variants(entity)):
                buckets[variant.value].append(entity.species_id)

        known_dex = [m.dex for m in members if m.dex is not None]
        return EvolutionFamily(
            family_id=family_id,
            members=tuple(e.species_id for e in ordered),
            lowest_dex_number=min(e.sort_dex for e in members),
            highest_dex_number=max(known_dex) if known_dex else 0,
            tree=FamilyTree(**{name: tuple(ids) for name, ids in buckets.items()}),
        )


def all_families(families: Mapping[str, FamilyInfo]) -> list[EvolutionFamily]:
    """Return each distinct family once, ordered by lowest dex number then family id."""
    unique: dict[str, EvolutionFamily] = {}
    for info in families.values():
        unique.setdefault(info.family_id, info.family)
    return sorted(unique.values(), key=lambda f: (f.lowest_dex_number, f.family_id))


def evolution_chain(species_id: str, families: Mapping[str, FamilyInfo]) -> list[str]:
    """Linear evolution chain of an entity's family: base, stage 1, stage 2.

    Mega and shadow members are alternate battle forms and are left out.

    Args:
        species_id: Any member of the family.
        families: Result of EvolutionFamilyBuilder.build.

    Returns:
        Member species ids in chain order; empty if the id is unknown.
    """
    info = families.get(species_id)
    if info is None:
        return []
    tree = info.family.tree
    forms = set(tree.mega) | set(tree.shadow)
    return [member for member in (*tree.base, *tree.stage1, *tree.stage2) if member not in forms]


def variants_of(species_id: str, families: Mapping[str, FamilyInfo]) -> list[str]:
    """All family members sharing the entity's base name (normal, shadow, mega, regional)."""
    info = families.get(species_id)
    if info is None:
        return []
    return [member for member in info.family.members if families[member].base_name == info.base_name]


def family_stats(family: EvolutionFamily) -> dict[str, Any]:
    """Summarise a family's composition.

    Returns:
        Dict with family_id, total_members, per-bucket counts and the lowest
        and highest dex numbers.
    """
    tree = family.tree
    return {
        "family_id": family.family_id,
        "total_members": len(family.members),
        "base_evolutions": len(tree.base),
        "stage1_evolutions": len(tree.stage1),
        "stage2_evolutions": len(tree.stage2),
        "mega_evolutions": len(tree.mega),
        "shadow_variants": len(tree.shadow),
        "regional_variants": len(tree.regional),
        "lowest_dex_number": family.lowest_dex_number,
        "highest_dex_number": family.highest_dex_number,
    }


def sort_by_family(entities: Sequence[Entity], families: Mapping[str, FamilyInfo]) -> list[Entity]:
    """Order entities so families are contiguous and ordered by their earliest member.

    Within a family entities are ordered by dex; entities without family
    info go last. Input order breaks remaining ties.
    """

    def key(item: tuple[int, Entity]) -> tuple[int, int, str, int, int]:
        index, entity = item
        info = families.get(entity.species_id)
        if info is None:
            return (1, 0, "", entity.sort_dex, index)
        return (0, info.lowest_dex_number, info.family_id, entity.sort_dex, index)

    return [entity for _, entity in sorted(enumerate(entities), key=key)]
