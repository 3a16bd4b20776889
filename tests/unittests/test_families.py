"""ABOUTME: Tests for the evolution family builder and its helpers.
ABOUTME: Verifies family partitioning, stages, variants, lowest dex number and family ordering."""

from collections.abc import Callable

import pytest

from tierdex.errors import ValidationError
from tierdex.evolution.families import (
    EvolutionFamilyBuilder,
    FamilyInfo,
    Stage,
    Variant,
    all_families,
    base_name,
    evolution_chain,
    family_stats,
    sort_by_family,
    variants_of,
)
from tierdex.models import Entity

EntityFactory = Callable[..., Entity]


@pytest.fixture
def bulbasaur_line(make_entity: EntityFactory) -> list[Entity]:
    """Three-stage family plus a shadow variant, given out of dex order."""
    family_id = "FAMILY_BULBASAUR"
    return [
        make_entity(
            "ivysaur",
            ["grass", "poison"],
            dex=2,
            family={"id": family_id, "parent": "bulbasaur", "evolutions": ["venusaur"]},
        ),
        make_entity("venusaur", ["grass", "poison"], dex=3, family={"id": family_id, "parent": "ivysaur"}),
        make_entity("bulbasaur", ["grass", "poison"], dex=1, family={"id": family_id, "evolutions": ["ivysaur"]}),
        make_entity(
            "venusaur_shadow",
            ["grass", "poison"],
            dex=3,
            tags=["shadow"],
            family={"id": family_id, "parent": "ivysaur"},
        ),
    ]


@pytest.fixture
def families(bulbasaur_line: list[Entity], make_entity: EntityFactory) -> dict[str, FamilyInfo]:
    """Families for the bulbasaur line plus unrelated entities."""
    others = [
        make_entity("charmander", dex=4, family={"id": "FAMILY_CHARMANDER"}),
        make_entity("raichu_alolan", ["electric", "psychic"], dex=26, family={"parent": "pikachu"}),
        make_entity("pikachu", ["electric"], dex=25, family={"evolutions": ["raichu", "raichu_alolan"]}),
        make_entity("missingno", ["normal"]),
    ]
    return EvolutionFamilyBuilder().build([*bulbasaur_line, *others])


class TestBaseName:
    """Tests for base_name function."""

    @pytest.mark.parametrize(
        ("species_id", "expected"),
        [
            ("charizard", "charizard"),
            ("charizard_shadow", "charizard"),
            ("charizard_mega_x", "charizard"),
            ("raichu_alolan", "raichu"),
            ("marowak_alolan_shadow", "marowak"),
        ],
    )
    def test_strips_variant_suffixes(self, species_id: str, expected: str) -> None:
        """Shadow, mega and regional suffixes are removed."""
        assert base_name(species_id) == expected


class TestEvolutionFamilyBuilder:
    """Tests for EvolutionFamilyBuilder.build."""

    def test_partitions_input_exactly(self, families: dict[str, FamilyInfo]) -> None:
        """Every entity is in exactly one family and no member is invented."""
        distinct = all_families(families)
        members = [member for family in distinct for member in family.members]

        assert sorted(members) == sorted(families)
        assert len(members) == len(set(members))
        for species_id, info in families.items():
            assert species_id in info.family.members

    def test_shared_lowest_dex_number(self, make_entity: EntityFactory) -> None:
        """Two family members with dex 1 and 2 both report 1."""
        entities = [
            make_entity("ivysaur", dex=2, family={"id": "FAMILY_BULBASAUR"}),
            make_entity("bulbasaur", dex=1, family={"id": "FAMILY_BULBASAUR"}),
        ]

        result = EvolutionFamilyBuilder().build(entities)

        assert result["bulbasaur"].lowest_dex_number == 1
        assert result["ivysaur"].lowest_dex_number == 1

    def test_groups_by_family_id(self, families: dict[str, FamilyInfo]) -> None:
        """Entities sharing a family id form one family."""
        family = families["venusaur"].family

        assert family.family_id == "FAMILY_BULBASAUR"
        assert family.members == ("bulbasaur", "ivysaur", "venusaur", "venusaur_shadow")
        assert family.highest_dex_number == 3

    def test_groups_by_links(self, families: dict[str, FamilyInfo]) -> None:
        """Parent/evolution links merge entities without a family id."""
        assert families["raichu_alolan"].family is families["pikachu"].family
        assert families["pikachu"].family_id == "pikachu"
        assert families["raichu_alolan"].lowest_dex_number == 25

    def test_singleton_family(self, families: dict[str, FamilyInfo]) -> None:
        """Unrelated entities get their own family; unknown dex sorts as 999."""
        info = families["missingno"]

        assert info.family.members == ("missingno",)
        assert info.lowest_dex_number == 999
        assert info.family.highest_dex_number == 0

    def test_stages(self, families: dict[str, FamilyInfo]) -> None:
        """Stages follow parent and evolution relations."""
        assert families["bulbasaur"].stage is Stage.BASE
        assert families["ivysaur"].stage is Stage.STAGE1
        assert families["venusaur"].stage is Stage.STAGE2
        assert families["bulbasaur"].is_base is True
        assert families["venusaur"].stage_number == 2

    def test_can_evolve(self, families: dict[str, FamilyInfo]) -> None:
        """Entities with evolutions can evolve."""
        assert families["ivysaur"].can_evolve is True
        assert families["venusaur"].can_evolve is False

    def test_variants(self, families: dict[str, FamilyInfo], make_entity: EntityFactory) -> None:
        """Variants come from tags and id conventions."""
        mega = EvolutionFamilyBuilder().build([make_entity("venusaur_mega", ["grass", "poison"])])

        assert families["venusaur_shadow"].variants == frozenset({Variant.SHADOW})
        assert families["raichu_alolan"].variants == frozenset({Variant.REGIONAL})
        assert families["venusaur"].variants == frozenset()
        assert mega["venusaur_mega"].variants == frozenset({Variant.MEGA})

    def test_tree_buckets(self, families: dict[str, FamilyInfo]) -> None:
        """The tree buckets members by stage and variant."""
        tree = families["bulbasaur"].family.tree

        assert tree.base == ("bulbasaur",)
        assert tree.stage1 == ("ivysaur",)
        assert tree.stage2 == ("venusaur", "venusaur_shadow")
        assert tree.shadow == ("venusaur_shadow",)

    def test_duplicate_ids(self, make_entity: EntityFactory) -> None:
        """Duplicate species ids are rejected."""
        with pytest.raises(ValidationError, match="duplicate"):
            EvolutionFamilyBuilder().build([make_entity("a"), make_entity("a")])

    def test_empty(self) -> None:
        """No entities, no families."""
        assert EvolutionFamilyBuilder().build([]) == {}


class TestFamilyHelpers:
    """Tests for the family lookup helpers."""

    def test_evolution_chain(self, families: dict[str, FamilyInfo]) -> None:
        """The chain runs base to final stage without alternate forms."""
        assert evolution_chain("venusaur_shadow", families) == ["bulbasaur", "ivysaur", "venusaur"]

    def test_evolution_chain_unknown(self, families: dict[str, FamilyInfo]) -> None:
        """Unknown ids have no chain."""
        assert evolution_chain("mew", families) == []

    def test_variants_of(self, families: dict[str, FamilyInfo]) -> None:
        """Variants share the base name."""
        assert variants_of("venusaur", families) == ["venusaur", "venusaur_shadow"]
        assert variants_of("mew", families) == []

    def test_family_stats(self, families: dict[str, FamilyInfo]) -> None:
        """Stats summarise the family composition."""
        stats = family_stats(families["bulbasaur"].family)

        assert stats["total_members"] == 4
        assert stats["base_evolutions"] == 1
        assert stats["stage2_evolutions"] == 2
        assert stats["shadow_variants"] == 1
        assert stats["lowest_dex_number"] == 1

    def test_all_families_order(self, families: dict[str, FamilyInfo]) -> None:
        """Families are listed by lowest dex number."""
        assert [f.family_id for f in all_families(families)] == [
            "FAMILY_BULBASAUR",
            "FAMILY_CHARMANDER",
            "pikachu",
            "missingno",
        ]

    def test_sort_by_family(self, bulbasaur_line: list[Entity], make_entity: EntityFactory) -> None:
        """Families are contiguous and ordered by their earliest member."""
        charmander = make_entity("charmander", dex=4)
        entities = [charmander, *bulbasaur_line]
        infos = EvolutionFamilyBuilder().build(entities)

        ordered = sort_by_family(entities, infos)

        assert [e.species_id for e in ordered] == [
            "bulbasaur",
            "ivysaur",
            "venusaur",
            "venusaur_shadow",
            "charmander",
        ]

    def test_sort_by_family_without_info(self, make_entity: EntityFactory) -> None:
        """Entities without family info go last."""
        a, b = make_entity("a", dex=1), make_entity("b", dex=5)
        infos = EvolutionFamilyBuilder().build([b])

        assert sort_by_family([a, b], infos) == [b, a]
