"""Contains configurations for the test run."""

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import pytest

from tierdex.models import Entity, Move
from tierdex.repository import parse_move

EntityFactory = Callable[..., Entity]

MOVE_RECORDS: list[dict[str, Any]] = [
    {"moveId": "ember", "type": "fire", "power": 10, "energyDelta": 8, "durationMs": 1000},
    {"moveId": "flamethrower", "type": "fire", "power": 100, "energyDelta": -50, "durationMs": 2500},
    {"moveId": "vine_whip", "type": "grass", "power": 10, "energyDelta": 8, "durationMs": 1000},
    {"moveId": "solar_beam", "type": "grass", "power": 100, "energyDelta": -50, "durationMs": 2500},
    {"moveId": "water_gun", "type": "water", "power": 10, "energyDelta": 8, "durationMs": 1000},
    {"moveId": "hydro_pump", "type": "water", "power": 100, "energyDelta": -50, "durationMs": 2500},
    {"moveId": "tackle", "type": "normal", "power": 10, "energyDelta": 8, "durationMs": 1000},
    {"moveId": "body_slam", "type": "normal", "power": 100, "energyDelta": -50, "durationMs": 2500},
]


@pytest.fixture(scope="session")
def resources_folder() -> Path:
    """Returns the path to the test resources folder."""
    return Path(__file__).parents[1] / "resources"


@pytest.fixture(scope="session")
def move_records() -> list[dict[str, Any]]:
    """Raw move records in game-master shape."""
    return [dict(record) for record in MOVE_RECORDS]


@pytest.fixture(scope="session")
def moves() -> dict[str, Move]:
    """Validated move catalogue keyed by move id."""
    return {record["moveId"]: parse_move(record) for record in MOVE_RECORDS}


@pytest.fixture
def make_entity() -> EntityFactory:
    """Factory building validated entities with sensible battle defaults."""

    def factory(
        species_id: str,
        types: Sequence[str] = ("fire",),
        attack: int = 200,
        defense: int = 180,
        stamina: int = 180,
        fast_moves: Sequence[str] = ("ember",),
        charged_moves: Sequence[str] = ("flamethrower",),
        **extra: Any,
    ) -> Entity:
        return Entity.model_validate(
            {
                "species_id": species_id,
                "types": list(types),
                "stats": {"attack": attack, "defense": defense, "stamina": stamina},
                "fast_moves": list(fast_moves),
                "charged_moves": list(charged_moves),
                **extra,
            }
        )

    return factory
