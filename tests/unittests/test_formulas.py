# ABOUTME: Unit tests for the battle formulas module.
# ABOUTME: Tests damage, per-second rates, cycle DPS, TDO, eDPS and shadow stat modifiers.

from collections.abc import Callable

import pytest

from tierdex.battle.formulas import (
    DamageModel,
    cycle_dps,
    effective_dps,
    effective_stats,
    per_second,
    total_damage_output,
)
from tierdex.errors import ValidationError
from tierdex.models import Entity

EntityFactory = Callable[..., Entity]


class TestDamageModel:
    """Tests for DamageModel.damage."""

    def test_base_damage(self) -> None:
        """floor(0.5 * 10 * 200 / 180) + 1 = 6."""
        assert DamageModel().damage(200, 180, 10, 1.0) == 6

    def test_stab_and_super_effective(self) -> None:
        """6 * 1.2 STAB * 2.0 = 14.4, floored to 14."""
        assert DamageModel().damage(200, 180, 10, 2.0, is_stab=True) == 14

    def test_weather_boost(self) -> None:
        """Weather multiplies like STAB: 56 * 1.2 = 67.2, floored to 67."""
        assert DamageModel().damage(200, 180, 100, 1.0, is_weather_boosted=True) == 67

    def test_custom_multipliers(self) -> None:
        """Configured multipliers replace the defaults."""
        model = DamageModel(stab_multiplier=1.5, weather_multiplier=1.0)

        assert model.damage(200, 180, 10, 1.0, is_stab=True, is_weather_boosted=True) == 9

    def test_zero_power(self) -> None:
        """A move with no power deals no damage."""
        assert DamageModel().damage(200, 180, 0, 2.0, is_stab=True) == 0

    def test_immune_target(self) -> None:
        """A zero multiplier deals no damage."""
        assert DamageModel().damage(200, 180, 100, 0.0) == 0

    @pytest.mark.parametrize(("attack", "defense"), [(0, 180), (200, 0), (-5, 180)])
    def test_non_positive_stats(self, attack: float, defense: float) -> None:
        """Non-positive stats raise ValidationError."""
        with pytest.raises(ValidationError):
            DamageModel().damage(attack, defense, 10, 1.0)

    def test_negative_effectiveness(self) -> None:
        """Negative multipliers raise ValidationError."""
        with pytest.raises(ValidationError):
            DamageModel().damage(200, 180, 10, -1.0)


class TestRates:
    """Tests for per_second and cycle_dps."""

    def test_per_second(self) -> None:
        """134 damage over 2500 ms is 53.6 per second."""
        assert per_second(134, 2500) == pytest.approx(53.6)

    def test_per_second_rejects_zero_cooldown(self) -> None:
        """A zero cooldown raises ValidationError."""
        with pytest.raises(ValidationError):
            per_second(10, 0)

    def test_cycle_dps(self) -> None:
        """(14 * 20 + 53.6 * 8) / 28 = 25.314..."""
        assert cycle_dps(14, 8, 53.6, 20) == pytest.approx(708.8 / 28)

    def test_cycle_dps_zero_fast_eps(self) -> None:
        """Without energy gain the fast move's DPS is used."""
        assert cycle_dps(14, 0, 53.6, 20) == 14

    def test_cycle_dps_zero_charged_eps(self) -> None:
        """A free charged move falls back to the fast move's DPS too."""
        assert cycle_dps(14, 8, 53.6, 0) == 14


class TestTdoAndEdps:
    """Tests for total_damage_output and effective_dps."""

    def test_tdo(self) -> None:
        """dps * hp / (enemy_dps * (200 / def))."""
        assert total_damage_output(10, 180, 150, 15) == pytest.approx(10 * 180 / (15 * (200 / 150)))

    def test_tdo_rejects_zero_enemy_dps(self) -> None:
        """A non-positive reference DPS raises ValidationError."""
        with pytest.raises(ValidationError):
            total_damage_output(10, 180, 150, 0)

    def test_edps(self) -> None:
        """dps * tdo / (tdo + relobby)."""
        assert effective_dps(10, 80, 20) == pytest.approx(8.0)

    def test_edps_zero_tdo(self) -> None:
        """Zero TDO gives zero eDPS."""
        assert effective_dps(10, 0, 20) == 0.0

    def test_edps_without_relobby(self) -> None:
        """Without relobby time eDPS equals DPS."""
        assert effective_dps(10, 80, 0) == pytest.approx(10.0)


class TestEffectiveStats:
    """Tests for effective_stats."""

    def test_regular_entity(self, make_entity: EntityFactory) -> None:
        """Regular entities keep their base stats."""
        stats = effective_stats(make_entity("charizard", attack=223, defense=173, stamina=186))

        assert (stats.attack, stats.defense, stats.stamina) == (223.0, 173.0, 186.0)
        assert stats.estimated is False

    def test_shadow_by_tag(self, make_entity: EntityFactory) -> None:
        """Shadow entities hit harder and defend worse."""
        stats = effective_stats(make_entity("charizard", attack=200, defense=180, tags=["Shadow"]))

        assert stats.attack == pytest.approx(240.0)
        assert stats.defense == pytest.approx(150.0)
        assert stats.stamina == 180.0

    def test_shadow_by_id(self, make_entity: EntityFactory) -> None:
        """The _shadow suffix marks a shadow entity."""
        stats = effective_stats(make_entity("charizard_shadow", attack=200), shadow_attack_multiplier=1.5)

        assert stats.attack == pytest.approx(300.0)
