"""Tests for domain models and configuration."""

import pytest
from pydantic import ValidationError

from btm_engine.domain.config import (
    AdvancedConfig,
    FinancialConfig,
    GridConstraintsConfig,
    SeasonalConfig,
    SystemCosts,
    Tariff,
    get_preset,
)
from btm_engine.domain.models import (
    BatteryConfig,
    BatteryState,
    DispatchConfig,
    HourlyResult,
    TimeWindow,
)


class TestBatteryModels:
    """Tests for battery configuration and state."""

    def test_defaults(self) -> None:
        config = BatteryConfig(capacity_kwh=100.0, power_kw=50.0)

        assert config.min_soc_fraction == 0.10
        assert config.max_soc_fraction == 0.95
        assert config.initial_soc_fraction == 0.50
        assert config.usable_capacity_kwh == pytest.approx(85.0)

    def test_negative_capacity_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BatteryConfig(capacity_kwh=-1.0)

    def test_fraction_out_of_range_rejected(self) -> None:
        with pytest.raises(ValidationError):
            BatteryConfig(capacity_kwh=10.0, max_soc_fraction=1.5)

    def test_models_are_immutable(self) -> None:
        state = BatteryState(
            level_kwh=5.0, min_level_kwh=1.0, max_level_kwh=9.0, power_kw=2.0
        )

        with pytest.raises(ValidationError):
            state.level_kwh = 6.0  # type: ignore[misc]

    def test_headrooms(self) -> None:
        state = BatteryState(
            level_kwh=5.0, min_level_kwh=1.0, max_level_kwh=9.0, power_kw=2.0
        )

        assert state.charge_headroom_kwh == 2.0
        assert state.discharge_headroom_kwh == 2.0
        assert state.soc_fraction == 0.0  # No nameplate capacity given


class TestDispatchModels:
    """Tests for windows, dispatch rules and hourly results."""

    def test_wrapping_window_flag(self) -> None:
        assert TimeWindow(start=22, end=6).wraps_midnight
        assert not TimeWindow(start=7, end=10).wraps_midnight

    def test_window_hour_range(self) -> None:
        with pytest.raises(ValidationError):
            TimeWindow(start=-1, end=6)

    def test_dispatch_defaults(self) -> None:
        config = DispatchConfig()

        assert config.charge_windows == ()
        assert config.discharge_windows == ()
        assert not config.allow_grid_charging
        assert config.peak_shaving_target_kw is None

    def test_balance_residuals(self) -> None:
        result = HourlyResult(
            hour=12,
            load=10.0,
            solar=15.0,
            solar_used=10.0,
            battery_charge=5.0,
        )

        assert result.load_balance_error() == 0.0
        assert result.solar_balance_error() == 0.0
        assert result.solar_to_battery == 5.0


class TestTariff:
    """Tests for tariff rates."""

    def test_flat_rate(self) -> None:
        tariff = Tariff(average_rate_per_kwh=2.0)

        assert tariff.rate_for_hour(7) == 2.0
        assert tariff.blended_rate([1.0, 2.0]) == 2.0

    def test_hourly_rates(self) -> None:
        rates = tuple(1.0 if h < 12 else 3.0 for h in range(24))
        tariff = Tariff(hourly_rates=rates)
        weights = [0.0] * 24
        weights[0] = 1.0
        weights[13] = 1.0

        assert tariff.rate_for_hour(13) == 3.0
        assert tariff.blended_rate(weights) == pytest.approx(2.0)
        assert tariff.blended_rate([0.0] * 24) == tariff.average_rate_per_kwh

    def test_hourly_rates_length(self) -> None:
        with pytest.raises(ValidationError, match="24 entries"):
            Tariff(hourly_rates=(1.0,) * 23)


class TestAdvancedConfig:
    """Tests for advanced modelling configuration and presets."""

    def test_defaults_resolved_at_construction(self) -> None:
        config = AdvancedConfig()

        assert not config.seasonal.enabled
        assert not config.degradation.enabled
        assert config.financial.enabled
        assert config.financial.project_lifetime_years == 20
        assert config.degradation.panel_yearly_rates[0] == 0.02
        assert len(config.degradation.panel_yearly_rates) == 20

    def test_rate_fallbacks(self) -> None:
        financial = FinancialConfig(discount_rate=0.11, inflation_rate=0.05)

        assert financial.effective_lcoe_discount_rate == 0.11
        assert financial.effective_insurance_escalation_rate == 0.05
        assert FinancialConfig(lcoe_discount_rate=0.07).effective_lcoe_discount_rate == (
            0.07
        )

    def test_seasonal_factor_count(self) -> None:
        with pytest.raises(ValidationError, match="12 monthly factors"):
            SeasonalConfig(monthly_irradiance_factors=(1.0,) * 11)

    def test_export_allowance(self) -> None:
        limited = GridConstraintsConfig(
            enabled=True,
            export_limit_enabled=True,
            max_export_kw=25.0,
            export_restrictions_enabled=True,
            restricted_export_hours=frozenset({17}),
        )

        assert limited.export_allowance(12) == 25.0
        assert limited.export_allowance(17) == 0.0
        assert GridConstraintsConfig().export_allowance(12) is None

    def test_maintenance(self) -> None:
        assert SystemCosts(maintenance_per_year=9000.0).annual_maintenance(
            100.0, 100.0
        ) == 9000.0
        assert SystemCosts().annual_maintenance(10.0, 0.0) == pytest.approx(3850.0)

    @pytest.mark.parametrize("name", ["conservative", "optimistic", "market_standard"])
    def test_presets(self, name: str) -> None:
        config = get_preset(name)

        assert config.degradation.enabled
        assert config.financial.sensitivity_enabled
        assert config.seasonal.enabled

    def test_preset_values(self) -> None:
        assert get_preset("conservative").financial.discount_rate == 0.12
        assert get_preset("optimistic").financial.project_lifetime_years == 30
        assert get_preset("market_standard").grid_constraints.enabled

    def test_presets_are_fresh_instances(self) -> None:
        assert get_preset("optimistic") is not get_preset("optimistic")

    def test_unknown_preset(self) -> None:
        with pytest.raises(KeyError, match="aggressive"):
            get_preset("aggressive")
