"""Tests for the load-shedding scenario sweep."""

import pytest

from btm_engine.domain.models import BatteryConfig
from btm_engine.scenarios.load_shedding import (
    LOAD_SHEDDING_STAGES,
    WELL_SIZED_MESSAGE,
    LoadSheddingConfig,
    LoadSheddingEngine,
    get_stage,
    run_quick_load_shedding_analysis,
)


class TestStageDefinitions:
    """Tests for the fixed stage table."""

    def test_nine_stages(self) -> None:
        assert [s.stage for s in LOAD_SHEDDING_STAGES] == list(range(9))
        assert [s.hours_per_day for s in LOAD_SHEDDING_STAGES] == [
            0.0, 2.5, 4.0, 6.0, 8.0, 10.0, 12.0, 14.0, 16.0,
        ]  # fmt: skip

    def test_outage_hours_grow_with_severity(self) -> None:
        counts = [len(s.outage_hours) for s in LOAD_SHEDDING_STAGES]

        assert counts == [0, 2, 4, 6, 8, 10, 12, 14, 16]
        assert all(0 <= h < 24 for s in LOAD_SHEDDING_STAGES for h in s.outage_hours)

    def test_get_stage(self) -> None:
        assert get_stage(4).outage_hours == frozenset({6, 7, 10, 11, 14, 15, 18, 19})

        with pytest.raises(KeyError, match="9"):
            get_stage(9)


class TestLoadSheddingEngine:
    """Tests for running the sweep."""

    @pytest.fixture
    def sequential(self) -> LoadSheddingConfig:
        return LoadSheddingConfig(concurrency=None)

    def test_stage_zero_is_unaffected(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
        sequential: LoadSheddingConfig,
    ) -> None:
        engine = LoadSheddingEngine(battery_config, 80.0, sequential)
        analysis = engine.run(day_load, day_solar)
        stage0 = analysis.stage_analysis(0)

        assert stage0.unmet_load_kwh == 0.0
        assert stage0.outage_protection_rate == 1.0
        assert stage0.backup_value == 0.0
        assert stage0.annual_load_shed_hours == 0.0

    def test_stage_financials_without_battery(
        self,
        day_load: list[float],
        day_solar: list[float],
        no_battery: BatteryConfig,
        sequential: LoadSheddingConfig,
    ) -> None:
        engine = LoadSheddingEngine(no_battery, 80.0, sequential)
        stage4 = engine.run(day_load, day_solar).stage_analysis(4)

        assert stage4.unmet_load_kwh == pytest.approx(172.0)
        assert stage4.outage_protection_rate == pytest.approx(135.0 / 307.0)
        assert stage4.annual_unmet_load_kwh == pytest.approx(172.0 * 365)
        assert stage4.grid_only_cost == pytest.approx(770.0 * 365 * 2.5)
        assert stage4.with_solar_cost == pytest.approx(
            stage4.annual_grid_import_kwh * 2.5
        )
        assert stage4.annual_savings == pytest.approx(
            stage4.grid_only_cost - stage4.with_solar_cost
        )
        assert stage4.backup_value == pytest.approx(135.0 * 365 * (5.0 - 2.5))
        assert stage4.specific_yield == pytest.approx(421.0 * 365 / 80.0)
        assert stage4.annual_load_shed_hours == pytest.approx(8.0 * 365)

    def test_severe_stages_leave_more_unmet_load(
        self,
        day_load: list[float],
        day_solar: list[float],
        no_battery: BatteryConfig,
        sequential: LoadSheddingConfig,
    ) -> None:
        analysis = LoadSheddingEngine(no_battery, 80.0, sequential).run(
            day_load, day_solar
        )

        assert analysis.stage_analysis(8).unmet_load_kwh > (
            analysis.stage_analysis(1).unmet_load_kwh
        )

    def test_battery_improves_protection(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
        no_battery: BatteryConfig,
        sequential: LoadSheddingConfig,
    ) -> None:
        with_battery = LoadSheddingEngine(battery_config, 80.0, sequential).run(
            day_load, day_solar
        )
        without = LoadSheddingEngine(no_battery, 80.0, sequential).run(
            day_load, day_solar
        )

        assert (
            with_battery.stage_analysis(4).outage_protection_rate
            > without.stage_analysis(4).outage_protection_rate
        )

    def test_threaded_matches_sequential(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
    ) -> None:
        threaded = LoadSheddingEngine(
            battery_config, 80.0, LoadSheddingConfig(concurrency="thread")
        ).run(day_load, day_solar)
        sequential = LoadSheddingEngine(
            battery_config, 80.0, LoadSheddingConfig(concurrency=None)
        ).run(day_load, day_solar)

        assert [s.to_dict() for s in threaded.stages] == [
            s.to_dict() for s in sequential.stages
        ]
        assert threaded.recommendations == sequential.recommendations

    def test_invalid_concurrency(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
    ) -> None:
        engine = LoadSheddingEngine(
            battery_config, 80.0, LoadSheddingConfig(concurrency="process")
        )

        with pytest.raises(ValueError, match="concurrency"):
            engine.run(day_load, day_solar)


class TestSummary:
    """Tests for baseline comparison, recommendations and optimal stage."""

    def test_baseline_comparison(
        self,
        day_load: list[float],
        day_solar: list[float],
        no_battery: BatteryConfig,
    ) -> None:
        analysis = run_quick_load_shedding_analysis(
            no_battery, 80.0, day_load, day_solar
        )
        stage0 = analysis.stage_analysis(0)
        stage8 = analysis.stage_analysis(8)

        assert analysis.baseline.stage0_savings == pytest.approx(stage0.annual_savings)
        assert analysis.baseline.stage8_savings == pytest.approx(stage8.total_value)
        assert analysis.baseline.max_savings_increase == pytest.approx(
            (stage8.total_value - stage0.annual_savings) / stage0.annual_savings
        )

    def test_recommends_storage_without_battery(
        self,
        day_load: list[float],
        day_solar: list[float],
        no_battery: BatteryConfig,
    ) -> None:
        analysis = run_quick_load_shedding_analysis(
            no_battery, 80.0, day_load, day_solar
        )

        assert any("Adding battery storage" in r for r in analysis.recommendations)
        assert any("increasing solar" in r for r in analysis.recommendations)
        assert WELL_SIZED_MESSAGE not in analysis.recommendations

    def test_well_sized_system(self) -> None:
        """Flat load fully carried by a large battery with modest backup value."""
        load = [10.0] * 24
        solar = [40.0 if 8 <= h <= 16 else 0.0 for h in range(24)]
        battery = BatteryConfig(capacity_kwh=300.0, power_kw=50.0)

        analysis = run_quick_load_shedding_analysis(
            battery, 50.0, load, solar, tariff_rate=2.5, backup_value_rate=2.6
        )

        assert analysis.stage_analysis(4).outage_protection_rate == pytest.approx(1.0)
        assert analysis.recommendations == [WELL_SIZED_MESSAGE]

    def test_optimal_stage(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
    ) -> None:
        analysis = run_quick_load_shedding_analysis(
            battery_config, 80.0, day_load, day_solar
        )
        best = analysis.optimal_stage()

        assert best is not None
        assert best.total_value == max(s.total_value for s in analysis.stages)

    def test_unknown_stage_result(
        self,
        day_load: list[float],
        day_solar: list[float],
        battery_config: BatteryConfig,
    ) -> None:
        analysis = run_quick_load_shedding_analysis(
            battery_config, 80.0, day_load, day_solar
        )

        with pytest.raises(KeyError):
            analysis.stage_analysis(12)
