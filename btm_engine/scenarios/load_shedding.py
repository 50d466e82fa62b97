"""Load-shedding scenario sweep.

Reruns the dispatch simulation under the nine load-shedding stages (0-8),
each masking a fixed set of outage hours every day, and reports outage
protection and the financial value of the system per stage:
- Outage protection rate and unmet load
- Bill savings against grid-only supply
- Backup value of load served while the grid is down

Stages are independent and can run on a thread pool.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field

from btm_engine.domain.models import BatteryConfig, DispatchConfig, DispatchStrategy
from btm_engine.metrics.kpi import safe_ratio
from btm_engine.parallel import map_independent
from btm_engine.simulation.driver import simulate_with_outages

PROTECTION_THRESHOLD = 0.80
COVERAGE_THRESHOLD = 0.50
BACKUP_SIGNIFICANCE = 0.20
WELL_SIZED_MESSAGE = "System is well-sized for current load shedding scenarios."


@dataclass(frozen=True)
class LoadSheddingStage:
    """A load-shedding severity level and its representative outage hours."""

    stage: int
    name: str
    hours_per_day: float
    outage_hours: frozenset[int]


LOAD_SHEDDING_STAGES: tuple[LoadSheddingStage, ...] = (
    LoadSheddingStage(0, "No Load Shedding", 0.0, frozenset()),
    LoadSheddingStage(1, "Stage 1", 2.5, frozenset({6, 14})),
    LoadSheddingStage(2, "Stage 2", 4.0, frozenset({6, 7, 14, 15})),
    LoadSheddingStage(3, "Stage 3", 6.0, frozenset({6, 7, 10, 14, 15, 18})),
    LoadSheddingStage(
        4, "Stage 4", 8.0, frozenset({6, 7, 10, 11, 14, 15, 18, 19})
    ),
    LoadSheddingStage(
        5, "Stage 5", 10.0, frozenset({6, 7, 10, 11, 14, 15, 18, 19, 22, 23})
    ),
    LoadSheddingStage(
        6,
        "Stage 6",
        12.0,
        frozenset({6, 7, 8, 10, 11, 12, 14, 15, 16, 18, 19, 20}),
    ),
    LoadSheddingStage(
        7,
        "Stage 7",
        14.0,
        frozenset({6, 7, 8, 9, 10, 11, 12, 14, 15, 16, 18, 19, 20, 22}),
    ),
    LoadSheddingStage(
        8,
        "Stage 8",
        16.0,
        frozenset({0, 2, 6, 7, 8, 9, 10, 11, 14, 15, 16, 17, 18, 19, 20, 22}),
    ),
)


def get_stage(stage: int) -> LoadSheddingStage:
    """Look up a stage definition.

    Raises:
        KeyError: If the stage is not 0-8.
    """
    for definition in LOAD_SHEDDING_STAGES:
        if definition.stage == stage:
            return definition
    raise KeyError(f"Unknown load shedding stage: {stage}")


@dataclass
class LoadSheddingConfig:
    """Configuration for a load-shedding sweep.

    Attributes:
        tariff_rate: Grid energy rate per kWh.
        backup_value_rate: Value per kWh of load kept on during an outage.
        strategy: Dispatch strategy used outside outage hours.
        dispatch: Dispatch rules; strategy defaults when None.
        concurrency: ``"thread"`` to run stages on a thread pool, or None.
        max_workers: Thread pool size.
    """

    tariff_rate: float = 2.50
    backup_value_rate: float = 5.00
    strategy: DispatchStrategy = DispatchStrategy.SELF_CONSUMPTION
    dispatch: DispatchConfig | None = None
    concurrency: str | None = "thread"
    max_workers: int | None = None


@dataclass
class StageResult:
    """Energy and financial outcome of one load-shedding stage.

    Run totals cover the simulated horizon; ``annual_*`` fields are scaled
    to a year.
    """

    stage: int
    stage_name: str
    hours_per_day: float

    load_kwh: float = 0.0
    solar_kwh: float = 0.0
    grid_import_kwh: float = 0.0
    grid_export_kwh: float = 0.0
    solar_used_kwh: float = 0.0
    battery_discharge_kwh: float = 0.0

    unmet_load_kwh: float = 0.0
    outage_load_kwh: float = 0.0
    outage_served_kwh: float = 0.0
    outage_protection_rate: float = 1.0

    annual_solar_kwh: float = 0.0
    annual_grid_import_kwh: float = 0.0
    annual_grid_export_kwh: float = 0.0
    annual_solar_used_kwh: float = 0.0
    annual_load_shed_hours: float = 0.0
    annual_unmet_load_kwh: float = 0.0

    grid_only_cost: float = 0.0
    with_solar_cost: float = 0.0
    annual_savings: float = 0.0
    backup_value: float = 0.0

    self_consumption_rate: float = 0.0
    solar_coverage_rate: float = 0.0
    specific_yield: float = 0.0
    battery_cycles: float = 0.0

    @property
    def total_value(self) -> float:
        """Bill savings plus backup value."""
        return self.annual_savings + self.backup_value

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary."""
        return asdict(self)


@dataclass
class BaselineComparison:
    """Savings at stages 0, 4 and 8."""

    stage0_savings: float = 0.0
    stage4_savings: float = 0.0
    stage8_savings: float = 0.0
    max_savings_increase: float = 0.0


@dataclass
class LoadSheddingAnalysis:
    """Aggregated results of a load-shedding sweep."""

    config: LoadSheddingConfig
    solar_capacity_kwp: float
    battery_config: BatteryConfig
    stages: list[StageResult] = field(default_factory=list)
    baseline: BaselineComparison = field(default_factory=BaselineComparison)
    recommendations: list[str] = field(default_factory=list)

    def stage_analysis(self, stage: int) -> StageResult:
        """Result for one stage.

        Raises:
            KeyError: If the stage was not part of the sweep.
        """
        for result in self.stages:
            if result.stage == stage:
                return result
        raise KeyError(f"No result for load shedding stage {stage}")

    def optimal_stage(self) -> StageResult | None:
        """Stage where the system delivers the most value."""
        if not self.stages:
            return None
        return max(self.stages, key=lambda s: s.total_value)

    def compute_summary(self) -> None:
        """Fill the baseline comparison and recommendations."""
        stage0 = self.stage_analysis(0)
        stage4 = self.stage_analysis(4)
        stage8 = self.stage_analysis(8)

        increase = 0.0
        if stage0.annual_savings > 0:
            increase = (stage8.total_value - stage0.annual_savings) / (
                stage0.annual_savings
            )
        self.baseline = BaselineComparison(
            stage0_savings=stage0.annual_savings,
            stage4_savings=stage4.total_value,
            stage8_savings=stage8.total_value,
            max_savings_increase=increase,
        )
        self.recommendations = generate_recommendations(
            self.stages, self.battery_config.capacity_kwh
        )


def generate_recommendations(
    stages: list[StageResult], battery_capacity_kwh: float
) -> list[str]:
    """Advisory sizing notes derived from stage 4 and stage 6 outcomes."""
    by_stage = {s.stage: s for s in stages}
    stage4 = by_stage[4]
    stage6 = by_stage[6]
    recommendations = []

    if stage4.outage_protection_rate < PROTECTION_THRESHOLD and battery_capacity_kwh > 0:
        recommendations.append(
            "Consider increasing battery capacity. Current system provides only "
            f"{stage4.outage_protection_rate:.0%} outage protection at Stage 4."
        )

    if battery_capacity_kwh == 0:
        recommendations.append(
            "Adding battery storage would provide backup power during load "
            f"shedding. At Stage 4, {stage4.unmet_load_kwh:.1f} kWh would go "
            "unserved."
        )

    if stage6.solar_coverage_rate < COVERAGE_THRESHOLD:
        recommendations.append(
            f"Solar coverage is {stage6.solar_coverage_rate:.0%} at Stage 6. "
            "Consider increasing solar capacity for better grid independence."
        )

    if stage4.backup_value > stage4.annual_savings * BACKUP_SIGNIFICANCE:
        recommendations.append(
            "Backup power value adds significant ROI. At Stage 4, backup value "
            f"is {stage4.backup_value:.0f}/year additional."
        )

    if not recommendations:
        recommendations.append(WELL_SIZED_MESSAGE)

    return recommendations


class LoadSheddingEngine:
    """Sweep the dispatch simulation across load-shedding stages."""

    def __init__(
        self,
        battery_config: BatteryConfig,
        solar_capacity_kwp: float,
        config: LoadSheddingConfig | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            battery_config: Battery configuration.
            solar_capacity_kwp: Installed solar capacity for specific yield.
            config: Sweep configuration.
        """
        self.battery_config = battery_config
        self.solar_capacity_kwp = solar_capacity_kwp
        self.config = config or LoadSheddingConfig()

    def run_stage(
        self, stage: LoadSheddingStage, load: list[float], solar: list[float]
    ) -> StageResult:
        """Simulate one stage and price its outcome."""
        simulation = simulate_with_outages(
            load,
            solar,
            self.battery_config,
            stage.outage_hours,
            strategy=self.config.strategy,
            dispatch=self.config.dispatch,
        )
        metrics = simulation.metrics
        annual = metrics.annualized()
        tariff = self.config.tariff_rate

        grid_only_cost = annual.total_load_kwh * tariff
        with_solar_cost = annual.total_grid_import_kwh * tariff
        backup_value = annual.outage_served_kwh * (
            self.config.backup_value_rate - tariff
        )

        return StageResult(
            stage=stage.stage,
            stage_name=stage.name,
            hours_per_day=stage.hours_per_day,
            load_kwh=metrics.total_load_kwh,
            solar_kwh=metrics.total_solar_kwh,
            grid_import_kwh=metrics.total_grid_import_kwh,
            grid_export_kwh=metrics.total_grid_export_kwh,
            solar_used_kwh=metrics.total_solar_used_kwh,
            battery_discharge_kwh=metrics.total_battery_discharge_kwh,
            unmet_load_kwh=metrics.total_unmet_load_kwh,
            outage_load_kwh=metrics.outage_load_kwh,
            outage_served_kwh=metrics.outage_served_kwh,
            outage_protection_rate=metrics.outage_protection_rate,
            annual_solar_kwh=annual.total_solar_kwh,
            annual_grid_import_kwh=annual.total_grid_import_kwh,
            annual_grid_export_kwh=annual.total_grid_export_kwh,
            annual_solar_used_kwh=annual.total_solar_used_kwh,
            annual_load_shed_hours=stage.hours_per_day * 365,
            annual_unmet_load_kwh=annual.total_unmet_load_kwh,
            grid_only_cost=grid_only_cost,
            with_solar_cost=with_solar_cost,
            annual_savings=grid_only_cost - with_solar_cost,
            backup_value=backup_value,
            self_consumption_rate=metrics.self_consumption_rate,
            solar_coverage_rate=metrics.solar_coverage_rate,
            specific_yield=safe_ratio(annual.total_solar_kwh, self.solar_capacity_kwp),
            battery_cycles=annual.battery_cycles,
        )

    def run(self, load: list[float], solar: list[float]) -> LoadSheddingAnalysis:
        """Run every stage and summarize.

        Args:
            load: Hourly load profile (24 or 8760 hours).
            solar: Hourly solar profile.

        Returns:
            LoadSheddingAnalysis with per-stage results and recommendations.
        """
        results = map_independent(
            lambda stage: self.run_stage(stage, load, solar),
            LOAD_SHEDDING_STAGES,
            concurrency=self.config.concurrency,
            max_workers=self.config.max_workers,
        )

        analysis = LoadSheddingAnalysis(
            config=self.config,
            solar_capacity_kwp=self.solar_capacity_kwp,
            battery_config=self.battery_config,
            stages=results,
        )
        analysis.compute_summary()

        logging.getLogger(__name__).debug(
            "Load shedding sweep: stage 4 protection=%.3f, stage 8 unmet=%.1f kWh",
            analysis.stage_analysis(4).outage_protection_rate,
            analysis.stage_analysis(8).unmet_load_kwh,
        )
        return analysis


def run_quick_load_shedding_analysis(
    battery_config: BatteryConfig,
    solar_capacity_kwp: float,
    load: list[float],
    solar: list[float],
    tariff_rate: float = 2.50,
    backup_value_rate: float = 5.00,
) -> LoadSheddingAnalysis:
    """Convenience function for a self-consumption load-shedding sweep.

    Args:
        battery_config: Battery configuration.
        solar_capacity_kwp: Installed solar capacity.
        load: Hourly load profile.
        solar: Hourly solar profile.
        tariff_rate: Grid energy rate per kWh.
        backup_value_rate: Value per kWh served during outages.

    Returns:
        LoadSheddingAnalysis with per-stage results.
    """
    config = LoadSheddingConfig(
        tariff_rate=tariff_rate,
        backup_value_rate=backup_value_rate,
    )
    engine = LoadSheddingEngine(battery_config, solar_capacity_kwp, config)
    return engine.run(load, solar)
