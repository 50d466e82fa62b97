"""Load-shedding scenario sweep."""

from btm_engine.scenarios.load_shedding import (
    LOAD_SHEDDING_STAGES,
    LoadSheddingAnalysis,
    LoadSheddingConfig,
    LoadSheddingEngine,
    StageResult,
    run_quick_load_shedding_analysis,
)

__all__ = [
    "LOAD_SHEDDING_STAGES",
    "LoadSheddingAnalysis",
    "LoadSheddingConfig",
    "LoadSheddingEngine",
    "StageResult",
    "run_quick_load_shedding_analysis",
]
