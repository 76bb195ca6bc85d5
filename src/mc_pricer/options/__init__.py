"""Option pricing models, engines, reports, and shared types."""

from .engines import (
    AnalyticalOptionModel,
    GreeksModel,
    MonteCarloEngine,
    PriceModel,
)
from .models import (
    diffusion_multiplier,
    gbsm_d1_d2,
    gbsm_greeks,
    gbsm_parity_gap,
    gbsm_price,
    partition_paths,
)
from .reporting import (
    CollectingReportSink,
    LoggingReportSink,
    MonteCarloReport,
    PrintReportSink,
    ReportSink,
)
from .sweep import run_sweep, sweep_num_paths, sweep_subintervals
from .types import (
    MonteCarloResult,
    OptionContract,
    OptionType,
    OptionTypeInput,
    SimulationConfig,
    normalize_option_type,
)

__all__ = [
    "OptionType",
    "OptionTypeInput",
    "OptionContract",
    "SimulationConfig",
    "MonteCarloResult",
    "normalize_option_type",
    "PriceModel",
    "GreeksModel",
    "AnalyticalOptionModel",
    "MonteCarloEngine",
    "MonteCarloReport",
    "ReportSink",
    "PrintReportSink",
    "LoggingReportSink",
    "CollectingReportSink",
    "gbsm_d1_d2",
    "gbsm_price",
    "gbsm_parity_gap",
    "gbsm_greeks",
    "diffusion_multiplier",
    "partition_paths",
    "run_sweep",
    "sweep_num_paths",
    "sweep_subintervals",
]
