"""Convergence sweeps over path counts and subinterval counts."""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from mc_pricer.options.engines.analytical import AnalyticalOptionModel
from mc_pricer.options.engines.monte_carlo import MonteCarloEngine
from mc_pricer.options.reporting import MonteCarloReport, ReportSink
from mc_pricer.options.types import MonteCarloResult, SimulationConfig

logger = logging.getLogger(__name__)

SWEEP_COLUMNS: list[str] = [
    "option_id",
    "option_type",
    "simulations",
    "subintervals",
    "beta",
    "bsm_price",
    "mc_price",
    "sd",
    "se",
    "abs_error",
]


def geometric_grid(start: int, factor: int, steps: int) -> list[int]:
    """Return `[start, start*factor, ..., start*factor**(steps-1)]`."""
    if start < 1:
        raise ValueError("start must be >= 1")
    if factor < 1:
        raise ValueError("factor must be >= 1")
    if steps < 0:
        raise ValueError("steps must be >= 0")
    return [start * factor**i for i in range(steps)]


def point_seeds(seed: int | None, n: int) -> list[int | None]:
    """Derive `n` reproducible, distinct integer seeds from `seed`.

    `None` stays unseeded for every point.
    """
    if seed is None:
        return [None] * n
    if n == 0:
        return []
    return [int(s) for s in np.random.SeedSequence(seed).generate_state(n)]


def _row(model: AnalyticalOptionModel, result: MonteCarloResult) -> dict:
    return {
        "option_id": model.id,
        "option_type": model.option_type.value,
        "simulations": result.num_paths,
        "subintervals": result.subintervals,
        "beta": result.beta,
        "bsm_price": result.analytical_price,
        "mc_price": result.price,
        "sd": result.sd,
        "se": result.se,
        "abs_error": result.abs_error,
    }


def run_sweep(
    model: AnalyticalOptionModel,
    configs: list[SimulationConfig],
    *,
    beta: float = 1.0,
    report_sink: ReportSink | None = None,
) -> pd.DataFrame:
    """Price `model` once per config with error analysis; one row per run.

    Each run's report is forwarded to `report_sink` when one is given.
    """
    rows: list[dict] = []
    for cfg in configs:
        engine = MonteCarloEngine(model=model, config=cfg)
        result = engine.simulate(beta=beta, error_analysis=True)
        if report_sink is not None:
            report_sink(MonteCarloReport.from_result(result))
        logger.info(
            "option=%s paths=%d subintervals=%d mc=%.6f bsm=%.6f se=%.6f",
            model.id,
            result.num_paths,
            result.subintervals,
            result.price,
            result.analytical_price,
            result.se,
        )
        rows.append(_row(model, result))

    return pd.DataFrame(rows, columns=SWEEP_COLUMNS)


def sweep_num_paths(
    model: AnalyticalOptionModel,
    *,
    subintervals: int = 100,
    start: int = 10,
    factor: int = 10,
    steps: int = 7,
    beta: float = 1.0,
    n_workers: int | None = None,
    seed: int | None = None,
    report_sink: ReportSink | None = None,
) -> pd.DataFrame:
    """Grow the path count geometrically at a fixed subinterval count.

    Each point draws from its own seed derived from `seed`, so the points
    are independent samples rather than prefixes of one another.
    """
    grid = geometric_grid(start, factor, steps)
    configs = [
        _config(subintervals, n_paths, n_workers, point_seed)
        for n_paths, point_seed in zip(grid, point_seeds(seed, len(grid)))
    ]
    return run_sweep(model, configs, beta=beta, report_sink=report_sink)


def sweep_subintervals(
    model: AnalyticalOptionModel,
    *,
    num_paths: int = 1_000,
    start: int = 10,
    factor: int = 10,
    steps: int = 7,
    beta: float = 1.0,
    n_workers: int | None = None,
    seed: int | None = None,
    report_sink: ReportSink | None = None,
) -> pd.DataFrame:
    """Grow the subinterval count geometrically at a fixed path count.

    Per-point seeds are derived from `seed` as in `sweep_num_paths`.
    """
    grid = geometric_grid(start, factor, steps)
    configs = [
        _config(n_steps, num_paths, n_workers, point_seed)
        for n_steps, point_seed in zip(grid, point_seeds(seed, len(grid)))
    ]
    return run_sweep(model, configs, beta=beta, report_sink=report_sink)


def _config(
    subintervals: int, num_paths: int, n_workers: int | None, seed: int | None
) -> SimulationConfig:
    if n_workers is None:
        return SimulationConfig(
            subintervals=subintervals, num_paths=num_paths, seed=seed
        )
    return SimulationConfig(
        subintervals=subintervals,
        num_paths=num_paths,
        n_workers=n_workers,
        seed=seed,
    )
