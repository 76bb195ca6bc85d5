"""Monte Carlo engine: Euler-Maruyama paths checked against closed-form BSM."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from mc_pricer.options.engines.analytical import AnalyticalOptionModel
from mc_pricer.options.models.euler_maruyama import (
    partition_paths,
    simulate_payoff_sums,
)
from mc_pricer.options.reporting import MonteCarloReport, PrintReportSink, ReportSink
from mc_pricer.options.types import (
    MonteCarloResult,
    OptionContract,
    OptionType,
    SimulationConfig,
)

logger = logging.getLogger(__name__)


def _standard_deviation(
    sum_payoff: float, sum_square_payoff: float, num_paths: int, r: float, T: float
) -> float:
    """Sample SD of payoffs, rescaled by e^(rT)."""
    n = np.float64(num_paths)
    with np.errstate(divide="ignore", invalid="ignore"):
        variance = (sum_square_payoff - sum_payoff * sum_payoff / n) / (n - 1)
        return float(np.sqrt(variance) * np.exp(r * T))


def _standard_error(sd: float, num_paths: int) -> float:
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(sd / np.sqrt(np.float64(num_paths)))


@dataclass(frozen=True)
class MonteCarloEngine:
    """Simulation pricer wrapping an analytical model by composition.

    The engine keeps its own (immutable) copy of the contract through
    `model`, which also supplies the closed-form reference price reported
    next to the simulated one. Pricing calls are independent: nothing is
    accumulated between calls.

    Simulated paths drift at the risk-free rate `r`; the model's cost of
    carry `b` only enters the analytical reference price.
    """

    model: AnalyticalOptionModel
    config: SimulationConfig = field(default_factory=SimulationConfig)
    report_sink: ReportSink | None = None

    def __post_init__(self) -> None:
        if isinstance(self.model, OptionContract):
            object.__setattr__(self, "model", AnalyticalOptionModel(self.model))

    @classmethod
    def from_option(
        cls,
        option: AnalyticalOptionModel | OptionContract,
        subintervals: int = 100,
        num_paths: int = 10_000,
        *,
        n_workers: int | None = None,
        seed: int | None = None,
        report_sink: ReportSink | None = None,
    ) -> MonteCarloEngine:
        """Build an engine from an option and the discretization settings."""
        config_kwargs: dict[str, int | None] = {
            "subintervals": subintervals,
            "num_paths": num_paths,
            "seed": seed,
        }
        if n_workers is not None:
            config_kwargs["n_workers"] = n_workers
        return cls(
            model=option,
            config=SimulationConfig(**config_kwargs),
            report_sink=report_sink,
        )

    @property
    def contract(self) -> OptionContract:
        return self.model.contract

    @property
    def option_type(self) -> OptionType:
        return self.model.option_type

    @property
    def subintervals(self) -> int:
        return self.config.subintervals

    @property
    def num_paths(self) -> int:
        return self.config.num_paths

    def analytical_price(self) -> float:
        return self.model.price()

    def simulate(
        self, beta: float = 1.0, error_analysis: bool = True
    ) -> MonteCarloResult:
        """Run the simulation and return the price with its statistics.

        Nothing is emitted to the report sink; see :meth:`price`.
        """
        c = self.contract
        cfg = self.config

        with np.errstate(divide="ignore", invalid="ignore"):
            dt = np.float64(c.maturity) / cfg.subintervals
            drift = float(c.rate * dt)
            diffusion = float(c.volatility * np.sqrt(dt))

        partitions = partition_paths(cfg.num_paths, cfg.n_workers)
        streams = np.random.SeedSequence(cfg.seed).spawn(len(partitions))
        logger.debug(
            "Simulating option=%s paths=%d subintervals=%d beta=%s partitions=%s",
            c.id,
            cfg.num_paths,
            cfg.subintervals,
            beta,
            partitions,
        )

        job = {
            "spot": c.spot,
            "strike": c.strike,
            "option_type": c.option_type,
            "drift": drift,
            "diffusion": diffusion,
            "subintervals": cfg.subintervals,
            "beta": beta,
            "batch_size": cfg.batch_size,
            "with_squares": error_analysis,
        }

        t0 = time.perf_counter()
        partials: list[tuple[float, float]] = []

        # Sequential path
        if len(partitions) <= 1:
            for n_paths, stream in zip(partitions, streams):
                partials.append(
                    simulate_payoff_sums(
                        n_paths=n_paths, rng=np.random.default_rng(stream), **job
                    )
                )

        # Threaded path
        else:
            with ThreadPoolExecutor(max_workers=len(partitions)) as executor:
                futures = [
                    executor.submit(
                        simulate_payoff_sums,
                        n_paths=n_paths,
                        rng=np.random.default_rng(stream),
                        **job,
                    )
                    for n_paths, stream in zip(partitions, streams)
                ]

                for fut in futures:
                    partials.append(fut.result())

        sum_payoff = sum(p[0] for p in partials)
        sum_square_payoff = sum(p[1] for p in partials)

        with np.errstate(divide="ignore", invalid="ignore"):
            average_payoff = np.float64(sum_payoff) / cfg.num_paths
            price = float(average_payoff * np.exp(-c.rate * c.maturity))

        sd: float | None = None
        se: float | None = None
        if error_analysis:
            sd = _standard_deviation(
                sum_payoff, sum_square_payoff, cfg.num_paths, c.rate, c.maturity
            )
            se = _standard_error(sd, cfg.num_paths)

        logger.debug(
            "Finished option=%s paths=%d price=%.6f duration_s=%.3f",
            c.id,
            cfg.num_paths,
            price,
            time.perf_counter() - t0,
        )

        return MonteCarloResult(
            price=price,
            analytical_price=self.analytical_price(),
            num_paths=cfg.num_paths,
            subintervals=cfg.subintervals,
            beta=beta,
            sum_payoff=sum_payoff,
            sum_square_payoff=sum_square_payoff,
            sd=sd,
            se=se,
        )

    def price(self, beta: float = 1.0, error_analysis: bool = True) -> float:
        """Return the simulated price.

        With `error_analysis`, the SD/SE report is also sent to the report
        sink (stdout when none was configured).
        """
        result = self.simulate(beta=beta, error_analysis=error_analysis)
        if error_analysis:
            self.emit(MonteCarloReport.from_result(result))
        return result.price

    def emit(self, report: MonteCarloReport) -> None:
        sink = self.report_sink if self.report_sink is not None else PrintReportSink()
        sink(report)
