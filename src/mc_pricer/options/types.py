"""Shared option-pricing dataclasses and aliases."""

from __future__ import annotations

import math
import os
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Literal, TypeAlias


class OptionType(StrEnum):
    """Canonical option side labels used across pricing code."""

    CALL = "call"
    PUT = "put"

    @property
    def label(self) -> str:
        """Display label (``Call``/``Put``) used in reports and descriptions."""
        return self.value.capitalize()


# Tolerant input type accepted at system boundaries (configs/tests).
OptionTypeInput: TypeAlias = (
    OptionType | Literal["call", "put", "Call", "Put", "C", "P", "c", "p"]
)

_OPTION_TYPE_ALIASES: dict[str, OptionType] = {
    "call": OptionType.CALL,
    "c": OptionType.CALL,
    "put": OptionType.PUT,
    "p": OptionType.PUT,
}


def normalize_option_type(option_type: OptionTypeInput) -> OptionType:
    """Normalize option type labels to :class:`OptionType`.

    Raises:
        ValueError: If the label is not one of call/put (any case) or C/P.
    """
    if isinstance(option_type, OptionType):
        return option_type
    key = str(option_type).strip().lower()
    try:
        return _OPTION_TYPE_ALIASES[key]
    except KeyError as e:
        raise ValueError(
            "option_type must be one of {'call', 'put', 'C', 'P'}, "
            f"got {option_type!r}"
        ) from e


@dataclass(frozen=True)
class OptionContract:
    """Contract terms and market inputs for one European option.

    `cost_of_carry` defaults to `rate` when omitted:
    - b = r: Black-Scholes stock option
    - b = r - q: Merton stock option with continuous dividend yield q
    - b = 0: Black-1976 futures option
    - b = r - r_f: Garman-Kohlhagen currency option

    Builders (`with_*`) return a new contract, so instances can be shared
    freely between pricers.
    """

    option_type: OptionTypeInput
    maturity: float
    strike: float
    spot: float
    rate: float
    volatility: float
    cost_of_carry: float | None = None
    id: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "option_type", normalize_option_type(self.option_type)
        )
        if self.cost_of_carry is None or _is_nan(self.cost_of_carry):
            object.__setattr__(self, "cost_of_carry", self.rate)

    def with_type(self, option_type: OptionTypeInput) -> OptionContract:
        return replace(self, option_type=option_type)

    def with_maturity(self, maturity: float) -> OptionContract:
        return replace(self, maturity=maturity)

    def with_strike(self, strike: float) -> OptionContract:
        return replace(self, strike=strike)

    def with_spot(self, spot: float) -> OptionContract:
        return replace(self, spot=spot)

    def with_rate(self, rate: float) -> OptionContract:
        """Return a copy with a new rate; cost of carry is left unchanged."""
        return replace(self, rate=rate)

    def with_volatility(self, volatility: float) -> OptionContract:
        return replace(self, volatility=volatility)

    def with_cost_of_carry(self, cost_of_carry: float) -> OptionContract:
        return replace(self, cost_of_carry=cost_of_carry)

    def to_fields(self) -> list[str]:
        """Return id, type, T, K, S, r, sigma, b as display strings."""
        return [
            str(self.id),
            self.option_type.label,
            f"{self.maturity:.6f}",
            f"{self.strike:.6f}",
            f"{self.spot:.6f}",
            f"{self.rate:.6f}",
            f"{self.volatility:.6f}",
            f"{self.cost_of_carry:.6f}",
        ]

    def describe(self) -> str:
        """Single-line human-readable rendering, suitable for logs."""
        return (
            f"Option {self.id}: {self.option_type.label}, "
            f"T: {self.maturity:g}, K: {self.strike:g}, S: {self.spot:g}, "
            f"r: {self.rate:g}, sigma: {self.volatility:g}, "
            f"b: {self.cost_of_carry:g}"
        )

    def __str__(self) -> str:
        return self.describe()

    def validate(self) -> None:
        """Raise if the contract lies outside the pricing formulas' domain.

        Pricing never calls this; numeric anomalies otherwise propagate as
        NaN/Inf. Entry points call it to fail fast on bad inputs.

        Raises:
            ValueError: Listing every violated rule.
        """
        problems: list[str] = []
        for name in (
            "maturity",
            "strike",
            "spot",
            "rate",
            "volatility",
            "cost_of_carry",
        ):
            if not math.isfinite(getattr(self, name)):
                problems.append(f"{name} must be finite")
        for name in ("maturity", "strike", "spot", "volatility"):
            value = getattr(self, name)
            if math.isfinite(value) and value <= 0:
                problems.append(f"{name} must be > 0")
        if problems:
            raise ValueError(
                f"Invalid option {self.id}: " + "; ".join(problems)
            )


def _is_nan(value: float) -> bool:
    return isinstance(value, float) and math.isnan(value)


def _default_n_workers() -> int:
    return os.cpu_count() or 1


@dataclass(frozen=True)
class SimulationConfig:
    """Monte Carlo discretization and scheduling settings.

    `subintervals` and `num_paths` are deliberately not range-checked:
    values below one give degenerate (NaN or unsimulated) results.

    `seed=None` draws fresh OS entropy on every pricing call; an integer seed
    makes each call reproducible for a fixed `n_workers`.
    """

    subintervals: int = 100
    num_paths: int = 10_000
    n_workers: int = field(default_factory=_default_n_workers)
    seed: int | None = None
    batch_size: int = 65_536

    def __post_init__(self) -> None:
        if self.n_workers < 1:
            raise ValueError("n_workers must be >= 1")
        if self.batch_size < 1:
            raise ValueError("batch_size must be >= 1")


@dataclass(frozen=True, slots=True)
class MonteCarloResult:
    """Simulated price and estimator statistics for one pricing call.

    `sd`/`se` are only populated when error analysis was requested.
    """

    price: float
    analytical_price: float
    num_paths: int
    subintervals: int
    beta: float
    sum_payoff: float
    sum_square_payoff: float
    sd: float | None = None
    se: float | None = None

    @property
    def abs_error(self) -> float:
        """Absolute deviation from the closed-form price."""
        return abs(self.price - self.analytical_price)
