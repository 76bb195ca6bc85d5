"""Euler-Maruyama path kernel for elasticity-scaled diffusions.

The kernel discretizes

    dS = r S dt + sigma S^beta dW

directly (no log transform): with `drift = r dt` and
`diffusion = sigma sqrt(dt)` each step is

    S_{k+1} = S_k + drift * S_k + diffusion * S_k^beta * Z_k

`beta = 1` is geometric Brownian motion; `beta = 0.5` and `beta = 2` are the
usual CEV special cases. Paths can go negative for large steps; negative
spots raised to a fractional power produce NaN, which propagates into the
payoff sums.
"""

from __future__ import annotations

from collections.abc import Callable

import numpy as np

from mc_pricer.options.types import OptionType, OptionTypeInput, normalize_option_type

DiffusionMultiplier = Callable[[np.ndarray], np.ndarray]


def _identity(x: np.ndarray) -> np.ndarray:
    return x


def _square(x: np.ndarray) -> np.ndarray:
    return x * x


# Exact shortcuts for the common elasticities; must agree with np.power.
_SPECIAL_MULTIPLIERS: dict[float, DiffusionMultiplier] = {
    1.0: _identity,
    0.5: np.sqrt,
    2.0: _square,
}


def diffusion_multiplier(beta: float) -> DiffusionMultiplier:
    """Return the vectorized map `x -> x**beta` used in the diffusion term."""
    special = _SPECIAL_MULTIPLIERS.get(float(beta))
    if special is not None:
        return special

    def _power(x: np.ndarray) -> np.ndarray:
        return np.power(x, beta)

    return _power


def partition_paths(num_paths: int, n_workers: int) -> list[int]:
    """Split `num_paths` trials into near-equal, non-empty partitions.

    At most `n_workers` partitions are returned and their sizes differ by at
    most one. A non-positive `num_paths` yields no partitions.
    """
    if n_workers < 1:
        raise ValueError("n_workers must be >= 1")
    if num_paths <= 0:
        return []

    n_parts = min(n_workers, num_paths)
    base, extra = divmod(num_paths, n_parts)
    return [base + 1 if i < extra else base for i in range(n_parts)]


def simulate_terminal_spots(
    *,
    spot: float,
    drift: float,
    diffusion: float,
    subintervals: int,
    n_paths: int,
    multiplier: DiffusionMultiplier,
    rng: np.random.Generator,
) -> np.ndarray:
    """Simulate `n_paths` Euler-Maruyama paths and return the terminal spots.

    With `subintervals < 1` no step is taken and every path ends at `spot`.
    """
    spots = np.full(n_paths, spot, dtype=float)
    for _ in range(subintervals):
        z = rng.standard_normal(n_paths)
        spots = spots + drift * spots + diffusion * multiplier(spots) * z
    return spots


def terminal_payoff(
    spots: np.ndarray, strike: float, option_type: OptionTypeInput
) -> np.ndarray:
    """European payoff at expiry. NaN spots give NaN payoffs."""
    opt_type = normalize_option_type(option_type)
    if opt_type == OptionType.CALL:
        return np.maximum(spots - strike, 0.0)
    return np.maximum(strike - spots, 0.0)


def simulate_payoff_sums(
    *,
    spot: float,
    strike: float,
    option_type: OptionTypeInput,
    drift: float,
    diffusion: float,
    subintervals: int,
    n_paths: int,
    beta: float,
    rng: np.random.Generator,
    batch_size: int = 65_536,
    with_squares: bool = True,
) -> tuple[float, float]:
    """Return the sum and sum of squares of payoffs over `n_paths` paths.

    Paths are simulated in vectorized blocks of at most `batch_size` to bound
    memory. The sum of squares is 0.0 when `with_squares` is False.
    """
    multiplier = diffusion_multiplier(beta)
    opt_type = normalize_option_type(option_type)

    sum_payoff = 0.0
    sum_square_payoff = 0.0
    remaining = n_paths

    with np.errstate(over="ignore", invalid="ignore"):
        while remaining > 0:
            size = min(batch_size, remaining)
            spots = simulate_terminal_spots(
                spot=spot,
                drift=drift,
                diffusion=diffusion,
                subintervals=subintervals,
                n_paths=size,
                multiplier=multiplier,
                rng=rng,
            )
            payoff = terminal_payoff(spots, strike, opt_type)
            sum_payoff += float(payoff.sum())
            if with_squares:
                sum_square_payoff += float(np.dot(payoff, payoff))
            remaining -= size

    return sum_payoff, sum_square_payoff
