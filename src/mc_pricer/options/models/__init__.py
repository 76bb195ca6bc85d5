"""Analytical and simulation option-pricing models."""

from .black_scholes import (
    gbsm_charm,
    gbsm_color,
    gbsm_d1_d2,
    gbsm_delta,
    gbsm_dvega_dtime,
    gbsm_gamma,
    gbsm_greeks,
    gbsm_lambda,
    gbsm_parity_gap,
    gbsm_price,
    gbsm_rho,
    gbsm_speed,
    gbsm_theta,
    gbsm_ultima,
    gbsm_vanna,
    gbsm_vega,
    gbsm_veta,
    gbsm_vomma,
    gbsm_zomma,
)
from .euler_maruyama import (
    diffusion_multiplier,
    partition_paths,
    simulate_payoff_sums,
    simulate_terminal_spots,
    terminal_payoff,
)

__all__ = [
    "gbsm_d1_d2",
    "gbsm_price",
    "gbsm_parity_gap",
    "gbsm_delta",
    "gbsm_gamma",
    "gbsm_vega",
    "gbsm_theta",
    "gbsm_rho",
    "gbsm_vanna",
    "gbsm_charm",
    "gbsm_speed",
    "gbsm_color",
    "gbsm_dvega_dtime",
    "gbsm_vomma",
    "gbsm_veta",
    "gbsm_zomma",
    "gbsm_lambda",
    "gbsm_ultima",
    "gbsm_greeks",
    "diffusion_multiplier",
    "partition_paths",
    "simulate_terminal_spots",
    "terminal_payoff",
    "simulate_payoff_sums",
]
