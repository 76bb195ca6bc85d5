"""Generalized Black-Scholes-Merton pricing and Greeks for European options.

All functions take the cost of carry `b` alongside the rate `r`:
`b = r` is the stock case, `b = r - q` adds a continuous dividend yield,
`b = 0` gives Black-76 futures options and `b = r - r_f` Garman-Kohlhagen FX
options. When `b` is None it defaults to `r`.

Inputs are not range-checked. A zero volatility or maturity, or a
non-positive spot/strike, yields NaN/Inf rather than an exception.

Time conventions: `theta`, `charm`, `color` and `dvega_dtime` are
derivatives with respect to calendar time (minus the derivative with respect
to time to maturity); `veta` is the derivative of vega with respect to time
to maturity.
"""

from __future__ import annotations

import functools

import numpy as np
from scipy.stats import norm

from mc_pricer.options.types import OptionType, OptionTypeInput, normalize_option_type


def _quiet_fp(func):
    """Let NaN/Inf propagate without numpy floating-point warnings."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        with np.errstate(divide="ignore", invalid="ignore", over="ignore"):
            return func(*args, **kwargs)

    return wrapper


def _carry(r: float, b: float | None) -> float:
    return r if b is None else b


@_quiet_fp
def gbsm_d1_d2(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> tuple[float, float]:
    """Compute d1 and d2 for the generalized Black-Scholes-Merton model."""
    S, K, T, sigma = np.float64(S), np.float64(K), np.float64(T), np.float64(sigma)
    b = np.float64(_carry(r, b))
    vol_sqrt_t = sigma * np.sqrt(T)
    d1 = (np.log(S / K) + (b + 0.5 * sigma**2) * T) / vol_sqrt_t
    d2 = d1 - vol_sqrt_t
    return float(d1), float(d2)


def _carry_factor(T: float, r: float, b: float) -> float:
    """Return e^((b - r) T), the discount on the carried underlying."""
    return np.exp((np.float64(b) - r) * T)


@_quiet_fp
def gbsm_price(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Generalized Black-Scholes-Merton price."""
    opt_type = normalize_option_type(option_type)
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    carried_spot = S * _carry_factor(T, r, b)
    discounted_strike = K * np.exp(-np.float64(r) * T)

    if opt_type == OptionType.CALL:
        return float(carried_spot * norm.cdf(d1) - discounted_strike * norm.cdf(d2))
    return float(
        discounted_strike * (1.0 - norm.cdf(d2)) - carried_spot * (1.0 - norm.cdf(d1))
    )


@_quiet_fp
def gbsm_parity_gap(
    S: float,
    K: float,
    T: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """Return `C - P = S e^((b-r)T) - K e^(-rT)` from put-call parity."""
    b = _carry(r, b)
    return float(S * _carry_factor(T, r, b) - K * np.exp(-np.float64(r) * T))


@_quiet_fp
def gbsm_delta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Sensitivity of price to spot."""
    opt_type = normalize_option_type(option_type)
    b = _carry(r, b)
    d1, _ = gbsm_d1_d2(S, K, T, sigma, r, b)
    carry = _carry_factor(T, r, b)
    if opt_type == OptionType.CALL:
        return float(carry * norm.cdf(d1))
    return float(carry * (norm.cdf(d1) - 1.0))


@_quiet_fp
def gbsm_gamma(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """Second derivative of price with respect to spot."""
    b = _carry(r, b)
    d1, _ = gbsm_d1_d2(S, K, T, sigma, r, b)
    return float(
        _carry_factor(T, r, b) * norm.pdf(d1) / (S * np.float64(sigma) * np.sqrt(T))
    )


@_quiet_fp
def gbsm_vega(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """Sensitivity of price to volatility, per +1.0 volatility."""
    b = _carry(r, b)
    d1, _ = gbsm_d1_d2(S, K, T, sigma, r, b)
    return float(S * _carry_factor(T, r, b) * norm.pdf(d1) * np.sqrt(np.float64(T)))


@_quiet_fp
def gbsm_theta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Time decay per +1.0 calendar year."""
    opt_type = normalize_option_type(option_type)
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    carried_spot = S * _carry_factor(T, r, b)
    discounted_strike = K * np.exp(-np.float64(r) * T)
    term1 = -carried_spot * norm.pdf(d1) * sigma / (2.0 * np.sqrt(np.float64(T)))

    if opt_type == OptionType.CALL:
        term2 = -(b - r) * carried_spot * norm.cdf(d1)
        term3 = -r * discounted_strike * norm.cdf(d2)
    else:
        term2 = (b - r) * carried_spot * norm.cdf(-d1)
        term3 = r * discounted_strike * norm.cdf(-d2)

    return float(term1 + term2 + term3)


@_quiet_fp
def gbsm_rho(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Rate sensitivity per +1.0 rate, with the carry moving one-for-one."""
    opt_type = normalize_option_type(option_type)
    _, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    strike_annuity = K * T * np.exp(-np.float64(r) * T)
    if opt_type == OptionType.CALL:
        return float(strike_annuity * norm.cdf(d2))
    return float(-strike_annuity * norm.cdf(-d2))


@_quiet_fp
def gbsm_vanna(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(delta)/d(sigma), equivalently d(vega)/d(spot)."""
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    return float(-_carry_factor(T, r, b) * norm.pdf(d1) * d2 / np.float64(sigma))


def _d1_time_derivative(
    T: float, sigma: float, b: float, d2: float
) -> float:
    """Return d(d1)/dT = b / (sigma sqrt(T)) - d2 / (2T)."""
    T = np.float64(T)
    return b / (sigma * np.sqrt(T)) - d2 / (2.0 * T)


@_quiet_fp
def gbsm_charm(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Delta decay: d(delta)/d(calendar time)."""
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    delta = gbsm_delta(S, K, T, sigma, r, b, option_type)
    d1_dT = _d1_time_derivative(T, sigma, b, d2)
    return float(-(b - r) * delta - _carry_factor(T, r, b) * norm.pdf(d1) * d1_dT)


@_quiet_fp
def gbsm_speed(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(gamma)/d(spot)."""
    d1, _ = gbsm_d1_d2(S, K, T, sigma, r, b)
    gamma = gbsm_gamma(S, K, T, sigma, r, b)
    vol_sqrt_t = np.float64(sigma) * np.sqrt(T)
    return float(-np.float64(gamma) / S * (1.0 + d1 / vol_sqrt_t))


@_quiet_fp
def gbsm_color(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """Gamma decay: d(gamma)/d(calendar time)."""
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    gamma = gbsm_gamma(S, K, T, sigma, r, b)
    d1_dT = _d1_time_derivative(T, sigma, b, d2)
    return float(gamma * (r - b + d1 * d1_dT + 1.0 / (2.0 * np.float64(T))))


@_quiet_fp
def gbsm_dvega_dtime(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """Vega decay: d(vega)/d(calendar time)."""
    b = _carry(r, b)
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    vega = gbsm_vega(S, K, T, sigma, r, b)
    d1_dT = _d1_time_derivative(T, sigma, b, d2)
    return float(vega * (r - b + d1 * d1_dT - 1.0 / (2.0 * np.float64(T))))


def gbsm_veta(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(vega)/d(time to maturity)."""
    return -gbsm_dvega_dtime(S, K, T, sigma, r, b)


@_quiet_fp
def gbsm_vomma(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(vega)/d(sigma)."""
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    vega = gbsm_vega(S, K, T, sigma, r, b)
    return float(vega * d1 * d2 / np.float64(sigma))


@_quiet_fp
def gbsm_zomma(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(gamma)/d(sigma)."""
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    gamma = gbsm_gamma(S, K, T, sigma, r, b)
    return float(gamma * (d1 * d2 - 1.0) / np.float64(sigma))


@_quiet_fp
def gbsm_lambda(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> float:
    """Elasticity: percentage price change per percentage spot change."""
    delta = gbsm_delta(S, K, T, sigma, r, b, option_type)
    price = gbsm_price(S, K, T, sigma, r, b, option_type)
    return float(np.float64(delta) * S / np.float64(price))


@_quiet_fp
def gbsm_ultima(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
) -> float:
    """d(vomma)/d(sigma)."""
    d1, d2 = gbsm_d1_d2(S, K, T, sigma, r, b)
    vega = gbsm_vega(S, K, T, sigma, r, b)
    sigma = np.float64(sigma)
    return float(-vega / sigma**2 * (d1 * d2 * (1.0 - d1 * d2) + d1**2 + d2**2))


def gbsm_greeks(
    S: float,
    K: float,
    T: float,
    sigma: float,
    r: float = 0.0,
    b: float | None = None,
    option_type: OptionTypeInput = OptionType.CALL,
) -> dict[str, float]:
    """Return the generalized BSM price and every Greek for one option."""
    return {
        "price": gbsm_price(S, K, T, sigma, r, b, option_type),
        "delta": gbsm_delta(S, K, T, sigma, r, b, option_type),
        "gamma": gbsm_gamma(S, K, T, sigma, r, b),
        "vega": gbsm_vega(S, K, T, sigma, r, b),
        "theta": gbsm_theta(S, K, T, sigma, r, b, option_type),
        "rho": gbsm_rho(S, K, T, sigma, r, b, option_type),
        "vanna": gbsm_vanna(S, K, T, sigma, r, b),
        "charm": gbsm_charm(S, K, T, sigma, r, b, option_type),
        "speed": gbsm_speed(S, K, T, sigma, r, b),
        "color": gbsm_color(S, K, T, sigma, r, b),
        "dvega_dtime": gbsm_dvega_dtime(S, K, T, sigma, r, b),
        "vomma": gbsm_vomma(S, K, T, sigma, r, b),
        "veta": gbsm_veta(S, K, T, sigma, r, b),
        "zomma": gbsm_zomma(S, K, T, sigma, r, b),
        "lambda": gbsm_lambda(S, K, T, sigma, r, b, option_type),
        "ultima": gbsm_ultima(S, K, T, sigma, r, b),
    }
