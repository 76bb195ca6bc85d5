"""Pricing engines: closed-form reference and Monte Carlo simulation."""

from .analytical import AnalyticalOptionModel
from .base import GreeksModel, PriceModel
from .monte_carlo import MonteCarloEngine

__all__ = [
    "PriceModel",
    "GreeksModel",
    "AnalyticalOptionModel",
    "MonteCarloEngine",
]
