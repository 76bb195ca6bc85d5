"""Interface for option-pricing engines."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class PriceModel(Protocol):
    """Minimum pricing capability shared by analytical and simulation engines."""

    def price(self) -> float:
        """Return option value for the engine's contract."""


@runtime_checkable
class GreeksModel(Protocol):
    """Optional extension for engines that provide closed-form sensitivities."""

    def greeks(self) -> dict[str, float]:
        """Return option value and sensitivities keyed by name."""
