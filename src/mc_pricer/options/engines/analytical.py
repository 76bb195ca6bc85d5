"""Closed-form generalized Black-Scholes-Merton engine for one contract."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

from mc_pricer.options.models import black_scholes as gbsm
from mc_pricer.options.types import OptionContract, OptionType, OptionTypeInput

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalyticalOptionModel:
    """Exact price and Greeks of a European option under generalized BSM.

    The model is an immutable value: `with_*` builders return a new model, so
    any engine holding this instance is unaffected by later "mutations".
    Numeric domain errors (zero volatility or maturity, non-positive spot or
    strike) are not raised; they surface as NaN/Inf results.
    """

    contract: OptionContract

    @classmethod
    def from_params(
        cls,
        option_type: OptionTypeInput,
        maturity: float,
        strike: float,
        spot: float,
        rate: float,
        volatility: float,
        id: int = 1,
        cost_of_carry: float | None = None,
    ) -> AnalyticalOptionModel:
        """Build a model from raw contract parameters (b defaults to r)."""
        return cls(
            OptionContract(
                option_type=option_type,
                maturity=maturity,
                strike=strike,
                spot=spot,
                rate=rate,
                volatility=volatility,
                cost_of_carry=cost_of_carry,
                id=id,
            )
        )

    # --- Accessors -----------------------------------------------------------

    @property
    def option_type(self) -> OptionType:
        return self.contract.option_type

    @property
    def maturity(self) -> float:
        return self.contract.maturity

    @property
    def strike(self) -> float:
        return self.contract.strike

    @property
    def spot(self) -> float:
        return self.contract.spot

    @property
    def rate(self) -> float:
        return self.contract.rate

    @property
    def volatility(self) -> float:
        return self.contract.volatility

    @property
    def cost_of_carry(self) -> float:
        return self.contract.cost_of_carry

    @property
    def id(self) -> int:
        return self.contract.id

    # --- Builders ------------------------------------------------------------

    def with_type(self, option_type: OptionTypeInput) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_type(option_type))

    def with_maturity(self, maturity: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_maturity(maturity))

    def with_strike(self, strike: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_strike(strike))

    def with_spot(self, spot: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_spot(spot))

    def with_rate(self, rate: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_rate(rate))

    def with_volatility(self, volatility: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_volatility(volatility))

    def with_cost_of_carry(self, cost_of_carry: float) -> AnalyticalOptionModel:
        return AnalyticalOptionModel(self.contract.with_cost_of_carry(cost_of_carry))

    # --- Display -------------------------------------------------------------

    def to_fields(self) -> list[str]:
        return self.contract.to_fields()

    def describe(self) -> str:
        return self.contract.describe()

    def __str__(self) -> str:
        return self.describe()

    # --- Pricing -------------------------------------------------------------

    def _market(self) -> tuple[float, float, float, float, float, float]:
        c = self.contract
        return c.spot, c.strike, c.maturity, c.volatility, c.rate, c.cost_of_carry

    def _discounted_strike(self) -> float:
        c = self.contract
        return float(c.strike * np.exp(-np.float64(c.rate) * c.maturity))

    def price(self) -> float:
        return gbsm.gbsm_price(*self._market(), option_type=self.option_type)

    def price_by_put_call_parity(self) -> float:
        """Same-type price shifted by the parity offset `K e^(-rT) - S`.

        A call adds `K e^(-rT) - S` to its own price and a put adds
        `S - K e^(-rT)`. Use :meth:`parity_counterpart_price` for the
        opposite-side price implied by put-call parity.
        """
        offset = self._discounted_strike() - self.spot
        if self.option_type == OptionType.CALL:
            return self.price() + offset
        return self.price() - offset

    def parity_counterpart_price(self) -> float:
        """Price of the opposite option type from `C - P = S e^((b-r)T) - K e^(-rT)`."""
        S, K, T, _, r, b = self._market()
        gap = gbsm.gbsm_parity_gap(S, K, T, r, b)
        if self.option_type == OptionType.CALL:
            return self.price() - gap
        return self.price() + gap

    def check_put_call_parity(
        self, market_price: float, threshold: float = 0.05
    ) -> None:
        """Log whether `market_price` is within `threshold` of the parity price.

        The relative deviation is measured against
        :meth:`price_by_put_call_parity`. Nothing is returned; the outcome is
        reported at INFO (satisfied) or WARNING (violated) level.
        """
        implied = np.float64(self.price_by_put_call_parity())
        with np.errstate(divide="ignore", invalid="ignore"):
            rel_diff = float(abs(market_price - implied) / implied)

        if rel_diff <= threshold:
            logger.info(
                "Put-call parity satisfied within %s threshold "
                "(option=%s market=%.6f implied=%.6f rel_diff=%.4f)",
                threshold,
                self.id,
                market_price,
                implied,
                rel_diff,
            )
        else:
            logger.warning(
                "Put-call parity not satisfied within %s threshold "
                "(option=%s market=%.6f implied=%.6f rel_diff=%.4f)",
                threshold,
                self.id,
                market_price,
                implied,
                rel_diff,
            )

    # --- Greeks --------------------------------------------------------------

    def delta(self) -> float:
        return gbsm.gbsm_delta(*self._market(), option_type=self.option_type)

    def gamma(self) -> float:
        return gbsm.gbsm_gamma(*self._market())

    def vega(self) -> float:
        return gbsm.gbsm_vega(*self._market())

    def theta(self) -> float:
        return gbsm.gbsm_theta(*self._market(), option_type=self.option_type)

    def rho(self) -> float:
        return gbsm.gbsm_rho(*self._market(), option_type=self.option_type)

    def vanna(self) -> float:
        return gbsm.gbsm_vanna(*self._market())

    def charm(self) -> float:
        return gbsm.gbsm_charm(*self._market(), option_type=self.option_type)

    def speed(self) -> float:
        return gbsm.gbsm_speed(*self._market())

    def color(self) -> float:
        return gbsm.gbsm_color(*self._market())

    def dvega_dtime(self) -> float:
        return gbsm.gbsm_dvega_dtime(*self._market())

    def vomma(self) -> float:
        return gbsm.gbsm_vomma(*self._market())

    def veta(self) -> float:
        return gbsm.gbsm_veta(*self._market())

    def zomma(self) -> float:
        return gbsm.gbsm_zomma(*self._market())

    def lambda_(self) -> float:
        """Elasticity `delta * S / price`; undefined when the price is zero."""
        return gbsm.gbsm_lambda(*self._market(), option_type=self.option_type)

    elasticity = lambda_

    def ultima(self) -> float:
        return gbsm.gbsm_ultima(*self._market())

    def greeks(self) -> dict[str, float]:
        """Return price and every analytic Greek keyed by name."""
        return gbsm.gbsm_greeks(*self._market(), option_type=self.option_type)

    # --- Finite differences --------------------------------------------------

    def _bumped_prices(self, h: float) -> tuple[float, float]:
        up = self.with_spot(self.spot + h).price()
        down = self.with_spot(self.spot - h).price()
        return up, down

    def numeric_delta(self, h: float) -> float:
        """Central-difference delta with spot bump `h` (must be nonzero)."""
        up, down = self._bumped_prices(h)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float((np.float64(up) - down) / (2 * np.float64(h)))

    def numeric_gamma(self, h: float) -> float:
        """Central-difference gamma with spot bump `h` (must be nonzero)."""
        up, down = self._bumped_prices(h)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(
                (np.float64(up) - 2 * self.price() + down) / (np.float64(h) * h)
            )
