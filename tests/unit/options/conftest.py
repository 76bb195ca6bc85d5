import pytest

from mc_pricer.options import AnalyticalOptionModel, OptionType


@pytest.fixture
def reference_call() -> AnalyticalOptionModel:
    """Three-month out-of-the-money stock call (b = r)."""
    return AnalyticalOptionModel.from_params(
        OptionType.CALL, 0.25, 65.0, 60.0, 0.08, 0.30, id=1
    )


@pytest.fixture
def reference_put() -> AnalyticalOptionModel:
    """One-year at-the-money put with zero rate."""
    return AnalyticalOptionModel.from_params(
        OptionType.PUT, 1.0, 100.0, 100.0, 0.0, 0.20, id=2
    )


@pytest.fixture
def carry_model():
    """Factory for a model whose cost of carry differs from the rate."""

    def _make(option_type: OptionType = OptionType.CALL) -> AnalyticalOptionModel:
        return AnalyticalOptionModel.from_params(
            option_type,
            maturity=0.5,
            strike=95.0,
            spot=100.0,
            rate=0.05,
            volatility=0.25,
            id=7,
            cost_of_carry=0.02,
        )

    return _make
