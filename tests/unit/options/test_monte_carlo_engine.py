import math

import numpy as np
import pytest

from mc_pricer.options import (
    AnalyticalOptionModel,
    CollectingReportSink,
    MonteCarloEngine,
    OptionContract,
    PriceModel,
    SimulationConfig,
)
from mc_pricer.options.models import euler_maruyama as em


def _engine(model, *, paths=10_000, steps=50, workers=2, seed=7, sink=None):
    return MonteCarloEngine(
        model=model,
        config=SimulationConfig(
            subintervals=steps, num_paths=paths, n_workers=workers, seed=seed
        ),
        report_sink=sink,
    )


def test_engine_is_a_price_model(reference_call):
    assert isinstance(_engine(reference_call), PriceModel)


def test_from_option_wraps_contract():
    contract = OptionContract("call", 0.25, 65.0, 60.0, 0.08, 0.3)
    engine = MonteCarloEngine.from_option(contract, 20, 500, n_workers=3, seed=1)

    assert isinstance(engine.model, AnalyticalOptionModel)
    assert engine.contract == contract
    assert engine.subintervals == 20
    assert engine.num_paths == 500
    assert engine.config.n_workers == 3


@pytest.mark.slow
def test_seeded_price_converges_to_closed_form(reference_call):
    engine = _engine(reference_call, paths=200_000, steps=50, workers=4, seed=2024)
    result = engine.simulate()

    assert result.analytical_price == pytest.approx(reference_call.price())
    assert abs(result.price - result.analytical_price) < 5 * result.se + 0.01


def test_single_worker_runs_sequentially(reference_put):
    result = _engine(reference_put, paths=20_000, steps=20, workers=1).simulate()

    assert abs(result.price - result.analytical_price) < 5 * result.se + 0.05


def test_same_seed_reproduces_price(reference_call):
    first = _engine(reference_call, seed=99).simulate()
    second = _engine(reference_call, seed=99).simulate()
    other = _engine(reference_call, seed=100).simulate()

    assert first.price == second.price
    assert first.sum_square_payoff == second.sum_square_payoff
    assert other.price != first.price


def test_zero_volatility_is_deterministic_compounding():
    model = AnalyticalOptionModel.from_params("call", 1.0, 90.0, 100.0, 0.05, 0.0)
    result = _engine(model, paths=1_000, steps=10, workers=3).simulate(
        error_analysis=False
    )

    expected = (100.0 * 1.005**10 - 90.0) * math.exp(-0.05)
    assert result.price == pytest.approx(expected, rel=1e-12)
    assert result.sd is None
    assert result.se is None


def test_error_statistics_follow_payoff_sums(reference_put):
    result = _engine(reference_put, paths=5_000, steps=20).simulate()
    n = result.num_paths

    variance = (result.sum_square_payoff - result.sum_payoff**2 / n) / (n - 1)
    sd = math.sqrt(variance)  # r = 0, no rescaling
    assert result.sd == pytest.approx(sd)
    assert result.se == pytest.approx(sd / math.sqrt(n))
    assert result.price == pytest.approx(result.sum_payoff / n)


def test_standard_error_shrinks_with_path_count(reference_put):
    small = _engine(reference_put, paths=10_000, steps=10, seed=3).simulate()
    large = _engine(reference_put, paths=40_000, steps=10, seed=3).simulate()

    assert large.se / small.se == pytest.approx(0.5, rel=0.1)


@pytest.mark.parametrize(
    ("option_type", "spot", "strike"),
    [("call", 1000.0, 10.0), ("put", 10.0, 1000.0)],
)
def test_deep_in_the_money_prices_near_discounted_intrinsic(
    option_type, spot, strike
):
    model = AnalyticalOptionModel.from_params(
        option_type, 0.5, strike, spot, 0.05, 0.2
    )
    result = _engine(model, paths=20_000, steps=20, seed=13).simulate()

    intrinsic = abs(spot - strike * math.exp(-0.05 * 0.5))
    assert result.analytical_price == pytest.approx(intrinsic, rel=1e-9)
    assert abs(result.price - intrinsic) < 5 * result.se + 0.05


@pytest.mark.parametrize(
    ("option_type", "spot", "strike"),
    [("call", 10.0, 1000.0), ("put", 1000.0, 10.0)],
)
def test_deep_out_of_the_money_prices_zero(option_type, spot, strike):
    model = AnalyticalOptionModel.from_params(
        option_type, 0.5, strike, spot, 0.05, 0.2
    )
    result = _engine(model, paths=20_000, steps=20, seed=13).simulate()

    assert result.price == 0.0
    assert result.sd == 0.0
    assert result.se == 0.0


@pytest.mark.slow
def test_discretization_error_shrinks_with_subintervals(reference_call):
    results = [
        _engine(reference_call, paths=200_000, steps=steps, workers=4, seed=31)
        .simulate()
        for steps in (1, 10, 100)
    ]
    errors = [r.abs_error for r in results]
    tol = 4 * max(r.se for r in results)

    # One Euler step leaves a normal terminal price, which underprices the call.
    assert errors[0] > errors[1] + tol
    assert errors[2] < errors[1] + tol
    assert errors[2] < tol


@pytest.mark.parametrize(
    ("beta", "volatility"),
    [(0.5, 2.0), (2.0, 0.002)],
)
def test_special_elasticities_match_general_power(
    monkeypatch, reference_call, beta, volatility
):
    model = reference_call.with_volatility(volatility)
    shortcut = _engine(model, paths=5_000, steps=20, seed=5).simulate(beta=beta)

    monkeypatch.setattr(em, "_SPECIAL_MULTIPLIERS", {})
    general = _engine(model, paths=5_000, steps=20, seed=5).simulate(beta=beta)

    np.testing.assert_allclose(general.price, shortcut.price, rtol=1e-10)
    np.testing.assert_allclose(general.sd, shortcut.sd, rtol=1e-10)


def test_zero_paths_yields_nan_without_raising(reference_call):
    result = _engine(reference_call, paths=0).simulate()

    assert math.isnan(result.price)
    assert result.num_paths == 0


def test_simulated_drift_ignores_cost_of_carry(carry_model):
    model = carry_model()
    stock = model.with_cost_of_carry(model.rate)

    carried = _engine(model, seed=21).simulate()
    plain = _engine(stock, seed=21).simulate()

    assert carried.price == plain.price
    assert carried.analytical_price != pytest.approx(plain.analytical_price)


def test_price_emits_one_report_with_error_analysis(reference_call):
    sink = CollectingReportSink()
    engine = _engine(reference_call, paths=1_000, steps=10, sink=sink)

    price = engine.price()
    engine.price(error_analysis=False)
    engine.simulate()

    assert len(sink.reports) == 1
    report = sink.reports[0]
    assert report.mc_price == price
    assert report.simulations == 1_000
    assert report.subintervals == 10
    assert report.bsm_price == pytest.approx(reference_call.price())


def test_price_prints_report_to_stdout_by_default(reference_call, capsys):
    _engine(reference_call, paths=500, steps=5).price()

    out = capsys.readouterr().out.splitlines()
    assert len(out) == 2
    header = "Simulations Subintervals BSM Price MC Price SD SE"
    assert out[0].split() == header.split()
    assert out[1].split()[:2] == ["500", "5"]


def test_engine_keeps_its_own_model(reference_call):
    engine = _engine(reference_call)
    reference_call.with_spot(1_000.0)

    assert engine.model.spot == 60.0
