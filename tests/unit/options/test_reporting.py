import io
import logging

import numpy as np
import pytest

from mc_pricer.options import (
    CollectingReportSink,
    LoggingReportSink,
    MonteCarloReport,
    MonteCarloResult,
    PrintReportSink,
    ReportSink,
)
from mc_pricer.options.reporting import REPORT_COLUMNS


def _report(**kwargs) -> MonteCarloReport:
    params = {
        "simulations": 10_000,
        "subintervals": 100,
        "bsm_price": 2.133372,
        "mc_price": 2.1412345,
        "sd": 3.9,
        "se": 0.039,
    }
    params.update(kwargs)
    return MonteCarloReport(**params)


def _result(**kwargs) -> MonteCarloResult:
    params = {
        "price": 2.14,
        "analytical_price": 2.13,
        "num_paths": 1_000,
        "subintervals": 10,
        "beta": 1.0,
        "sum_payoff": 2_180.0,
        "sum_square_payoff": 19_000.0,
        "sd": 3.9,
        "se": 0.12,
    }
    params.update(kwargs)
    return MonteCarloResult(**params)


def test_table_is_header_and_row_with_fixed_width_fields():
    lines = _report().format_table().split("\n")

    assert len(lines) == 2
    assert lines[0] == "".join(f"{name:>20}" for name in REPORT_COLUMNS)
    assert len(lines[1]) == 6 * 20
    assert lines[1][:20] == f"{10_000:>20}"


def test_row_uses_six_significant_digits():
    cells = _report().format_row().split()

    assert cells == ["10000", "100", "2.13337", "2.14123", "3.9", "0.039"]


def test_numpy_integers_are_rendered_as_integers():
    cells = _report(simulations=np.int64(500)).format_row().split()

    assert cells[0] == "500"


def test_custom_width():
    assert len(_report().format_header(width=14)) == 6 * 14


def test_from_result_maps_statistics():
    report = MonteCarloReport.from_result(_result())

    assert report.values() == (1_000, 10, 2.13, 2.14, 3.9, 0.12)


def test_from_result_requires_error_analysis():
    with pytest.raises(ValueError, match="no error analysis"):
        MonteCarloReport.from_result(_result(sd=None, se=None))


def test_print_sink_writes_table_to_stream():
    buf = io.StringIO()
    sink = PrintReportSink(file=buf)

    sink(_report())

    assert buf.getvalue() == _report().format_table() + "\n"


def test_logging_sink_logs_table(caplog):
    logger = logging.getLogger("mc_pricer.test.reports")
    sink = LoggingReportSink(logger=logger, level=logging.WARNING)

    with caplog.at_level(logging.WARNING, logger="mc_pricer.test.reports"):
        sink(_report())

    assert len(caplog.records) == 1
    assert caplog.records[0].levelno == logging.WARNING
    assert "Monte Carlo error analysis:" in caplog.records[0].getMessage()
    assert _report().format_row() in caplog.records[0].getMessage()


def test_collecting_sink_keeps_arrival_order():
    sink = CollectingReportSink()
    first, second = _report(simulations=10), _report(simulations=100)

    sink(first)
    sink(second)

    assert sink.reports == [first, second]


def test_sinks_satisfy_protocol():
    assert isinstance(PrintReportSink(), ReportSink)
    assert isinstance(LoggingReportSink(), ReportSink)
    assert isinstance(CollectingReportSink(), ReportSink)
    assert isinstance(lambda report: None, ReportSink)


def test_abs_error_is_distance_to_closed_form():
    assert _result().abs_error == pytest.approx(0.01)
