"""Error-analysis reports emitted by the Monte Carlo engine.

A report is handed to a *sink*: any callable accepting a
:class:`MonteCarloReport`. The engine prints to stdout by default; pass
:class:`LoggingReportSink` to route reports through logging instead, or
:class:`CollectingReportSink` to keep them in memory.
"""

from __future__ import annotations

import logging
import numbers
import sys
from dataclasses import dataclass, field
from typing import Protocol, TextIO, runtime_checkable

from mc_pricer.options.types import MonteCarloResult

REPORT_COLUMNS: tuple[str, ...] = (
    "Simulations",
    "Subintervals",
    "BSM Price",
    "MC Price",
    "SD",
    "SE",
)
DEFAULT_FIELD_WIDTH = 20


def _fmt_cell(value: int | float, width: int) -> str:
    if isinstance(value, numbers.Integral):
        return f"{value:>{width}d}"
    # Six significant digits, as printf %g.
    return f"{value:>{width}.6g}"


@dataclass(frozen=True, slots=True)
class MonteCarloReport:
    """One row of Monte Carlo error analysis against the closed-form price."""

    simulations: int
    subintervals: int
    bsm_price: float
    mc_price: float
    sd: float
    se: float

    @classmethod
    def from_result(cls, result: MonteCarloResult) -> MonteCarloReport:
        """Build a report from a result computed with error analysis."""
        if result.sd is None or result.se is None:
            raise ValueError("result has no error analysis (sd/se missing)")
        return cls(
            simulations=result.num_paths,
            subintervals=result.subintervals,
            bsm_price=result.analytical_price,
            mc_price=result.price,
            sd=result.sd,
            se=result.se,
        )

    def values(self) -> tuple[int, int, float, float, float, float]:
        return (
            self.simulations,
            self.subintervals,
            self.bsm_price,
            self.mc_price,
            self.sd,
            self.se,
        )

    def format_header(self, width: int = DEFAULT_FIELD_WIDTH) -> str:
        return "".join(f"{name:>{width}}" for name in REPORT_COLUMNS)

    def format_row(self, width: int = DEFAULT_FIELD_WIDTH) -> str:
        return "".join(_fmt_cell(value, width) for value in self.values())

    def format_table(self, width: int = DEFAULT_FIELD_WIDTH) -> str:
        """Header line plus value line, each field right-aligned to `width`."""
        return f"{self.format_header(width)}\n{self.format_row(width)}"


@runtime_checkable
class ReportSink(Protocol):
    """Destination for error-analysis reports."""

    def __call__(self, report: MonteCarloReport) -> None:
        """Consume one report."""


@dataclass
class PrintReportSink:
    """Write the report table to a text stream (stdout by default)."""

    file: TextIO | None = None
    width: int = DEFAULT_FIELD_WIDTH

    def __call__(self, report: MonteCarloReport) -> None:
        print(report.format_table(self.width), file=self.file or sys.stdout)


@dataclass
class LoggingReportSink:
    """Log the report table through the standard logging stack."""

    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger(__name__)
    )
    level: int = logging.INFO
    width: int = DEFAULT_FIELD_WIDTH

    def __call__(self, report: MonteCarloReport) -> None:
        self.logger.log(
            self.level,
            "Monte Carlo error analysis:\n%s",
            report.format_table(self.width),
        )


@dataclass
class CollectingReportSink:
    """Keep every received report in memory, in arrival order."""

    reports: list[MonteCarloReport] = field(default_factory=list)

    def __call__(self, report: MonteCarloReport) -> None:
        self.reports.append(report)
