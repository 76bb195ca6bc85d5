#!/usr/bin/env python
"""
Log closed-form prices and Greeks for a few European options.

This script is a thin wrapper around:
    mc_pricer.options.AnalyticalOptionModel

For every option below it logs the generalized BSM price, every analytic
Greek, the finite-difference delta/gamma and the price implied for the
opposite side by put-call parity, one column per option.
"""

import logging

import pandas as pd

from mc_pricer.options import AnalyticalOptionModel, OptionType
from mc_pricer.utils.logging_config import setup_logging


# --------------------------------------------------------------------------- #
# CONFIG
# --------------------------------------------------------------------------- #

# (type, maturity, strike, spot, rate, volatility, id, cost_of_carry)
OPTIONS = [
    (OptionType.CALL, 0.25, 65.0, 60.0, 0.08, 0.30, 1, None),
    (OptionType.PUT, 1.0, 100.0, 100.0, 0.00, 0.20, 2, None),
    (OptionType.CALL, 0.5, 95.0, 100.0, 0.05, 0.25, 3, 0.0),  # futures option
]

# Spot bump for the finite-difference delta/gamma
SPOT_BUMP = 0.01

# Logging
LOG_LEVEL = "INFO"
LOG_FMT_CONSOLE = "%(asctime)s %(levelname)s %(shortname)s - %(message)s"
LOG_FILE = None  # e.g. "logs/greeks_table.log"
LOG_COLORED = True


def main() -> None:
    setup_logging(
        LOG_LEVEL,
        fmt_console=LOG_FMT_CONSOLE,
        log_file=LOG_FILE,
        colored=LOG_COLORED,
    )
    logger = logging.getLogger(__name__)

    columns = {}
    for option_type, T, K, S, r, sigma, option_id, b in OPTIONS:
        model = AnalyticalOptionModel.from_params(
            option_type, T, K, S, r, sigma, id=option_id, cost_of_carry=b
        )
        logger.info("%s", model)

        values = model.greeks()
        values["numeric_delta"] = model.numeric_delta(SPOT_BUMP)
        values["numeric_gamma"] = model.numeric_gamma(SPOT_BUMP)
        values["parity_counterpart"] = model.parity_counterpart_price()
        columns[f"option_{option_id}"] = values

    table = pd.DataFrame(columns)
    with pd.option_context("display.float_format", "{:.6f}".format):
        logger.info("Closed-form prices and Greeks:\n%s", table.to_string())


if __name__ == "__main__":
    main()
