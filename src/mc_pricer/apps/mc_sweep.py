#!/usr/bin/env python
"""Cross-check Monte Carlo prices against closed-form BSM over sweeps.

For every configured option the path count is grown geometrically at a fixed
subinterval count, then the subinterval count is grown at a fixed path count.
Each run reports Simulations / Subintervals / BSM Price / MC Price / SD / SE.

Typical usage:
    python -m mc_pricer.apps.mc_sweep --config config/mc_sweep.yml
    python -m mc_pricer.apps.mc_sweep --path-steps 5 --seed 7 --report log
    mc-sweep --config config/mc_sweep.yml --output-csv out/sweep.csv

Config precedence: CLI > YAML > defaults.
"""

from __future__ import annotations

import argparse
import logging
from collections.abc import Mapping
from typing import Any

import pandas as pd

from mc_pricer.apps._cli import (
    add_dry_run_arg,
    add_print_config_arg,
    log_dry_run,
    print_config,
)
from mc_pricer.cli import (
    DEFAULT_LOGGING,
    add_config_arg,
    add_logging_args,
    build_config,
    collect_logging_overrides,
    resolve_path,
    setup_logging_from_config,
)
from mc_pricer.options import (
    AnalyticalOptionModel,
    LoggingReportSink,
    OptionContract,
    PrintReportSink,
    ReportSink,
    sweep_num_paths,
    sweep_subintervals,
)

REPORT_MODES = ("print", "log", "none")

DEFAULT_CONFIG: dict[str, Any] = {
    "logging": DEFAULT_LOGGING,
    "options": [
        {
            "id": 1,
            "type": "call",
            "maturity": 0.25,
            "strike": 65.0,
            "spot": 60.0,
            "rate": 0.08,
            "volatility": 0.3,
            "cost_of_carry": None,
        },
        {
            "id": 2,
            "type": "put",
            "maturity": 1.0,
            "strike": 100.0,
            "spot": 100.0,
            "rate": 0.0,
            "volatility": 0.2,
            "cost_of_carry": None,
        },
    ],
    "beta": 1.0,
    "seed": None,
    "n_workers": None,
    "sweep": {
        "paths": {
            "enabled": True,
            "subintervals": 100,
            "start": 10,
            "factor": 10,
            "steps": 6,
        },
        "subintervals": {
            "enabled": True,
            "num_paths": 1000,
            "start": 10,
            "factor": 10,
            "steps": 5,
        },
    },
    "report": "print",
    "output_csv": None,
}

_REQUIRED_OPTION_KEYS = ("type", "maturity", "strike", "spot", "rate", "volatility")


def _parse_args(argv: list[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Cross-check Monte Carlo option prices against closed-form BSM."
    )
    add_config_arg(parser)
    add_logging_args(parser)
    add_print_config_arg(parser)
    add_dry_run_arg(parser)

    parser.add_argument(
        "--beta",
        type=float,
        default=None,
        help="Diffusion elasticity exponent (1.0 = geometric Brownian motion).",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Base seed for reproducible runs (default: OS entropy).",
    )
    parser.add_argument(
        "--n-workers",
        type=int,
        default=None,
        help="Worker threads per pricing call (default: CPU count).",
    )
    parser.add_argument(
        "--path-steps",
        type=int,
        default=None,
        help="Number of path-count sweep points.",
    )
    parser.add_argument(
        "--subinterval-steps",
        type=int,
        default=None,
        help="Number of subinterval-count sweep points.",
    )
    parser.add_argument(
        "--report",
        choices=REPORT_MODES,
        default=None,
        help="Where per-run error-analysis tables go.",
    )
    parser.add_argument(
        "--output-csv",
        type=str,
        default=None,
        help="Optional CSV path for the combined sweep table.",
    )

    return parser.parse_args(argv)


def _build_overrides(args: argparse.Namespace) -> dict[str, Any]:
    overrides: dict[str, Any] = {}

    for key in ("beta", "seed", "n_workers", "report", "output_csv"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value

    sweep: dict[str, Any] = {}
    if args.path_steps is not None:
        sweep["paths"] = {"steps": args.path_steps}
    if args.subinterval_steps is not None:
        sweep["subintervals"] = {"steps": args.subinterval_steps}
    if sweep:
        overrides["sweep"] = sweep

    logging_overrides = collect_logging_overrides(args)
    if logging_overrides:
        overrides["logging"] = logging_overrides

    return overrides


def contract_from_config(entry: Mapping[str, Any]) -> OptionContract:
    """Build a validated contract from one `options:` config entry."""
    missing = [key for key in _REQUIRED_OPTION_KEYS if entry.get(key) is None]
    if missing:
        raise ValueError(f"Option config missing keys: {missing}")

    carry = entry.get("cost_of_carry")
    contract = OptionContract(
        option_type=entry["type"],
        maturity=float(entry["maturity"]),
        strike=float(entry["strike"]),
        spot=float(entry["spot"]),
        rate=float(entry["rate"]),
        volatility=float(entry["volatility"]),
        cost_of_carry=None if carry is None else float(carry),
        id=1 if entry.get("id") is None else int(entry["id"]),
    )
    contract.validate()
    return contract


def _report_sink(mode: str) -> ReportSink | None:
    if mode == "print":
        return PrintReportSink()
    if mode == "log":
        return LoggingReportSink()
    if mode == "none":
        return None
    raise ValueError(f"report must be one of {REPORT_MODES}, got {mode!r}")


def run(config: Mapping[str, Any], contracts: list[OptionContract]) -> pd.DataFrame:
    """Run both sweeps for every contract and return the combined table."""
    logger = logging.getLogger(__name__)
    sink = _report_sink(config["report"])
    paths_cfg = config["sweep"]["paths"]
    steps_cfg = config["sweep"]["subintervals"]
    common = {
        "beta": config["beta"],
        "n_workers": config["n_workers"],
        "seed": config["seed"],
        "report_sink": sink,
    }

    frames: list[pd.DataFrame] = []
    for contract in contracts:
        model = AnalyticalOptionModel(contract)
        logger.info("%s", model)
        logger.info("BSM price: %.6f", model.price())

        if paths_cfg["enabled"]:
            frame = sweep_num_paths(
                model,
                subintervals=paths_cfg["subintervals"],
                start=paths_cfg["start"],
                factor=paths_cfg["factor"],
                steps=paths_cfg["steps"],
                **common,
            )
            frames.append(frame.assign(sweep="paths"))

        if steps_cfg["enabled"]:
            frame = sweep_subintervals(
                model,
                num_paths=steps_cfg["num_paths"],
                start=steps_cfg["start"],
                factor=steps_cfg["factor"],
                steps=steps_cfg["steps"],
                **common,
            )
            frames.append(frame.assign(sweep="subintervals"))

    if not frames:
        return pd.DataFrame()
    return pd.concat(frames, ignore_index=True)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    overrides = _build_overrides(args)
    config = build_config(DEFAULT_CONFIG, args.config, overrides)

    if args.print_config:
        print_config(config)
        return

    setup_logging_from_config(config.get("logging"))
    logger = logging.getLogger(__name__)

    options = config.get("options") or []
    if not options:
        raise ValueError("options must contain at least one option.")
    contracts = [contract_from_config(entry) for entry in options]

    output_csv = resolve_path(config.get("output_csv"))

    logger.info("Options:            %d", len(contracts))
    logger.info("Beta:               %s", config["beta"])
    logger.info("Seed:               %s", config["seed"])
    logger.info("Workers:            %s", config["n_workers"] or "CPU count")
    logger.info("Report:             %s", config["report"])
    logger.info("Output CSV:         %s", output_csv)

    if args.dry_run:
        log_dry_run(
            logger,
            {
                "options": contracts,
                "sweep": config["sweep"],
                "beta": config["beta"],
                "output_csv": output_csv,
            },
        )
        return

    table = run(config, contracts)

    if output_csv is not None:
        output_csv.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(output_csv, index=False)
        logger.info("Wrote %d rows to %s", len(table), output_csv)


if __name__ == "__main__":
    main()
