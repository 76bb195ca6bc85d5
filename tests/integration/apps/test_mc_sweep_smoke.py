from __future__ import annotations

import importlib
import logging
from pathlib import Path

import pandas as pd
import pytest

pytestmark = pytest.mark.integration

_MODULE = "mc_pricer.apps.mc_sweep"


@pytest.fixture
def mod(monkeypatch):
    module = importlib.import_module(_MODULE)
    # Keep pytest's log capture handlers on the root logger.
    monkeypatch.setattr(module, "setup_logging_from_config", lambda cfg: None)
    return module


def test_mc_sweep_help_exits_cleanly(run_help) -> None:
    run_help(
        importlib.import_module(_MODULE),
        "Cross-check Monte Carlo option prices against closed-form BSM.",
    )


def test_mc_sweep_print_config_outputs_json(
    run_print_config,
    assert_paths_exist,
) -> None:
    cfg = run_print_config(importlib.import_module(_MODULE), "config/mc_sweep.yml")
    assert_paths_exist(
        cfg,
        [
            ("logging", "level"),
            ("options",),
            ("sweep", "paths", "steps"),
            ("sweep", "subintervals", "num_paths"),
            ("report",),
        ],
    )
    assert cfg["seed"] == 20240101
    assert [opt["type"] for opt in cfg["options"]] == ["call", "put"]


def test_mc_sweep_cli_overrides_yaml(capsys, parse_printed_config) -> None:
    module = importlib.import_module(_MODULE)
    module.main(
        [
            "--config",
            "config/mc_sweep.yml",
            "--beta",
            "0.5",
            "--path-steps",
            "3",
            "--report",
            "log",
            "--log-level",
            "DEBUG",
            "--print-config",
        ]
    )
    cfg = parse_printed_config(capsys.readouterr().out)

    assert cfg["beta"] == 0.5
    assert cfg["sweep"]["paths"]["steps"] == 3
    assert cfg["sweep"]["paths"]["start"] == 10
    assert cfg["report"] == "log"
    assert cfg["logging"]["level"] == "DEBUG"


def test_mc_sweep_dry_run_does_not_simulate(mod, monkeypatch, caplog) -> None:
    monkeypatch.setattr(
        mod,
        "run",
        lambda *args, **kwargs: pytest.fail("run() should not be called"),
    )

    with caplog.at_level(logging.INFO, logger=_MODULE):
        mod.main(["--config", "config/mc_sweep.yml", "--dry-run"])

    messages = [r.getMessage() for r in caplog.records if r.name == _MODULE]
    assert "DRY RUN: no simulations were run." in messages
    assert any('"strike": 65.0' in m for m in messages)


def test_mc_sweep_writes_combined_table(mod, tmp_path: Path, capsys) -> None:
    out_csv = tmp_path / "out" / "sweep.csv"

    mod.main(
        [
            "--path-steps",
            "2",
            "--subinterval-steps",
            "1",
            "--report",
            "none",
            "--seed",
            "1",
            "--n-workers",
            "2",
            "--output-csv",
            str(out_csv),
        ]
    )

    assert capsys.readouterr().out == ""
    table = pd.read_csv(out_csv)
    assert len(table) == 6
    assert table["sweep"].tolist() == ["paths", "paths", "subintervals"] * 2
    assert table["simulations"].tolist() == [10, 100, 1000] * 2
    assert table["option_type"].tolist() == ["call"] * 3 + ["put"] * 3
    assert table["se"].notna().all()


def test_mc_sweep_print_report_mode_writes_tables(mod, capsys) -> None:
    mod.main(
        [
            "--path-steps",
            "1",
            "--subinterval-steps",
            "0",
            "--seed",
            "3",
            "--n-workers",
            "1",
        ]
    )

    out = capsys.readouterr().out.splitlines()
    assert len(out) == 4
    assert out[0].split()[0] == "Simulations"


def test_contract_from_config_rejects_incomplete_entry() -> None:
    module = importlib.import_module(_MODULE)
    with pytest.raises(ValueError, match="missing keys"):
        module.contract_from_config({"type": "call", "strike": 100.0})


def test_contract_from_config_rejects_invalid_values() -> None:
    module = importlib.import_module(_MODULE)
    entry = {
        "type": "put",
        "maturity": 1.0,
        "strike": 100.0,
        "spot": 100.0,
        "rate": 0.0,
        "volatility": 0.0,
    }
    with pytest.raises(ValueError, match="volatility must be > 0"):
        module.contract_from_config(entry)


def test_contract_from_config_keeps_cost_of_carry() -> None:
    module = importlib.import_module(_MODULE)
    contract = module.contract_from_config(
        {
            "id": 4,
            "type": "C",
            "maturity": 0.5,
            "strike": 95,
            "spot": 100,
            "rate": 0.05,
            "volatility": 0.25,
            "cost_of_carry": 0.0,
        }
    )

    assert contract.id == 4
    assert contract.option_type == "call"
    assert contract.cost_of_carry == 0.0


def test_contract_from_config_defaults_null_id() -> None:
    module = importlib.import_module(_MODULE)
    contract = module.contract_from_config(
        {
            "id": None,
            "type": "put",
            "maturity": 1.0,
            "strike": 100.0,
            "spot": 100.0,
            "rate": 0.0,
            "volatility": 0.2,
        }
    )

    assert contract.id == 1
