"""
Entry point tests (main.main): exit codes and printed outcome.

EXIT CODES:
    0  setup succeeded
    1  setup reported errors
    2  bad configuration or load failure
"""

from pathlib import Path

import pytest

import main as entry


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("ALGORITHM_LOCATION", "ALGORITHM_TYPE_NAME", "ALGORITHM_LOAD_TIMEOUT", "LIVE_MODE"):
        monkeypatch.setenv(name, "placeholder")
        monkeypatch.delenv(name)
    monkeypatch.setattr(entry, "load_env", lambda: [])
    monkeypatch.setattr(entry, "setup_logging", lambda **kwargs: None)


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / "host.yaml"
    path.write_text(
        "algorithm:\n"
        "  location: algorithms.buy_and_hold\n"
        "  load_timeout_seconds: 30\n"
        "job:\n"
        "  algorithm_id: cli-test\n"
        f"logging:\n  log_dir: {tmp_path / 'logs'}\n",
        encoding="utf-8",
    )
    return path


def test_backtest_success(config_file, capsys):
    code = entry.main(["--config", str(config_file)])

    out = capsys.readouterr().out
    assert code == 0
    assert "BuyAndHoldAlgorithm ready" in out
    assert "run_id=LOCALHOST" in out
    assert "capital=100000" in out
    assert "brokerage=BacktestingBrokerage" in out


def test_live_mode_flag(config_file, capsys):
    code = entry.main(["--config", str(config_file), "--mode", "live"])

    assert code == 0
    assert "brokerage=PaperBrokerage" in capsys.readouterr().out


def test_algorithm_flag_without_config_file(tmp_path, capsys):
    code = entry.main([
        "--config", str(tmp_path / "absent.yaml"),
        "--algorithm", "algorithms.forex_basket",
        "--type-name", "ForexBasketAlgorithm",
    ])

    assert code == 0
    assert "ForexBasketAlgorithm ready" in capsys.readouterr().out


def test_missing_config_and_algorithm(tmp_path, capsys):
    code = entry.main(["--config", str(tmp_path / "absent.yaml")])

    assert code == 2
    assert "not found" in capsys.readouterr().err


def test_invalid_timeout(config_file, capsys):
    code = entry.main(["--config", str(config_file), "--timeout", "0"])

    assert code == 2
    assert "validation failed" in capsys.readouterr().err


def test_ambiguous_artifact_is_load_failure(config_file, capsys):
    code = entry.main(["--config", str(config_file), "--algorithm", "algorithms.forex_basket"])

    err = capsys.readouterr().err
    assert code == 2
    assert "try re-building algorithm." in err


def test_initialize_failure_exits_one(config_file, write_artifact, capsys):
    path = write_artifact("""
        class Broken(QCAlgorithm):
            def initialize(self):
                raise RuntimeError("cannot find data")
    """)

    code = entry.main(["--config", str(config_file), "--algorithm", str(path)])

    err = capsys.readouterr().err
    assert code == 1
    assert "Failed to initialize algorithm: Initialize(): cannot find data" in err


def test_artifact_exiting_the_process_is_load_failure(config_file, write_artifact, capsys):
    path = write_artifact("""
        import sys

        sys.exit(0)
    """)

    code = entry.main(["--config", str(config_file), "--algorithm", str(path)])

    err = capsys.readouterr().err
    assert code == 2
    assert "SystemExit" in err
    assert "try re-building algorithm." in err
