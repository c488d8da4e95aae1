from datetime import datetime, timezone
from decimal import Decimal
from pathlib import Path

import pytest
from click.testing import CliRunner

from ledger_quote import cli as cli_module
from ledger_quote.cli import cli
from ledger_quote.exceptions import SelectorError
from ledger_quote.results import QuoteFailure, QuoteSuccess, Stage

CONFIG = """
- url: http://x/ok
  select: "#rate"
  from: USD
  to: EUR
- url: http://x/empty
  select: "#rate"
  from: GBP
  to: EUR
"""


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    path = tmp_path / ".quoteparams"
    path.write_text(CONFIG, encoding="utf-8")
    return path


@pytest.fixture
def fake_run(monkeypatch: pytest.MonkeyPatch):
    calls = []

    def _run_quotes(specs, config):
        calls.append((specs, config))
        ok, empty = specs
        return [
            QuoteSuccess(
                spec=ok,
                timestamp=datetime(2026, 10, 19, tzinfo=timezone.utc),
                rate=Decimal("0.9123"),
                line="P 2026/10/19 00:00:00 USD 0.9123 EUR",
            ),
            QuoteFailure(
                spec=empty,
                stage=Stage.EXTRACT,
                cause=SelectorError("Selector '#rate' matched no element"),
            ),
        ]

    monkeypatch.setattr(cli_module, "run_quotes", _run_quotes)
    return calls


def test_prints_prices_and_reports_failures(runner, config_file, tmp_path, fake_run):
    result = runner.invoke(
        cli, ["--config", str(config_file), "--settings", str(tmp_path / "none.yaml")]
    )

    assert result.exit_code == 0
    assert "P 2026/10/19 00:00:00 USD 0.9123 EUR" in result.output
    assert "error: http://x/empty [extract]" in result.output
    assert len(fake_run) == 1


def test_append_and_report(runner, config_file, tmp_path, fake_run):
    db = tmp_path / "prices.db"
    report = tmp_path / "run.csv"

    result = runner.invoke(
        cli,
        [
            "--config", str(config_file),
            "--settings", str(tmp_path / "none.yaml"),
            "--append", str(db),
            "--report", str(report),
        ],
    )

    assert result.exit_code == 0
    assert db.read_text(encoding="utf-8") == "P 2026/10/19 00:00:00 USD 0.9123 EUR\n"
    assert report.read_text(encoding="utf-8").count("\n") == 3


def test_settings_are_passed_to_the_batch(runner, config_file, tmp_path, fake_run):
    settings = tmp_path / "settings.yaml"
    settings.write_text("http_concurrency: 2\n", encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config_file), "--settings", str(settings)])

    assert result.exit_code == 0
    _, config = fake_run[0]
    assert config.http_concurrency == 2


def test_config_error_exits_non_zero(runner, tmp_path, fake_run):
    bad = tmp_path / ".quoteparams"
    bad.write_text("- url: http://x/ok\n", encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(bad), "--settings", str(tmp_path / "none.yaml")])

    assert result.exit_code == 1
    assert "entry[0].select" in result.output
    assert fake_run == []


def test_missing_config_exits_non_zero(runner, tmp_path, fake_run):
    result = runner.invoke(cli, ["--config", str(tmp_path / "absent"), "--settings", str(tmp_path / "none.yaml")])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_bad_settings_exit_non_zero(runner, config_file, tmp_path, fake_run):
    settings = tmp_path / "settings.yaml"
    settings.write_text("http_concurrency: many\n", encoding="utf-8")

    result = runner.invoke(cli, ["--config", str(config_file), "--settings", str(settings)])

    assert result.exit_code == 1
    assert "http_concurrency" in result.output
    assert fake_run == []
