"""Click-based CLI for ledger-quote.

Loads the quote list, runs the batch and prints ledger price directives.
Per-quote failures go to stderr; only a configuration error makes the
command exit non-zero.
"""

from __future__ import annotations

import click

from .exceptions import ConfigError
from .logging_config import configure_logging
from .orchestrator import run_quotes
from .results import QuoteFailure, QuoteSuccess
from .settings import QUOTE_PARAMS_ENV, load_quote_specs, load_scrape_config
from .storage import append_prices, results_to_frame, save_df


@click.command()
@click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(dir_okay=False),
    envvar=QUOTE_PARAMS_ENV,
    default=None,
    help="Path to the quote list (default: ~/.quoteparams).",
)
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Path to scraper settings YAML (default: ~/.quoteparams.settings.yaml).",
)
@click.option(
    "--append",
    "append_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Also append price lines to this ledger price-db file.",
)
@click.option(
    "--report",
    "report_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write a CSV report with one row per quote.",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable debug logging on stderr.",
)
@click.version_option(package_name="ledger-quote")
def cli(
    config_path: str | None,
    settings_path: str | None,
    append_path: str | None,
    report_path: str | None,
    verbose: bool,
) -> None:
    """Scrape currency rates from web pages and print ledger price directives."""
    configure_logging(verbose)

    try:
        scrape_config = load_scrape_config(settings_path)
        specs = load_quote_specs(config_path)
    except ConfigError as exc:
        raise click.ClickException(str(exc)) from exc

    results = run_quotes(specs, scrape_config)

    lines = []
    for result in results:
        if isinstance(result, QuoteSuccess):
            click.echo(result.line)
            lines.append(result.line)
        elif isinstance(result, QuoteFailure):
            click.echo(
                f"error: {result.spec.url} [{result.stage.value}] {result.message}",
                err=True,
            )

    if append_path:
        append_prices(lines, append_path)

    if report_path:
        save_df(results_to_frame(results), report_path)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
