"""Click CLI interface for the pullpanda tool."""

import sys
from datetime import datetime
from typing import Optional

import click
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from pullpanda import __version__
from pullpanda.config import DEFAULT_CONFIG_PATH, ConfigError, load_config
from pullpanda.models import DEFAULT_API_URL, DEFAULT_TIMEOUT, RunOptions
from pullpanda.report import render_detailed_prs, render_failures, render_summary_table
from pullpanda.utils.duration import DATE_FORMAT, DurationFormatError, resolve_start_date
from pullpanda.utils.logger import add_file_handler, enable_logging, get_logger
from pullpanda.workflows.aggregate import fetch_all_summaries_sync

logger = get_logger(__name__)
console = Console()
err_console = Console(stderr=True)


class MissingTokenError(Exception):
    """No GitHub token was supplied."""
    pass


def _print_error(message: str) -> None:
    err_console.print(f"[red]Error:[/red] {escape(message)}")


def _format_date(value: Optional[datetime]) -> Optional[str]:
    return value.strftime(DATE_FORMAT) if value else None


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--version", is_flag=True, help="Show version and exit")
@click.option(
    "--config", "config_path",
    default=DEFAULT_CONFIG_PATH, show_default=True,
    type=click.Path(dir_okay=False),
    help="YAML file listing handles, orgs, repos and statuses",
)
@click.option(
    "--token", envvar="GITHUB_TOKEN",
    help="GitHub personal access token (required, falls back to $GITHUB_TOKEN)",
)
@click.option(
    "--start-date", type=click.DateTime(formats=[DATE_FORMAT]),
    help="Start date in YYYY-MM-DD format",
)
@click.option(
    "--end-date", type=click.DateTime(formats=[DATE_FORMAT]),
    help="End date in YYYY-MM-DD format",
)
@click.option(
    "--duration",
    help="Look back this far instead of --start-date, like 1mo, 1w, 1d, 1h, 1m, 1s",
)
@click.option(
    "--enable-log", type=click.BOOL, is_flag=False, flag_value=True, default=False,
    help="Enable logging (a value such as --enable-log=false is accepted)",
)
@click.option(
    "--show-prs", type=click.BOOL, is_flag=False, flag_value=True, default=False,
    help="Show detailed PRs after the summary table (a value such as --show-prs=true is accepted)",
)
@click.option(
    "--timeout", type=click.FloatRange(min=0, min_open=True),
    default=DEFAULT_TIMEOUT, show_default=True,
    help="Timeout per search request (seconds)",
)
@click.option(
    "--max-concurrency", type=click.IntRange(min=1),
    help="Maximum number of handles fetched at once (default: all)",
)
@click.option("--api-url", default=DEFAULT_API_URL, show_default=True, help="GitHub REST API base URL")
@click.option("--log-file", type=click.Path(dir_okay=False), help="Also write debug logs to this file")
def cli(
    version: bool,
    config_path: str,
    token: Optional[str],
    start_date: Optional[datetime],
    end_date: Optional[datetime],
    duration: Optional[str],
    enable_log: bool,
    show_prs: bool,
    timeout: float,
    max_concurrency: Optional[int],
    api_url: str,
    log_file: Optional[str],
) -> None:
    """PullPanda - measure open-source contributions.

    Counts the pull requests authored by the GitHub handles listed in the
    config file, per status, and prints them as a table.
    """
    if version:
        click.echo(f"pullpanda version {__version__}")
        sys.exit(0)

    if enable_log:
        enable_logging()
    if log_file:
        add_file_handler(log_file)

    try:
        if not token:
            raise MissingTokenError("A GitHub token is required: pass --token or set GITHUB_TOKEN")

        config = load_config(config_path)
        logger.debug(f"Loaded config: {config.model_dump()}")

        resolved_start = resolve_start_date(_format_date(start_date), duration)
        if duration:
            logger.debug(f"Parsed duration: {duration}, start date: {resolved_start}")

        options = RunOptions(
            token=token,
            start_date=resolved_start,
            end_date=_format_date(end_date),
            show_prs=show_prs,
            timeout=timeout,
            max_concurrency=max_concurrency,
            api_url=api_url,
        )
    except (MissingTokenError, ConfigError, DurationFormatError) as e:
        _print_error(str(e))
        sys.exit(1)
    except ValidationError as e:
        _print_error("Invalid options: " + "; ".join(error["msg"] for error in e.errors()))
        sys.exit(1)

    summaries = fetch_all_summaries_sync(config, options)

    render_summary_table(summaries, config.statuses, console)
    if show_prs:
        render_detailed_prs(summaries, console)

    if render_failures(summaries, err_console):
        sys.exit(1)


def main() -> None:
    """Console script entry point."""
    cli(prog_name="pullpanda")


if __name__ == "__main__":
    main()
