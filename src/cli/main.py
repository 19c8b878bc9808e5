"""CLI commands for the URL fetcher."""

import asyncio
import json
import sys
import uuid

import click

from src.features.fetch.client import UrlFetcher
from src.features.fetch.config import FetchConfig
from src.features.fetch.metrics import FetchMetrics
from src.features.fetch.models import FetchOutcome
from src.features.fetch.pools import ConnectionPools
from src.features.observability.logging import (
    bind_request_context,
    clear_request_context,
    configure_logging,
)
from src.features.status.error_mapper import map_fetch_error_to_response
from src.settings import AppSettings, get_settings


async def _fetch_once(url: str, config: FetchConfig) -> FetchOutcome:
    """Fetch a single URL with short-lived pools."""
    async with ConnectionPools(config) as pools:
        fetcher = UrlFetcher(pools, config)
        return await fetcher.fetch(url)


@click.group()
@click.version_option(version="0.1.0")
@click.option(
    "--log-level",
    default=None,
    help="Log level (default: URLFETCH_LOG_LEVEL or INFO).",
)
@click.option(
    "--json-logs/--console-logs",
    default=None,
    help="Emit JSON logs or human-readable console logs.",
)
@click.pass_context
def cli(ctx: click.Context, log_level: str | None, json_logs: bool | None) -> None:
    """Fetch web pages as decoded text."""
    settings = get_settings()
    configure_logging(
        level=log_level or settings.log_level,
        json_format=settings.json_logs if json_logs is None else json_logs,
    )
    ctx.obj = settings


@cli.command()
@click.argument("url")
@click.option(
    "--max-redirects",
    type=int,
    default=None,
    help="Override the redirect budget.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Override the per-hop timeout in seconds.",
)
@click.option(
    "--metrics",
    "show_metrics",
    is_flag=True,
    default=False,
    help="Print fetch metrics as JSON to stderr.",
)
@click.pass_obj
def fetch(
    settings: AppSettings,
    url: str,
    max_redirects: int | None,
    timeout_seconds: float | None,
    show_metrics: bool,
) -> None:
    """Fetch URL and print the decoded body."""
    config = settings.to_fetch_config()
    overrides: dict[str, int | float] = {}
    if max_redirects is not None:
        overrides["max_redirects"] = max_redirects
    if timeout_seconds is not None:
        overrides["timeout_seconds"] = timeout_seconds
    if overrides:
        config = FetchConfig(**{**config.model_dump(), **overrides})

    bind_request_context(str(uuid.uuid4()))
    try:
        outcome = asyncio.run(_fetch_once(url, config))
    finally:
        clear_request_context()

    if show_metrics:
        metrics = FetchMetrics.get_instance().to_dict()
        click.echo(json.dumps(metrics, default=str), err=True)

    if outcome.error is not None:
        response = map_fetch_error_to_response(outcome.error)
        click.echo(f"Error ({response.status_code}): {response.message}", err=True)
        sys.exit(1)

    click.echo(outcome.text or "", nl=False)


def main() -> None:
    """Console script entry point."""
    cli()


if __name__ == "__main__":
    main()
