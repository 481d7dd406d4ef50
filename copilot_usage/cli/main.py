"""
CLI interface for copilot-usage.

Shows GitHub Copilot premium request usage as a panel, JSON, or an i3bar feed.
"""

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from copilot_usage import __version__
from copilot_usage.config.loader import load_settings
from copilot_usage.core.aggregator import aggregate
from copilot_usage.core.errors import ConfigurationError, ExternalToolError
from copilot_usage.core.limits import ENV_LIMIT, ENV_PLAN, resolve_limit, resolve_plan
from copilot_usage.display.json_doc import build_json_document
from copilot_usage.display.panel import render_panel
from copilot_usage.sdk.gh_client import GhClient
from copilot_usage.statusbar.multiplexer import StatusBarMultiplexer, UsageRefresher

EPILOG = """
Environment:

  GH_COPILOT_PLAN    Default plan (free, pro, pro+, business, enterprise)

  GH_COPILOT_LIMIT   Default limit (overrides plan default)

  GH_COPILOT_CONFIG  Config file (default ~/.config/copilot-usage/config.yaml)
"""

app = typer.Typer(add_completion=False)
console = Console()
err_console = Console(stderr=True)

EXIT_CODE_OK = 0
EXIT_CODE_ERROR = 1
EXIT_CODE_INTERRUPTED = 130

LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'


def _version_callback(value: bool) -> None:
    if value:
        typer.echo(f"copilot-usage {__version__}")
        raise typer.Exit(EXIT_CODE_OK)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def _report_error(error: Exception) -> None:
    err_console.print(f"[red]Error:[/] {escape(str(error))}")
    hint = getattr(error, "hint", None)
    if hint:
        err_console.print(f"\n{escape(hint)}")


@app.command(
    epilog=EPILOG,
    context_settings={"help_option_names": ["-h", "--help"]},
)
def main(
    plan: Optional[str] = typer.Option(
        None,
        "--plan",
        "-p",
        help="Copilot plan (free, pro, pro+, business, enterprise)"
    ),
    limit: Optional[int] = typer.Option(
        None,
        "--limit",
        "-l",
        help="Custom monthly premium request limit"
    ),
    json_output: bool = typer.Option(
        False,
        "--json",
        "-j",
        help="Output raw JSON data"
    ),
    i3bar: bool = typer.Option(
        False,
        "--i3bar",
        help="Wrap i3status output with a usage element (i3bar protocol)"
    ),
    config: Optional[str] = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to a YAML config file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log debug details to stderr"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit"
    ),
):
    """
    GitHub Copilot premium request usage.

    Reads the current month's billing data through the gh CLI and compares it
    with your plan's monthly quota.
    """
    _setup_logging(verbose)
    try:
        settings = load_settings(config)
        plan_name = resolve_plan(plan, os.environ.get(ENV_PLAN), settings.plan)
        effective_limit = resolve_limit(
            limit, os.environ.get(ENV_LIMIT), plan_name, settings.limit
        )
        client = GhClient(settings.gh_path, settings.timeout)

        if i3bar:
            multiplexer = StatusBarMultiplexer(
                settings.status_command,
                UsageRefresher(client, effective_limit),
                interval=settings.refresh_interval,
            )
            raise typer.Exit(multiplexer.run())

        now = datetime.now(timezone.utc)
        username = client.current_username()
        snapshot = client.fetch_usage(username, now.year, now.month)
        result = aggregate(snapshot, effective_limit)

        if json_output:
            document = build_json_document(result, username, plan_name, now)
            typer.echo(json.dumps(document, indent=2, ensure_ascii=False))
        else:
            console.print(render_panel(result, username, plan_name, now))

    except (ConfigurationError, ExternalToolError) as e:
        _report_error(e)
        raise typer.Exit(EXIT_CODE_ERROR)
    except KeyboardInterrupt:
        raise typer.Exit(EXIT_CODE_INTERRUPTED)


if __name__ == "__main__":
    app()
