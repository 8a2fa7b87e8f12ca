"""CLI entrypoint for wallet-balances."""

from __future__ import annotations

import asyncio
import json
import logging
import os
from pathlib import Path
from typing import Annotated, Any

import typer

from .logger import setup_logging
from .settings import BalanceSettings, LedgerApi
from .state import AppState

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    add_help_option=True,
    pretty_exceptions_enable=True,
    pretty_exceptions_short=True,
    pretty_exceptions_show_locals=False,
    rich_markup_mode="rich",
    help="Sum the USD value of a set of Solana wallets.",
)

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to a TOML config file (can include [wallet_balances] table).",
    ),
]
LogLevelOption = Annotated[
    str | None,
    typer.Option(
        "--log-level",
        help="Override logging verbosity (TRACE, DEBUG, INFO, WARNING, ERROR, CRITICAL).",
    ),
]


def _build_logger() -> logging.Logger:
    """Build a logger instance."""
    return logging.getLogger("wallet_balances")


def _build_state(config_path: Path | None, init_kwargs: dict[str, Any]) -> AppState:
    """Load settings with CLI overrides and configure logging."""
    if config_path:
        os.environ["WALLET_BALANCES_CONFIG"] = str(config_path)

    settings = BalanceSettings(**init_kwargs)
    setup_logging(settings.log_level)
    return AppState(settings=settings, logger=_build_logger())


@app.command()
def total(
    accounts: Annotated[
        list[str] | None,
        typer.Argument(help="Wallet addresses to value; defaults to the configured list."),
    ] = None,
    config_path: ConfigOption = None,
    ledger_api: Annotated[
        LedgerApi | None,
        typer.Option(
            "--ledger-api",
            help="Balance API to query (solscan_public or solscan_pro).",
        ),
    ] = None,
    log_level: LogLevelOption = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON instead of a table."),
    ] = False,
    show_config: Annotated[
        bool,
        typer.Option(
            "--show-config",
            help="Print effective config (with secrets redacted) and exit.",
        ),
    ] = False,
):
    """Compute the total USD value once and print it."""
    init_kwargs: dict[str, Any] = {}
    if accounts:
        init_kwargs["accounts"] = accounts
    if ledger_api is not None:
        init_kwargs["ledger_api"] = ledger_api
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    state = _build_state(config_path, init_kwargs)

    if show_config:
        typer.echo(json.dumps(state.settings.as_safe_dict(), indent=2))
        raise typer.Exit(code=0)

    from .aggregator import BalanceAggregator, ConfigurationError
    from .api import serialize_result
    from .report import format_result_table

    aggregator = BalanceAggregator(state)
    try:
        aggregator.ensure_configured()
    except ConfigurationError as e:
        raise typer.BadParameter(str(e))

    result = asyncio.run(aggregator.get_total_usd_value())

    if as_json:
        typer.echo(json.dumps(serialize_result(result), indent=2))
    else:
        format_result_table(result)


@app.command()
def serve(
    host: Annotated[
        str | None, typer.Option("--host", help="Interface to bind.")
    ] = None,
    port: Annotated[int | None, typer.Option("--port", help="Port to bind.")] = None,
    config_path: ConfigOption = None,
    log_level: LogLevelOption = None,
):
    """Serve the HTTP API with uvicorn."""
    import uvicorn

    from .api import create_app

    init_kwargs: dict[str, Any] = {}
    if host is not None:
        init_kwargs["host"] = host
    if port is not None:
        init_kwargs["port"] = port
    if log_level is not None:
        init_kwargs["log_level"] = log_level.upper()

    state = _build_state(config_path, init_kwargs)
    if not state.settings.api_key_value:
        state.logger.warning(
            "SOLSCAN_API_KEY is not set; /api/wallet-balances will return 500"
        )

    uvicorn.run(
        create_app(state),
        host=state.settings.host,
        port=state.settings.port,
        log_config=None,
    )


def run() -> None:
    """Entrypoint used by the console script."""
    app()


if __name__ == "__main__":
    run()
