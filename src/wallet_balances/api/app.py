"""HTTP surface for the balance aggregator."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..aggregator import BalanceAggregator, ConfigurationError
from ..domain import AggregateResult
from ..logger import get_logger, setup_logging
from ..settings import BalanceSettings
from ..state import AppState

NO_STORE = "no-store"


def cache_control_header(settings: BalanceSettings) -> str:
    """Cache-Control value for successful balance responses."""
    return (
        f"public, s-maxage={settings.cache_max_age}, "
        f"stale-while-revalidate={settings.cache_stale_while_revalidate}"
    )


def serialize_result(result: AggregateResult) -> dict[str, object]:
    """Render an aggregate result as the endpoint's JSON body."""
    return {
        "total": round(result.total, 2),
        "wallets": {
            account: round(value, 2) for account, value in result.per_account.items()
        },
        "timestamp": result.timestamp,
    }


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"error": message},
        headers={"Cache-Control": NO_STORE},
    )


def create_app(
    state: AppState | None = None,
    aggregator: BalanceAggregator | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        state: Application state; built from the environment when omitted
        aggregator: Aggregator to serve; built from ``state`` when omitted

    Returns:
        Configured application with CORS restricted to ``allowed_origins``
    """
    if state is None:
        settings = BalanceSettings()
        setup_logging(settings.log_level)
        state = AppState(settings=settings, logger=get_logger("wallet_balances"))
    if aggregator is None:
        aggregator = BalanceAggregator(state)

    settings = state.settings
    log = state.logger

    app = FastAPI(title="Wallet Balances API")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_methods=["GET", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.get("/api/wallet-balances")
    async def wallet_balances() -> JSONResponse:
        try:
            result = await aggregator.get_total_usd_value()
        except ConfigurationError as e:
            log.error("Configuration error: %s", e)
            return _error_response(str(e))
        except Exception as e:
            log.error("Unexpected error: %s", e, exc_info=True)
            return _error_response("Failed to calculate total")

        return JSONResponse(
            content=serialize_result(result),
            headers={"Cache-Control": cache_control_header(settings)},
        )

    @app.get("/api/health")
    async def health() -> dict[str, str]:
        return {
            "status": "ok",
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return app
