"""
HTTP trigger surface for the Caución Rate Alert system.

Exposes the query endpoint, the token-gated run endpoint and a health
endpoint on an aiohttp web application. Every handler delegates to the
shared pipeline.
"""

import hmac
from typing import Any, Callable, Dict, Optional

from aiohttp import web

from .models.config import ServerConfig
from .models.pipeline import NotificationStatus
from .services.pipeline import CaucionPipeline
from .utils.error_handling import ErrorCategory, ErrorSeverity, get_error_tracker
from .utils.logging import get_logger

PIPELINE_KEY = web.AppKey("pipeline", CaucionPipeline)
SERVER_CONFIG_KEY = web.AppKey("server_config", ServerConfig)
STATUS_PROVIDER_KEY = web.AppKey("status_provider", object)


def create_app(
    pipeline: CaucionPipeline,
    server_config: ServerConfig,
    status_provider: Optional[Callable[[], Dict[str, Any]]] = None,
) -> web.Application:
    """
    Build the web application.

    Args:
        pipeline: Shared scrape-filter-notify pipeline
        server_config: Listen address and access token
        status_provider: Callable returning the health payload

    Returns:
        aiohttp application with all routes registered
    """
    app = web.Application()
    app[PIPELINE_KEY] = pipeline
    app[SERVER_CONFIG_KEY] = server_config
    app[STATUS_PROVIDER_KEY] = status_provider

    app.router.add_get("/api/cauciones", handle_cauciones)
    app.router.add_get("/run", handle_run)
    app.router.add_get("/health", handle_health)
    return app


async def handle_cauciones(request: web.Request) -> web.Response:
    """Scrape and filter; notify too when ``notificar=true`` and the market is open."""
    pipeline = request.app[PIPELINE_KEY]
    notify = request.query.get("notificar") == "true"

    try:
        result = await pipeline.run(notify=notify, require_market_open=False)
    except Exception as e:
        return _error_response("api_cauciones", e)

    get_logger("server").info(
        "Rates served",
        extra={
            "notify_requested": notify,
            "notification": result.notification.value,
            "entry_count": len(result.entries),
        },
    )
    return web.json_response(result.to_summary())


async def handle_run(request: web.Request) -> web.Response:
    """Token-gated full run: 401 bad token, 204 market closed, 200 otherwise."""
    pipeline = request.app[PIPELINE_KEY]
    expected = request.app[SERVER_CONFIG_KEY].access_token

    if not _token_matches(expected, request.query.get("token")):
        get_logger("server").warning("Rejected /run request with invalid token")
        return web.Response(status=401)

    try:
        result = await pipeline.run(notify=True, require_market_open=True)
    except Exception as e:
        return _error_response("run", e)

    if result.notification is NotificationStatus.MARKET_CLOSED:
        return web.Response(status=204)

    get_logger("server").info(
        "Triggered run finished",
        extra={
            "notification": result.notification.value,
            "opportunity_count": len(result.opportunities),
        },
    )
    return web.Response(status=200)


async def handle_health(request: web.Request) -> web.Response:
    status_provider = request.app[STATUS_PROVIDER_KEY]
    if status_provider is None:
        return web.json_response({"running": True})
    return web.json_response(status_provider())


def _token_matches(expected: Optional[str], provided: Optional[str]) -> bool:
    # No configured token means the endpoint stays closed
    if not expected or provided is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), provided.encode("utf-8"))


def _error_response(route: str, error: Exception) -> web.Response:
    get_error_tracker().record_error(
        component="server",
        category=ErrorCategory.HTTP,
        severity=ErrorSeverity.HIGH,
        message=f"Request to {route} failed: {error}",
        exception=error,
        context={"route": route},
    )
    return web.json_response({"error": str(error)}, status=500)
