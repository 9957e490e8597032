"""HTTP transport for the resolver.

Routes:

    GET /1.0/identifiers/{identifier}   resolve a DID or dereference a DID URL
    GET /1.0/health                     liveness check
"""

import logging
from typing import Final, Optional

import aiohttp
from aiohttp import web

from .config import Settings
from .ledger import LedgerService
from .ledger.rest import RestLedgerService
from .request import RequestService

LOG = logging.getLogger(__name__)

SettingsAppKey: Final = web.AppKey("settings", Settings)
"""AppKey for accessing the application settings"""

SessionAppKey: Final = web.AppKey("http_session", aiohttp.ClientSession)
"""AppKey for accessing the aiohttp client session used to reach the ledger"""

RequestServiceAppKey: Final = web.AppKey("request_service", RequestService)
"""AppKey for accessing the request service"""


async def handle_identifier(request: web.Request):
    identifier = request.match_info["identifier"]
    if request.query_string:
        identifier = f"{identifier}?{request.query_string}"

    service = request.app[RequestServiceAppKey]
    response = await service.process(identifier, request.headers.get("Accept"))
    body = response.body
    if isinstance(body, str):
        body = body.encode("utf-8")
    return web.Response(
        body=body,
        status=response.status,
        headers={"Content-Type": response.content_type},
    )


async def handle_health(request: web.Request):
    return web.json_response({"status": "ok"})


async def ledger_session(app: web.Application):
    """Open the ledger session and request service for the app's lifetime."""
    settings = app[SettingsAppKey]
    LOG.info("Starting up")

    trace_config = aiohttp.TraceConfig()
    if settings.debug:

        async def on_request_end(session, trace_config_ctx, params):
            LOG.debug("Ledger request: %s %s", params.method, params.url)

        trace_config.on_request_end.append(on_request_end)

    session = aiohttp.ClientSession(trace_configs=[trace_config])
    app[SessionAppKey] = session
    config = settings.resolver_config()
    app[RequestServiceAppKey] = RequestService(
        config, RestLedgerService(config, settings.ledger_endpoints, session)
    )

    LOG.info("Startup complete")

    yield

    await session.close()


def create_app(
    settings: Optional[Settings] = None, ledger: Optional[LedgerService] = None
) -> web.Application:
    """Create the resolver application.

    Args:
        settings: process settings, loaded from the environment when None
        ledger: ledger gateway to use; the ledger REST API is used when None
    """
    if settings is None:
        settings = Settings()  # type: ignore

    app = web.Application()
    app[SettingsAppKey] = settings

    if ledger is None:
        app.cleanup_ctx.append(ledger_session)
    else:
        app[RequestServiceAppKey] = RequestService(settings.resolver_config(), ledger)

    app.add_routes(
        [
            web.get("/1.0/identifiers/{identifier:.+}", handle_identifier),
            web.get("/1.0/health", handle_health),
        ]
    )

    return app
