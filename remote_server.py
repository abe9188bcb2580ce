import asyncio
import logging
import sys
from typing import Optional, Sequence

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

from config import ServerConfig, load_config
from core.registry import Tool, ToolRegistry
from core.server import CORS_HEADERS, DispatchResult, DispatchServer
from observability.metrics import start_metrics_server

logger = logging.getLogger(__name__)

# Every method reaches the dispatcher, which answers 405 itself
_ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _render(outcome: DispatchResult) -> Response:
    if outcome.body is None:
        return Response(status_code=outcome.status_code, headers=CORS_HEADERS)
    return JSONResponse(outcome.body, status_code=outcome.status_code, headers=CORS_HEADERS)


def create_app(tools: Sequence[Tool], config: Optional[ServerConfig] = None) -> FastAPI:
    """Build the HTTP app exposing `tools` on a single MCP endpoint."""
    config = config or load_config()
    dispatcher = DispatchServer(ToolRegistry(tools))

    app = FastAPI(title="walletwise MCP server", version="1.0", docs_url=None, redoc_url=None, openapi_url=None)
    app.state.dispatcher = dispatcher
    app.state.config = config

    async def _internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Error handling request: %s", exc, exc_info=exc)
        return JSONResponse({"error": "Internal server error"}, status_code=500, headers=CORS_HEADERS)

    app.add_exception_handler(Exception, _internal_error)

    @app.api_route("/{path:path}", methods=_ALL_METHODS, include_in_schema=False)
    async def mcp_endpoint(request: Request):
        outcome = await dispatcher.handle_request(request.method, request.body)
        return _render(outcome)

    return app


# Entrypoint helper
async def serve(app: Optional[FastAPI] = None, config: Optional[ServerConfig] = None):
    import uvicorn
    from handlers import build_default_tools

    config = config or load_config()
    if app is None:
        app = create_app(build_default_tools(config), config)
    if config.metrics_enabled:
        # Exporter lives on its own port; the protocol app answers every path
        try:
            start_metrics_server(config.metrics_host, config.metrics_port)
            logger.info("/metrics exporter on http://%s:%s/metrics", config.metrics_host, config.metrics_port)
        except OSError as e:
            logger.warning("Metrics server disabled: %s", e)
    uv_config = uvicorn.Config(app, host=config.host, port=config.port, log_level=config.log_level.lower())
    server = uvicorn.Server(uv_config)
    logger.info("walletwise MCP server running on %s:%s", config.host, config.port)
    await server.serve()


def main() -> None:
    config = load_config()
    logging.basicConfig(level=config.log_level, stream=sys.stderr)
    asyncio.run(serve(config=config))


if __name__ == "__main__":
    main()
