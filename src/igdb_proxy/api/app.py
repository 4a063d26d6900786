"""
FastAPI application exposing the proxy routes.

Routes:
    GET /api/games?search=<term>
    GET /api/latest-releases
    GET /health
"""

from collections.abc import AsyncIterator, Awaitable
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from igdb_proxy import __version__
from igdb_proxy.api.handlers import GameService, error_response
from igdb_proxy.config import Settings, get_settings
from igdb_proxy.contracts import GameSummary
from igdb_proxy.errors import ProxyError
from igdb_proxy.logger import get_logger, setup_logging

logger = get_logger(__name__, component="api")


def get_game_service(request: Request) -> GameService:
    """Dependency returning the service owned by the running app."""
    return request.app.state.game_service


async def run_operation(
    operation: Awaitable[list[GameSummary]],
) -> list[GameSummary] | JSONResponse:
    """
    Await a service call, answering unexpected failures with a 500.

    ProxyError propagates to the app-level handler. Anything else is
    rendered here so it never reaches Starlette's server error
    middleware, which would log and re-raise it a second time.
    """
    try:
        return await operation
    except ProxyError:
        raise
    except Exception as exc:
        status, body = error_response(exc)
        return JSONResponse(status_code=status, content=body)


def create_app(
    settings: Settings | None = None,
    *,
    service: GameService | None = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Configuration used to configure logging and wire the
            service (loaded from the environment if both are None)
        service: Pre-built service, mainly for tests

    Returns:
        FastAPI: Application ready to be served by uvicorn
    """
    if service is None:
        settings = settings or get_settings()
        service = GameService.from_settings(settings)

    setup_logging(settings.logging if settings is not None else None)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info("IGDB proxy starting")
        yield
        await app.state.game_service.close()
        logger.info("IGDB proxy stopped")

    app = FastAPI(title="IGDB Proxy", version=__version__, lifespan=lifespan)
    app.state.game_service = service

    # The browser client is served from another origin
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(ProxyError)
    async def handle_proxy_error(request: Request, exc: ProxyError) -> JSONResponse:
        status, body = error_response(exc)
        return JSONResponse(status_code=status, content=body)

    @app.get("/api/games", response_model=list[GameSummary])
    async def search_games(
        search: str | None = None,
        games: GameService = Depends(get_game_service),
    ) -> list[GameSummary] | JSONResponse:
        return await run_operation(games.search_games(search))

    @app.get("/api/latest-releases", response_model=list[GameSummary])
    async def latest_releases(
        games: GameService = Depends(get_game_service),
    ) -> list[GameSummary] | JSONResponse:
        return await run_operation(games.latest_releases())

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    return app
