"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from meshisele.api.decisions import router as decisions_router
from meshisele.api.history import router as history_router
from meshisele.app_logging import configure_logging
from meshisele.containers import AppContainer
from meshisele.domain.errors import EmptyCandidatePoolError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    app.include_router(decisions_router)
    app.include_router(history_router)

    @app.exception_handler(EmptyCandidatePoolError)
    async def empty_pool(_: Request, exc: EmptyCandidatePoolError) -> JSONResponse:
        logger.warning("No candidates for %s", exc.criteria)
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": "no_matching_candidates"},
        )

    @app.exception_handler(ValueError)
    async def invalid_selection(_: Request, exc: ValueError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": str(exc)},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    return app
