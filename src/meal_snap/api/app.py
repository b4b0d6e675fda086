"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from meal_snap.api.models import AnalyzeFoodRequest
from meal_snap.api.users import router as users_router
from meal_snap.app_logging import configure_logging
from meal_snap.config import parse_allowed_origins
from meal_snap.containers import AppContainer
from meal_snap.domain.analysis import AnalysisError


def create_app(container: AppContainer) -> FastAPI:
    """Create a FastAPI app configured with dependencies."""
    configure_logging(container.settings.log_level)
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container
    app.add_middleware(
        CORSMiddleware,
        allow_origins=parse_allowed_origins(container.settings.cors_allowed_origins),
        allow_methods=["*"],
        allow_headers=[
            "authorization",
            "x-client-info",
            "apikey",
            "content-type",
            "x-api-token",
        ],
    )

    app.include_router(users_router)

    @app.exception_handler(AnalysisError)
    async def analysis_error_handler(
        request: Request, exc: AnalysisError
    ) -> JSONResponse:
        """Return analysis failures as {error} with their status code."""
        logger.warning(
            "Meal analysis failed",
            extra={"kind": exc.kind.value, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.message, "kind": exc.kind.value},
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.post("/analyze-food")
    async def analyze_food(
        request: Request, payload: AnalyzeFoodRequest | None = None
    ) -> dict[str, object]:
        """Analyze a meal photo and return the validated estimate."""
        state_container: AppContainer = request.app.state.container
        analysis = await state_container.analysis_service.analyze(
            payload.image_base64 if payload is not None else None
        )
        logger.info(
            "Meal analysis completed",
            extra={"foods": len(analysis.foods), "confidence": analysis.confidence},
        )
        return analysis.model_dump()

    return app
