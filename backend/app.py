import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from backend.api.awards import router
from backend.config import Settings
from backend.connectors.usaspending import USAspendingClient
from backend.errors import UpstreamError, ValidationError
from backend.logging_config import configure_logging

LOGGER = logging.getLogger(__name__)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type, Authorization, X-Requested-With",
}
PREFLIGHT_HEADERS = {**CORS_HEADERS, "Access-Control-Max-Age": "86400"}


def create_app(client: Optional[USAspendingClient] = None) -> FastAPI:
    """Build the API; ``client`` replaces the USAspending client built from the environment."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        load_dotenv()
        settings = Settings.from_env()
        configure_logging(settings.log_level, settings.upstream_log_level)
        if app.state.spending_client is None:
            app.state.spending_client = USAspendingClient.from_settings(settings)
            app.state.owns_spending_client = True
        LOGGER.info("AwardScope API started (upstream=%s)", app.state.spending_client.base_url)
        try:
            yield
        finally:
            if app.state.owns_spending_client:
                app.state.spending_client.close()
                app.state.spending_client = client
                app.state.owns_spending_client = False

    app = FastAPI(title="AwardScope API", version="0.1.0", lifespan=lifespan)
    app.state.spending_client = client
    app.state.owns_spending_client = False

    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=204, headers=PREFLIGHT_HEADERS)
        try:
            response = await call_next(request)
        except Exception:
            LOGGER.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse({"error": "Internal server error"}, status_code=500)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        LOGGER.info("Rejected %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError):
        LOGGER.info("Invalid request body on %s %s", request.method, request.url.path)
        return JSONResponse(
            {"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
            status_code=400,
        )

    @app.exception_handler(UpstreamError)
    async def upstream_error(request: Request, exc: UpstreamError):
        LOGGER.error("Upstream failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": "Upstream spending data request failed"}, status_code=500)

    @app.get("/health", tags=["system"])
    def health():
        return {"status": "ok"}

    app.include_router(router)
    app.include_router(router, prefix="/api", include_in_schema=False)
    return app


app = create_app()
