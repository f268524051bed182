import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from gateway import __version__
from gateway.api.router import router
from gateway.core.config import Settings, settings as default_settings
from gateway.core.errors import GatewayError
from gateway.core.telemetry import setup_telemetry
from gateway.schemas.common import ErrorResponse
from gateway.services.container import Services, build_services


log = logging.getLogger(__name__)


def _error_response(status_code: int, error: str, message: str, details: dict | None = None) -> JSONResponse:
    body = ErrorResponse(error=error, message=message, details=details or {})
    return JSONResponse(status_code=status_code, content=body.model_dump())


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def _gateway_error(request: Request, exc: GatewayError) -> JSONResponse:
        if exc.status_code >= 500:
            log.error("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
        return _error_response(exc.status_code, exc.code, exc.message, exc.details)

    @app.exception_handler(RequestValidationError)
    async def _invalid_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(
            422,
            "INVALID_REQUEST",
            "Request body does not match the endpoint schema",
            {"errors": jsonable_encoder(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def _unexpected(request: Request, exc: Exception) -> JSONResponse:
        log.exception("%s %s crashed", request.method, request.url.path)
        return _error_response(500, "INTERNAL_ERROR", "Internal error")


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logging.basicConfig(level=settings.log_level)
        owned = getattr(app.state, "services", None) is None
        if owned:
            app.state.services = build_services(settings)
        log.info("gateway: started (network=%s)", settings.qtum_network)
        try:
            yield
        finally:
            if owned:
                await app.state.services.aclose()

    app = FastAPI(title="Achievements Gateway", version=__version__, lifespan=lifespan)
    if services is not None:
        app.state.services = services

    setup_telemetry(app, settings)
    _install_error_handlers(app)
    app.include_router(router)
    return app


app = create_app()
