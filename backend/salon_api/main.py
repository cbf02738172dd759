import logging
import re

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException

from salon_api.api.router import api_router
from salon_api.core.config import settings
from salon_api.core.limiter import limiter
from salon_api.core.logging_config import configure_logging
from salon_api.core.tenancy import tenant_from_request
from salon_api.db import init_db

logger = logging.getLogger(__name__)


def error_body(status_code: int, message, **extra) -> dict:
    return {"success": False, "status": status_code, "message": message, **extra}


def create_application() -> FastAPI:
    configure_logging()

    app = FastAPI(title=settings.PROJECT_NAME, version="0.1.0")
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.BACKEND_CORS_ORIGINS,
        # Every tenant subdomain of the root domain
        allow_origin_regex=rf"https://([a-z0-9-]+\.)?{re.escape(settings.ROOT_DOMAIN)}",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def resolve_tenant_and_log(request: Request, call_next):
        request.state.tenant = tenant_from_request(request)
        response = await call_next(request)
        logger.info(
            f"{request.method} {request.url.path} tenant={request.state.tenant or '-'} -> {response.status_code}"
        )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(exc.status_code, exc.detail),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RateLimitExceeded)
    async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
        logger.warning(f"Rate limit exceeded for {request.url.path}: {exc.detail}")
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content=error_body(status.HTTP_429_TOO_MANY_REQUESTS, f"Rate limit exceeded: {exc.detail}"),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content=error_body(
                status.HTTP_422_UNPROCESSABLE_ENTITY,
                "Validation error",
                errors=jsonable_encoder(exc.errors()),
            ),
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error"),
        )

    app.include_router(api_router, prefix=settings.API_V1_STR)

    @app.on_event("startup")
    def _startup() -> None:
        init_db()

    return app


app = create_application()
