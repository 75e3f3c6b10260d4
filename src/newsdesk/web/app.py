# ABOUTME: FastAPI application factory with database lifespan and error mapping.
# ABOUTME: Main entry point for the newsdesk publishing API.

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from newsdesk.db.session import close_db, init_db
from newsdesk.errors import PublicationError
from newsdesk.web.routes import api, newspaper

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None]:
    """Application lifespan context for database setup/teardown."""
    logger.info("app_startup")
    await init_db()
    yield
    logger.info("app_shutdown")
    await close_db()


async def publication_error_handler(_request: Request, exc: PublicationError) -> JSONResponse:
    """Render pipeline errors as ``{"error": message}`` with their status code."""
    body: dict = {"error": exc.message}
    body.update({k: v for k, v in exc.details.items() if k != "errors"})
    if exc.status_code >= 500:
        logger.error("request_failed", error=exc.message)
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Unparseable bodies and bad query parameters are 400s, not FastAPI's 422."""
    logger.info("request_invalid", path=request.url.path)
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "errors": jsonable_encoder(exc.errors())},
    )


async def http_error_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing errors (unknown path, wrong method) in the same error shape."""
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Anything unexpected becomes a logged 500 without internals in the body."""
    logger.error("request_unhandled_error", path=request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Newsdesk",
        description="Multi-tenant newspaper, web and short-news publishing API",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_exception_handler(PublicationError, publication_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(api.router)
    app.include_router(newspaper.router)

    return app


# Application instance for uvicorn
app = create_app()
