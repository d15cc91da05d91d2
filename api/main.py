"""
FastAPI main application for the Bookstore Catalog API.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import database
from api.config import config
from api.models import ErrorResponse, HealthResponse
from api.routes import authors, books, users
from catalog.database import DatabaseManager
from catalog.users import ADMINISTRATOR, DEFAULT_ROLES, UserStore
from utilities.logger import setup_logging

# Setup logging
logger = structlog.get_logger(__name__)


async def seed_identities(manager: DatabaseManager) -> None:
    """Create the default roles and, when configured, the administrator account."""
    async with manager.session() as session:
        store = UserStore(session)
        await store.ensure_roles(DEFAULT_ROLES)

        if not config.has_admin_seed():
            return
        if await store.find_by_email(config.admin_email) is not None:
            return

        result = await store.create(config.admin_email, config.admin_password, roles=(ADMINISTRATOR,))
        if result.succeeded:
            logger.info("Administrator account seeded")
        else:
            logger.warning("Administrator account could not be seeded", reasons=result.errors)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    setup_logging(
        log_level=config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
        debug=config.debug
    )
    logger.info("Starting Bookstore Catalog API")

    manager = DatabaseManager(config.database_url, echo=config.database_echo)
    try:
        await manager.connect()
        await seed_identities(manager)
    except Exception as e:
        logger.error("Failed to initialize database", error=str(e))
        await manager.disconnect()
        raise

    database.set_db_manager(manager)

    yield

    # Shutdown
    logger.info("Shutting down Bookstore Catalog API")
    database.set_db_manager(None)
    await manager.disconnect()


# Create FastAPI application
app = FastAPI(
    title=config.api_title,
    description="""
    REST API for the bookstore catalog.

    ## Features

    * **Books**: list and read books anonymously; create, update and delete with a bearer token
    * **Authors**: list and read anonymously; writes require the `Administrator` role
    * **Users**: register and log in to obtain a JSON Web Token valid for 24 hours

    ## Authentication

    Include the token returned by `/api/users/Login` in the Authorization header:

    ```
    Authorization: Bearer <token>
    ```
    """,
    version=config.api_version,
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=config.cors_allow_credentials,
    allow_methods=config.cors_allow_methods,
    allow_headers=config.cors_allow_headers,
)

app.include_router(books.router)
app.include_router(authors.router)
app.include_router(users.router)


# Exception handlers
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Handle HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=str(exc.detail),
            status_code=exc.status_code
        ).model_dump(),
        headers=getattr(exc, "headers", None)
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Report malformed or missing request data as 400 with the collected field errors."""
    errors = jsonable_encoder(exc.errors())
    logger.warning("Request validation failed", path=request.url.path, errors=len(errors))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(
            error="Request validation failed",
            detail=errors,
            status_code=status.HTTP_400_BAD_REQUEST
        ).model_dump()
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle general exceptions."""
    logger.error("Unhandled exception", error=str(exc), path=request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=ErrorResponse(
            error="Internal server error",
            detail=str(exc) if config.debug else None,
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR
        ).model_dump()
    )


# Health check endpoint (no authentication required)
@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint."""
    db_status = "unavailable"
    if database.db_manager is not None:
        health_info = await database.db_manager.health_check()
        db_status = health_info.get("status", "unknown")

    return HealthResponse(
        status="healthy" if db_status == "healthy" else "degraded",
        timestamp=datetime.now(timezone.utc),
        version=config.api_version,
        database_status=db_status
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "api.main:app",
        host=config.host,
        port=config.port,
        reload=config.debug,
        log_level=config.log_level.lower()
    )
