"""
Hospital Auth - FastAPI Application Entrypoint

This module initializes the FastAPI application with:
- CORS and security middleware
- Authentication and account management routes
- Account store lifecycle management
- Error taxonomy -> JSON response mapping

Run with:
    uvicorn hospital_auth.app:app --host 0.0.0.0 --port 8000
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from hospital_auth import __version__
from hospital_auth.admin.routes import router as admin_router
from hospital_auth.auth.database import get_engine, init_db, get_session_factory
from hospital_auth.auth.routes import router as auth_router
from hospital_auth.config import settings
from hospital_auth.errors import AuthError, ServerError, Unauthenticated, ValidationError
from hospital_auth.gateway.middleware import SecurityMiddleware


logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Startup:
        - Initialize the account store unless one was already attached
          (tests attach an in-memory engine before starting the app)

    Shutdown:
        - Dispose the engine this lifespan created
    """
    if not settings.SECRET_KEY:
        logger.warning("SECRET_KEY is empty; session tokens are not secure")

    owned_engine = None
    if getattr(app.state, "db_engine", None) is None:
        owned_engine = get_engine(settings.DATABASE_URL)
        init_db(owned_engine)
        app.state.db_engine = owned_engine
        app.state.db_session_factory = get_session_factory(owned_engine)

    yield

    if owned_engine is not None:
        owned_engine.dispose()
        app.state.db_engine = None


app = FastAPI(
    title="Hospital Auth",
    description="Authentication and role-based authorization for the hospital stay manager",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)

app.add_middleware(SecurityMiddleware)


# =============================================================================
# Error handlers
# =============================================================================

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = None
    if errors:
        message = str(errors[0].get("msg", "")).replace("Value error, ", "") or None
    return JSONResponse(status_code=400, content=ValidationError(message).to_dict())


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError):
    # Pool exhaustion (TimeoutError) and store outages land here
    logger.exception("Account store error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ServerError().to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=ServerError().to_dict())


# Register routes
app.include_router(auth_router)
app.include_router(admin_router)


@app.get("/health")
def health_check():
    """
    Health check endpoint.
    Returns service status and account store reachability.
    """
    database_healthy = False
    try:
        with app.state.db_engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        database_healthy = True
    except SQLAlchemyError:
        logger.warning("Health check: account store unreachable")

    return {
        "status": "healthy" if database_healthy else "degraded",
        "version": __version__,
        "services": {
            "database": database_healthy,
        },
    }
