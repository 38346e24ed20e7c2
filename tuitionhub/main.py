# tuitionhub/main.py
# TuitionHub FastAPI application entry point
#
# Startup:  optional migrations, DB connection, Redis ping
# Shutdown: connection pool disposal, Redis publisher close
# Routes:   /health, /api/v1/* (all endpoints via master router)
#
# Run:  uvicorn tuitionhub.main:app --reload

import logging
from contextlib import asynccontextmanager
from typing import Optional

from alembic import command
from alembic.config import Config
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import tuitionhub.db.base  # noqa: F401 -- registers all models
from tuitionhub.api.v1.router import api_router
from tuitionhub.core.config import Settings, settings as default_settings
from tuitionhub.core.exceptions import AppError
from tuitionhub.db.session import Database
from tuitionhub.services.notification_service import NotificationPublisher

logger = logging.getLogger("tuitionhub")


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def run_startup_migrations() -> bool:
    """Run `alembic upgrade head` using the project alembic.ini."""
    try:
        alembic_cfg = Config("alembic.ini")
        command.upgrade(alembic_cfg, "head")
        logger.info("Database migrations: OK")
        return True
    except Exception as exc:
        logger.warning(f"Database migrations failed -- {exc}")
        return False


# ── Exception Handlers ────────────────────────────────────────────────────────

def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = [
            {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
            for err in exc.errors()
        ]
        message = ", ".join(e["message"] for e in errors) or "Invalid request"
        return JSONResponse(
            status_code=400,
            content={
                "success": False,
                "message": message,
                "error": "validation_error",
                "errors": errors,
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        message = "Internal server error" if app_settings.is_production else str(exc)
        return JSONResponse(
            status_code=500,
            content={"success": False, "message": message, "error": "internal_error"},
        )


# ── App Factory ───────────────────────────────────────────────────────────────

def create_app(
    app_settings: Optional[Settings] = None,
    database: Optional[Database] = None,
) -> FastAPI:
    app_settings = app_settings or default_settings
    database = database or Database(app_settings.database_url, app_settings)
    publisher = NotificationPublisher(
        app_settings.redis_url,
        app_settings.notification_channel_prefix,
        socket_timeout=app_settings.redis_socket_timeout,
    )
    configure_logging(app_settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """
        Startup and shutdown logic.
        FastAPI's modern replacement for @app.on_event("startup").
        """
        logger.info(
            f"Starting {app_settings.app_name} v{app_settings.app_version} [{app_settings.app_env}]"
        )

        if app_settings.auto_migrate_on_startup:
            run_startup_migrations()

        database.ensure_connected()
        if database.check_connection():
            logger.info("Database connection: OK")
        else:
            logger.warning("Database connection failed -- check DATABASE_URL")

        if publisher.ping():
            logger.info("Redis connection: OK")
        else:
            logger.warning("Redis unavailable -- notifications will not be pushed")

        yield  # App runs here

        logger.info("Shutting down -- disposing DB connection pool")
        database.dispose()
        publisher.close()

    app = FastAPI(
        title=app_settings.app_name,
        version=app_settings.app_version,
        description="TuitionHub -- marketplace connecting students with home and online tutors.",
        docs_url="/api/docs",       # Swagger UI
        redoc_url="/api/redoc",     # ReDoc
        openapi_url="/api/openapi.json",
        lifespan=lifespan,
        debug=app_settings.debug,
    )
    app.state.database = database
    app.state.publisher = publisher
    app.state.settings = app_settings

    # ── CORS ──────────────────────────────────────────────────────────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app, app_settings)

    # All API routes under /api/v1
    app.include_router(api_router, prefix="/api/v1")

    # ── Health Check ──────────────────────────────────────────────────────────
    @app.get("/health", tags=["Health"], include_in_schema=False)
    def health_check():
        """
        Health check endpoint for load balancers.
        Returns 200 OK if the app is running; DB and Redis status included.
        """
        db_ok = database.check_connection()
        redis_ok = publisher.ping()
        return JSONResponse(
            status_code=200,
            content={
                "status": "ok",
                "app": app_settings.app_name,
                "version": app_settings.app_version,
                "environment": app_settings.app_env,
                "services": {
                    "database": "ok" if db_ok else "unavailable",
                    "redis": "ok" if redis_ok else "unavailable",
                },
            },
        )

    @app.get("/", include_in_schema=False)
    def root():
        return JSONResponse(
            content={
                "message": f"{app_settings.app_name} API",
                "docs": "/api/docs",
                "health": "/health",
            }
        )

    return app


app = create_app()
