# tuitionhub/db/session.py
# Database connection resource and session management
#
# The engine is owned by a Database object created by the app factory and
# stored on app.state.database. Nothing connects at import time:
#   ensure_connected() -- idempotent, lazily builds engine + session factory
#   dispose()          -- releases the pool on shutdown
#
# FastAPI endpoints get a session via: Depends(get_db)

import logging
import threading
from typing import Generator, Optional

from fastapi import Request
from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from tuitionhub.core.config import Settings, settings as default_settings

logger = logging.getLogger("tuitionhub.db")


class Database:
    """Lazily initialised engine + session factory for one database URL."""

    def __init__(self, url: str, app_settings: Optional[Settings] = None):
        self.url = url
        self._settings = app_settings or default_settings
        self._engine: Optional[Engine] = None
        self._session_factory: Optional[sessionmaker] = None
        self._lock = threading.Lock()

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def ensure_connected(self) -> Engine:
        """Create the engine on first use. Safe to call repeatedly."""
        if self._engine is not None:
            return self._engine
        with self._lock:
            if self._engine is None:
                self._engine = create_engine(self.url, **self._engine_options())
                self._session_factory = sessionmaker(
                    bind=self._engine,
                    autocommit=False,
                    autoflush=False,
                    expire_on_commit=False,  # Prevents lazy load errors after commit
                )
                logger.info(f"Database engine created ({self._engine.dialect.name})")
        return self._engine

    def dispose(self) -> None:
        """Release pooled connections. The next use reconnects."""
        with self._lock:
            if self._engine is not None:
                self._engine.dispose()
                logger.info("Database connection pool disposed")
            self._engine = None
            self._session_factory = None

    def _engine_options(self) -> dict:
        # pool_pre_ping=True -> test connection before each use
        options = {
            "pool_pre_ping": True,
            "echo": self._settings.db_echo,
        }
        if self.url.startswith("sqlite"):
            # Endpoints run in a threadpool; SQLite connections must be shareable
            options["connect_args"] = {"check_same_thread": False}
        else:
            options.update(
                pool_size=self._settings.db_pool_size,
                max_overflow=self._settings.db_max_overflow,
                pool_recycle=self._settings.db_pool_recycle,
            )
        return options

    # ── Access ────────────────────────────────────────────────────────────────

    @property
    def engine(self) -> Engine:
        return self.ensure_connected()

    def session(self) -> Session:
        self.ensure_connected()
        return self._session_factory()

    def check_connection(self) -> bool:
        """
        Used by /health endpoint to verify DB connectivity.
        Returns True if connected, False otherwise.
        """
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception as exc:
            logger.warning(f"Database connection check failed: {exc}")
            return False


# ── FastAPI Dependencies ──────────────────────────────────────────────────────

def get_database(request: Request) -> Database:
    return request.app.state.database


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency injected into every FastAPI endpoint that needs DB access.

    Usage:
        @router.get("/example")
        def example(db: Session = Depends(get_db)):
            ...

    Guarantees the session is always closed, and rolled back on exceptions.
    The app's notification publisher rides along in db.info["publisher"].
    """
    db = get_database(request).session()
    db.info["publisher"] = getattr(request.app.state, "publisher", None)
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
