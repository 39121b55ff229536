import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from connect.core.config import settings
from connect.core.database import init_db
from connect.core.logging_config import setup_logging
from connect.core.session_cache import SessionCache
from connect.api.error_handling import register_exception_handlers
from connect.api.endpoints import auth, verification, health

setup_logging(settings.LOG_LEVEL, settings.JSON_LOGS)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for startup and shutdown events.

    Builds the session cache once per process and closes it on shutdown.
    Tests may set app.state.session_cache beforehand to inject a double.
    """
    logger.info("Starting up Connect API...")
    init_db()
    logger.info("Database initialized successfully")

    owns_cache = getattr(app.state, "session_cache", None) is None
    if owns_cache:
        app.state.session_cache = SessionCache.from_settings()

    yield

    logger.info("Shutting down Connect API...")
    if owns_cache:
        app.state.session_cache.close()
        app.state.session_cache = None


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="1.0.0",
    description="Accounts, email verification and session management for Connect",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(verification.router, prefix=settings.API_PREFIX)
app.include_router(auth.router, prefix=settings.API_PREFIX)
app.include_router(health.router)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level="info"
    )
