"""FastAPI application factory for the book notes backend.

Run with:
    uvicorn src.api.main:create_app --factory

Middleware runs in reverse order of registration: RequestIDMiddleware is
added last so it wraps CORS and every route.
"""

from contextlib import asynccontextmanager
from datetime import timedelta
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.api.auth import TokenService, create_password_context
from src.api.config import Settings, get_settings
from src.api.database import create_db_engine, create_session_factory, db_healthcheck
from src.api.enhance import EnhancementClient
from src.api.logging import configure_logging, get_logger
from src.api.middleware import RequestIDMiddleware
from src.api.models import Base
from src.api.responses import register_exception_handlers
from src.api.routes import router

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    try:
        ok = db_healthcheck(app.state.engine)
        logger.info("database_healthcheck", ok=ok)
    except Exception as e:
        logger.error("database_healthcheck", ok=False, error=str(e))
    yield
    app.state.engine.dispose()


# PUBLIC_INTERFACE
def create_app(settings: Optional[Settings] = None, configure_logs: bool = True) -> FastAPI:
    """
    Build the application from explicit settings.

    Without settings they are read from the environment; a missing JWT_SECRET
    aborts startup with a validation error.
    """
    settings = settings or get_settings()
    if configure_logs:
        configure_logging(json_format=settings.log_json)

    app = FastAPI(
        title="Book Notes API",
        description="Personal book notes with bearer-token auth, per-user notes and optional AI summaries.",
        version="1.0.0",
        openapi_tags=[
            {"name": "Health", "description": "Service health and status."},
            {"name": "Auth", "description": "User registration and authentication."},
            {"name": "Notes", "description": "Create, list, view and delete your notes."},
            {"name": "AI", "description": "AI enhancement of note text."},
        ],
        lifespan=lifespan,
    )

    engine = create_db_engine(settings.database_url)
    # Initialize database tables
    Base.metadata.create_all(bind=engine)

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.pwd_context = create_password_context(settings.bcrypt_rounds)
    app.state.token_service = TokenService(
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
        validity=timedelta(days=settings.token_expire_days),
    )
    app.state.enhancer = (
        EnhancementClient(settings.ai_webhook_url, timeout=settings.ai_timeout_seconds)
        if settings.ai_webhook_url
        else None
    )

    register_exception_handlers(app)

    # CORS setup - allow frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.cors_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware)

    app.include_router(router)

    logger.info("app_created", env=settings.env, cors_origin=settings.cors_origin)
    return app
