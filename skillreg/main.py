import logging
from contextlib import asynccontextmanager

import sentry_sdk
import structlog
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillreg.api import health, instructions, skills
from skillreg.config import settings
from skillreg.core.loader import load_registry
from skillreg.core.registry import SkillRegistry

structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        logging.getLevelName(settings.log_level)
    ),
)

if settings.sentry_dsn:
    sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=0.2)


@asynccontextmanager
async def lifespan(app: FastAPI):
    log = structlog.get_logger()
    if app.state.registry is None:
        app.state.registry = load_registry()
    log.info(
        "Starting skill registry",
        guidance_dir=settings.guidance_dir,
        skills=len(app.state.registry),
        environment=settings.environment,
    )
    yield


def create_app(registry: SkillRegistry | None = None) -> FastAPI:
    """Build the HTTP app; pass a registry to skip loading from disk."""
    app = FastAPI(
        title="QA Skill Registry",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.registry = registry

    origins = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()] if settings.allowed_origins else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(skills.router, prefix="/skills", tags=["skills"])
    app.include_router(instructions.router, prefix="/instructions", tags=["instructions"])
    return app


app = create_app()
