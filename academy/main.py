from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from academy.api.admin_assessments import router as admin_assessments_router
from academy.api.assessments import router as assessments_router
from academy.api.codes import router as codes_router
from academy.api.courses import router as courses_router
from academy.api.health import router as health_router
from academy.api.me import router as me_router
from academy.api.metrics_endpoint import router as metrics_router
from academy.api.results import router as results_router
from academy.core.config import SETTINGS
from academy.core.logging import setup_logging
from academy.db.engine import lifespan_db
from academy.db.redis import lifespan_redis
from academy.middleware.metrics import MetricsMiddleware
from academy.middleware.request_context import RequestContextMiddleware

# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    # torn down in reverse order: Redis first, then the database
    async with lifespan_db():
        async with lifespan_redis():
            yield


app = FastAPI(
    title="academy-service",
    lifespan=lifespan,
    docs_url="/docs" if SETTINGS.is_dev else None,
    redoc_url="/redoc" if SETTINGS.is_dev else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=list(SETTINGS.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Last-added runs first: RequestContext → Metrics → CORS → route handler
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestContextMiddleware)

app.include_router(metrics_router)
app.include_router(health_router)
app.include_router(courses_router)
app.include_router(assessments_router)
app.include_router(admin_assessments_router)
app.include_router(results_router)
app.include_router(me_router)
app.include_router(codes_router)

logger.info(
    "academy-service started  env=%s log_level=%s port=%d docs=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    "on" if SETTINGS.is_dev else "off",
)
