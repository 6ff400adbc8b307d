"""
FastAPI application factory for the classroom monitor.

Routes:
- /api/* -> REST API over the live PipelineContext
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pipeline.scheduler import Clock, monotonic_ms
from runtime.context import PipelineContext

from .routes import api


def create_app(
    ctx: PipelineContext,
    loader: Any = None,
    scheduler: Any = None,
    clock: Clock = monotonic_ms,
    cors_origins: Optional[list] = None,
) -> FastAPI:
    """
    Create the FastAPI app bound to a pipeline context.

    Args:
        ctx: Shared pipeline context (persons, alerts, stats, session).
        loader: ModelLoader, for model readiness in /api/status.
        scheduler: SamplingScheduler, for the running flag in /api/status.
        clock: Millisecond clock matching the pipeline's event timestamps.
        cors_origins: Allowed origins for a separately served dashboard.
    """
    app = FastAPI(
        title="Classroom Monitor",
        version="0.1.0",
        description="Suspicious behavior monitoring over live object detection",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.ctx = ctx
    app.state.loader = loader
    app.state.scheduler = scheduler
    app.state.clock = clock

    app.include_router(api.router, prefix="/api")

    logging.debug("Web app created")
    return app
