"""
FastAPI application entry point for the rental backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rental_backend.config import get_settings
from rental_backend.dependencies import get_rental_store
from rental_backend.lifecycle import LifecycleTimer
from rental_backend.routes import router


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    timer = None
    if settings.lifecycle_enabled:
        timer = LifecycleTimer(
            get_rental_store(), interval_seconds=settings.lifecycle_interval_seconds
        )
        timer.start()
    app.state.lifecycle_timer = timer
    try:
        yield
    finally:
        if timer:
            timer.stop(timeout=5)


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(
        title="Console Rental Backend (FastAPI)", version="0.1.0", lifespan=lifespan
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
        expose_headers=["Content-Length"],
        max_age=600,
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
