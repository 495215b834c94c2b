"""Application entrypoint: ``uvicorn invoicedesk.main:app``."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from invoicedesk.api.errors import register_exception_handlers
from invoicedesk.api.router import get_api_router
from invoicedesk.auth.gate import AuthGate, AuthGateMiddleware
from invoicedesk.auth.jwt import TokenService
from invoicedesk.core.clock import Clock, system_clock
from invoicedesk.core.config import Config, get_config
from invoicedesk.core.startup import bootstrap


def create_app(config: Config | None = None, clock: Clock | None = None, run_bootstrap: bool = True) -> FastAPI:
    """Build the FastAPI application.

    ``run_bootstrap=False`` skips logging setup and table creation, for callers
    that manage the database themselves (tests).
    """
    cfg = config or get_config()
    clock = clock or system_clock

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        if run_bootstrap:
            bootstrap(cfg)
        yield

    app = FastAPI(title=cfg.APP_NAME, version=cfg.APP_VERSION, lifespan=lifespan)
    app.state.config = cfg
    app.state.clock = clock
    app.state.tokens = TokenService(secret=cfg.JWT_SECRET, ttl_seconds=cfg.JWT_TTL_SECONDS, clock=clock)

    app.add_middleware(AuthGateMiddleware, gate=AuthGate(app.state.tokens, api_prefix=cfg.API_PREFIX))
    register_exception_handlers(app)
    app.include_router(get_api_router(cfg.API_PREFIX))

    @app.get("/")
    def root() -> dict:
        return {"service": cfg.APP_NAME, "version": cfg.APP_VERSION, "api_prefix": cfg.API_PREFIX}

    return app


# Expose ASGI app for `uvicorn invoicedesk.main:app`.
app = create_app()
