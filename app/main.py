"""
Studio Analytics — FastAPI app factory.
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import DEFAULT_CAPACITY, STUDIO_TIMEZONE
from app.data.store import AnalyticsStore
from app.api.router_meta import router as meta_router
from app.api.router_upload import router as upload_router
from app.api.router_dashboard import router as dashboard_router
from app.api.router_reports import router as reports_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print(f"  Capacity per class = {app.state.store.capacity}")
    print(f"  Time zone = {STUDIO_TIMEZONE}")
    print("\nStudio Analytics ready — no data yet. Upload a CSV or ZIP export.\n")
    yield


def create_app(store: Optional[AnalyticsStore] = None) -> FastAPI:
    app = FastAPI(
        title="Studio Analytics API",
        description="Class attendance analytics — upload, filter, group, drill down, export",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else AnalyticsStore(DEFAULT_CAPACITY)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(meta_router)
    app.include_router(upload_router)
    app.include_router(dashboard_router)
    app.include_router(reports_router)

    return app


app = create_app()
