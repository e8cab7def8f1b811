"""ghadmin: FastAPI application entry point for the desktop host."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ghadmin.config import settings
from ghadmin.runtime import close_manager, init_manager

logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("Starting GitHub Admin engine...")
    await init_manager()
    yield
    close_manager()
    logger.info("GitHub Admin engine stopped")


app = FastAPI(
    title="GitHub Admin",
    description="Organization sync and bulk repository administration",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

from ghadmin.api.admin import router as admin_router

app.include_router(admin_router)


@app.get("/health")
async def health():
    return {"status": "ok", "service": "github-admin", "version": "0.1.0"}
