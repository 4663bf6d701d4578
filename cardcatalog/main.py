import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cardcatalog.api import (
    card_sub_types_router,
    card_types_router,
    cards_router,
    health_router,
    register_error_handlers,
)
from cardcatalog.config import settings
from cardcatalog.db.database import init_db

logging.getLogger("cardcatalog").setLevel(settings.log_level.upper())


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()
    yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("cardcatalog"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(card_types_router)
app.include_router(card_sub_types_router)
app.include_router(health_router)

register_error_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
