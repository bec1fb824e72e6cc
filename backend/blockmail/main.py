from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api.deps import get_autosave
from .api.routes import actions, documents, health
from .core.config import settings

logger = logging.getLogger("blockmail.backend")
logging.basicConfig(level=settings.log_level.upper(), format="%(levelname)s %(name)s %(message)s")


@asynccontextmanager
async def lifespan(_: FastAPI):
    yield
    saved = get_autosave().save_pending()
    logger.info("Saved %s pending document(s) on shutdown", saved)


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router, prefix="/api")
app.include_router(actions.router, prefix="/api")
app.include_router(documents.router, prefix="/api")


__all__ = ["app"]
