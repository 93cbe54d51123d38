from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from sous_chef.api.v1.cooking import router as cooking_router
from sous_chef.api.v1.inventory import router as inventory_router
from sous_chef.api.v1.metrics import router as metrics_router
from sous_chef.api.v1.recipes import router as recipes_router
from sous_chef.api.v1.shopping_list import router as shopping_list_router
from sous_chef.config import Settings
from sous_chef.logging_utils import configure_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Ensure data dir exists so repos can write
    settings = Settings()
    os.makedirs(settings.data_dir, exist_ok=True)
    logger.info("data dir: %s", os.path.abspath(settings.data_dir))
    yield


def create_app() -> FastAPI:
    settings = Settings()
    configure_logging(settings.log_level)
    app = FastAPI(title="Sous Chef API", version="1.0", lifespan=lifespan)

    # CORS (narrow it down in .env via CORS_ALLOW_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(inventory_router)
    app.include_router(recipes_router)
    app.include_router(cooking_router)
    app.include_router(shopping_list_router)
    app.include_router(metrics_router)

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/readyz")
    def readyz():
        return {"status": "ready"}

    return app

app = create_app()
