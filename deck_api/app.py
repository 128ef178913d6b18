"""
FastAPI application entry point for the deck asset API.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from deck_api import __version__
from deck_api.config import Settings, get_settings
from deck_api.db import DbClient
from deck_api.dependencies import build_db_client, build_storage_client
from deck_api.errors import BackendError
from deck_api.routes import router
from deck_api.schemas import ErrorResponse
from deck_api.storage import StorageClient

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).resolve().parent / "static"


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p != "body"]
        field = ".".join(loc)
        parts.append(f"{field}: {err['msg']}" if field else err["msg"])
    return "; ".join(parts) or "Invalid request"


def _install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(BackendError)
    async def backend_error_handler(request: Request, exc: BackendError):
        return JSONResponse(
            status_code=500, content=ErrorResponse(error=exc.message).model_dump()
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=_validation_message(exc)).model_dump(),
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=ErrorResponse(error=str(exc.detail)).model_dump(),
            headers=getattr(exc, "headers", None),
        )


def create_app(
    settings: Optional[Settings] = None,
    db: Optional[DbClient] = None,
    storage: Optional[StorageClient] = None,
) -> FastAPI:
    settings = settings or get_settings()
    app = FastAPI(title="Deck Asset API", version=__version__)

    app.state.db = db if db is not None else build_db_client(settings)
    app.state.storage = storage if storage is not None else build_storage_client(settings)
    logger.info(
        "Using %s and %s",
        app.state.db.__class__.__name__,
        app.state.storage.__class__.__name__,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _install_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)

    @app.get("/", include_in_schema=False)
    def landing_page():
        return FileResponse(STATIC_DIR / "index.html")

    @app.get("/asset", include_in_schema=False)
    def asset_page():
        return FileResponse(STATIC_DIR / "asset.html")

    app.mount("/static", StaticFiles(directory=str(STATIC_DIR)), name="static")
    return app
