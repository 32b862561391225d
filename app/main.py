from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.routes import router
from app.core.config import settings
from app.core.errors import PipelineError
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    configure_logging(settings.log_level, settings.log_json)
    app = FastAPI(title="Math Snapshot Explainer", version="0.1.0")
    app.include_router(router)

    @app.exception_handler(PipelineError)
    async def _pipeline_error(request: Request, exc: PipelineError) -> JSONResponse:
        logger.info(
            "request_failed",
            extra={"path": request.url.path, "error": exc.tag, "status_code": exc.status_code},
        )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 405:
            return JSONResponse(status_code=405, content={"error": "method_not_allowed"})
        return await http_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("pipeline_exception", extra={"path": request.url.path})
        return JSONResponse(status_code=500, content={"error": "pipeline_exception"})

    if settings.static_dir:
        static_path = Path(settings.static_dir)
        if static_path.is_dir():
            # Mounted last so the API routes take precedence
            app.mount("/", StaticFiles(directory=static_path, html=True), name="static")
        else:
            logger.warning("static_dir_missing", extra={"static_dir": settings.static_dir})
    else:
        @app.get("/")
        async def root():
            return {
                "message": "Welcome to the Math Snapshot Explainer API",
                "docs": "/docs",
                "health": "/health",
            }

    logger.info("startup", extra={"app_env": settings.app_env, "ocr_provider": settings.ocr_provider})
    return app


app = create_app()
