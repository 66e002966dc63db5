from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jobtracker.api.admin_routes import router as admin_router
from jobtracker.api.ai_routes import router as ai_router
from jobtracker.api.routes import router as api_router
from jobtracker.config import get_settings
from jobtracker.db.init import init_database
from jobtracker.errors import (
    AIRequestError,
    AuthenticationError,
    AuthorizationError,
    JobTrackerError,
    RecordNotFoundError,
    ValidationError,
)
from jobtracker.logging_config import configure_logging

logger = logging.getLogger(__name__)

ERROR_STATUS: list[tuple[type[JobTrackerError], int]] = [
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ValidationError, 400),
    (RecordNotFoundError, 404),
    (AIRequestError, 502),
]


def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging()

    app = FastAPI(title=settings.app_name)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def _startup() -> None:
        init_database()

    @app.exception_handler(JobTrackerError)
    async def _service_error(request: Request, exc: JobTrackerError) -> JSONResponse:
        status_code = next((code for kind, code in ERROR_STATUS if isinstance(exc, kind)), 500)
        if status_code >= 500:
            logger.error("Request failed path=%s error=%s", request.url.path, exc)
        return JSONResponse({"detail": str(exc)}, status_code=status_code)

    @app.get("/health")
    def health() -> JSONResponse:
        return JSONResponse({"status": "ok"})

    app.include_router(api_router)
    app.include_router(ai_router)
    app.include_router(admin_router)
    return app
