from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .container import Container
from .errors import DriveError
from .routes import auth_router, drive_router

logger = logging.getLogger(__name__)


async def drive_error_handler(request: Request, exc: DriveError) -> JSONResponse:
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.message)
    payload = exc.to_dict()
    payload["source"] = "error"
    return JSONResponse(payload, status_code=exc.status_code)


def create_app(container: Container | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance."""

    container = container or Container()

    app = FastAPI()
    app.state.container = container

    frontend_origin = container.settings.frontend_origin
    allow_origins = [frontend_origin] if frontend_origin != "*" else ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(DriveError, drive_error_handler)

    app.include_router(auth_router)
    app.include_router(drive_router)

    @app.get("/")
    def read_root() -> dict[str, str]:
        return {
            "project": "content-drive",
            "status": "running",
            "mode": container.drive_service.config_status()["mode"],
        }

    return app
