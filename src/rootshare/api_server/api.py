# filename: src/rootshare/api_server/api.py
"""
RootShare - Sandboxed File Manager Server - Main API Module
Copyright (C) 2025 AZHAR ZOUHIR / BYTEDz

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU Affero General Public License as published
by the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
GNU Affero General Public License for more details.

You should have received a copy of the GNU Affero General Public License
along with this program. If not, see <https://www.gnu.org/licenses/>.
"""

import logging
from typing import List, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .. import __app_name__, __version__
from ..core import constants
from ..core.config import FileManagerConfig
from ..services.file_service import FileService
from ..web_ui import mount_web_ui
from .file_browser import router as file_browser_router

log = logging.getLogger(__name__)


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "Invalid request: " + "; ".join(problems) if problems else "Invalid request"


# --- FastAPI App Factory ---
def create_api_app(config: FileManagerConfig, cors_origins: Optional[List[str]] = None) -> FastAPI:
    app = FastAPI(title=f"{__app_name__} API", version=__version__, docs_url=None, redoc_url=None)
    app.state.file_service = FileService(config)

    if cors_origins:
        app.add_middleware(CORSMiddleware, allow_origins=cors_origins, allow_methods=["*"], allow_headers=["*"])

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)}, headers=exc.headers)

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        log.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=True)
        return JSONResponse(status_code=500, content={"error": "An unexpected error occurred."})

    app.include_router(file_browser_router, prefix=constants.API_PREFIX)

    try:
        mount_web_ui(app, constants.UI_PREFIX)
        log.info(f"Web UI enabled at {constants.UI_PREFIX}/")

        @app.get("/", include_in_schema=False)
        async def index():
            return RedirectResponse(url=f"{constants.UI_PREFIX}/")
    except Exception as e:
        log.warning(f"Web UI could not be loaded: {e}")

        @app.get("/", include_in_schema=False)
        async def web_ui_fallback():
            return {"message": "Web UI not available", "error": str(e)}

    return app
