"""
FastAPI web server for the RoboStorm comparison service.

Exposes the comparison tool over HTTP with the same framing the SPA's edge
function client expects: CORS preflight, POST-only, JSON envelopes.
"""
import asyncio
import json
import logging
import sys
import traceback
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from config import settings
from engine.analytics import InteractionRecorder
from engine.dispatcher import RequestDispatcher
from engine.service import ComparisonService
from security.sanitization import sanitize_text
from store import EntityStore, create_store

logger = logging.getLogger(__name__)

TOOL_PATHS = ["/api/mcp", "/functions/v1/mcp-server"]

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS, PUT, DELETE",
}

# Store calls are blocking; run them off the event loop
executor = ThreadPoolExecutor(max_workers=8)


def build_dispatcher(store: EntityStore) -> RequestDispatcher:
    """Wire store, recorder and service together once per process."""
    recorder = InteractionRecorder(store)
    return RequestDispatcher(ComparisonService(store, recorder))


def create_app(store: Optional[EntityStore] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        store: Entity store to serve from (defaults to the backend in settings)
    """
    if store is None:
        store = create_store()
    dispatcher = build_dispatcher(store)

    app = FastAPI(
        title="RoboStorm Comparison Service",
        description="Robot comparison, random pairing and comparison analytics",
        version="1.0.0",
    )
    app.state.store = store
    app.state.dispatcher = dispatcher

    # Global exception handler to sanitize all error responses
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch all unhandled exceptions and sanitize before responding."""
        logger.error(f"Unhandled exception: {sanitize_text(str(exc))}")
        logger.error(sanitize_text(traceback.format_exc()))

        return JSONResponse(
            status_code=500,
            content={
                "success": False,
                "error": "Internal server error",
                "error_code": getattr(exc, "error_code", "UNKNOWN"),
            },
            headers={"Access-Control-Allow-Origin": "*"},
        )

    async def tool_preflight():
        """CORS preflight."""
        return Response(status_code=200, headers=CORS_HEADERS)

    async def tool_request(request: Request):
        """Handle one comparison tool request."""
        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError, ValueError):
            body = None

        if not isinstance(body, dict):
            return JSONResponse(
                status_code=400,
                content={"success": False, "error": "Invalid request format"},
                headers={"Access-Control-Allow-Origin": "*"},
            )

        loop = asyncio.get_running_loop()
        response = await loop.run_in_executor(executor, request.app.state.dispatcher.handle, body)

        return JSONResponse(
            status_code=200 if response.success else 400,
            content=response.to_dict(),
            headers={"Access-Control-Allow-Origin": "*"},
        )

    async def method_not_allowed():
        return JSONResponse(
            status_code=405,
            content={"success": False, "error": "Method not allowed"},
        )

    for path in TOOL_PATHS:
        app.add_api_route(path, tool_preflight, methods=["OPTIONS"], include_in_schema=False)
        app.add_api_route(path, tool_request, methods=["POST"])
        app.add_api_route(
            path, method_not_allowed,
            methods=["GET", "PUT", "PATCH", "DELETE"],
            include_in_schema=False,
        )

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        current = request.app.state.store
        info = {
            "status": "healthy",
            "store_backend": current.backend_name,
        }
        if hasattr(current, "robot_count"):
            info["robots"] = current.robot_count()
        return info

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.DEFAULT_HOST, port=settings.DEFAULT_PORT)
