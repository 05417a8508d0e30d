"""Wellbeing Check-In API - FastAPI application entry point."""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from checkin_core.errors import (
    AuthorizationError,
    RecordNotFoundError,
    RecordValidationError,
    RemoteUnavailableError,
)
from checkin_core.record_store import RecordStore

from .config import get_settings
from .routes import activities, checkins, journal, settings as settings_routes, wellbeing
from .session import build_record_store

log = logging.getLogger(__name__)

settings = get_settings()

# Exception kind -> HTTP status
ERROR_STATUS = {
    AuthorizationError: 401,
    RecordNotFoundError: 404,
    RecordValidationError: 422,
    ValidationError: 422,
    RemoteUnavailableError: 503,
}


def create_app(record_store: Optional[RecordStore] = None) -> FastAPI:
    """
    Build the API around one record store.

    If no store is given, one is constructed from configuration at startup.
    Either way it is loaded (cache, then remote) before serving requests.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store = record_store or build_record_store(settings)
        app.state.record_store = store
        state = await store.load()
        log.info(f"[API] Record store ready: {state.to_dict()}")
        try:
            yield
        finally:
            await store.remote.aclose()

    app = FastAPI(
        title="Wellbeing Check-In API",
        description="Check-ins, journal entries and derived wellbeing scores",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Configure CORS for frontend
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["*"],
    )

    for error_type, status_code in ERROR_STATUS.items():

        async def handle_error(request: Request, exc: Exception, status_code: int = status_code):
            log.warning(f"[API] {request.method} {request.url.path} -> {status_code}: {exc}")
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

        app.add_exception_handler(error_type, handle_error)

    # Include routers
    app.include_router(wellbeing.router)
    app.include_router(checkins.router)
    app.include_router(journal.router)
    app.include_router(activities.router)
    app.include_router(settings_routes.router)

    @app.get("/health")
    async def health_check():
        """Health check endpoint for the API."""
        return {"status": "healthy", "service": "wellbeing-api"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=settings.log_level)
    uvicorn.run(
        "server.wellbeing_api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=True,
    )
