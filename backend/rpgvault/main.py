import asyncio
import contextlib
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .documents.router import router as documents_router
from .documents.storage import FileStorage, StorageError
from .game_systems.router import router as game_systems_router
from .locks.errors import LockConflict, LockForbidden
from .locks.manager import LockManager
from .locks.router import router as locks_router
from .locks.store import LockStore
from .shared.config import Settings, settings as default_settings
from .shared.log import configure_logging
from .validation.router import router as validation_router
from .validation.service import SchemaValidator
from .worlds.router import router as worlds_router

logger = logging.getLogger(__name__)


async def _sweep_loop(locks: LockManager, interval: int) -> None:
    while True:
        await asyncio.sleep(interval)
        locks.perform_scheduled_sweep()


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    interval = app.state.settings.LOCK_SWEEP_INTERVAL_SEC
    task = asyncio.create_task(_sweep_loop(app.state.lock_manager, interval)) if interval > 0 else None
    try:
        yield
    finally:
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(LockConflict)
    async def _lock_conflict(request: Request, exc: LockConflict):
        expires = exc.expires_at.isoformat() if exc.expires_at else None
        return JSONResponse(status_code=409, content={"detail": exc.message, "expiresAt": expires})

    @app.exception_handler(LockForbidden)
    async def _lock_forbidden(request: Request, exc: LockForbidden):
        return JSONResponse(status_code=403, content={"detail": exc.message})

    @app.exception_handler(StorageError)
    async def _storage_error(request: Request, exc: StorageError):
        logger.error("storage error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=500, content={"detail": "File storage error"})


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="rpgvault API",
        version="0.1.0",
        openapi_url=f"{settings.API_PREFIX}/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.lock_manager = LockManager(
        LockStore(), default_duration_minutes=settings.LOCK_DEFAULT_MINUTES
    )
    app.state.schema_validator = SchemaValidator()
    app.state.file_storage = FileStorage(settings.STORAGE_DIR)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_error_handlers(app)

    @app.get(f"{settings.API_PREFIX}/healthz")
    def healthz():
        return {"status": "ok", "app": "rpgvault"}

    for router in (
        game_systems_router,
        documents_router,
        locks_router,
        validation_router,
        worlds_router,
    ):
        app.include_router(router, prefix=settings.API_PREFIX)
    return app


app = create_app()
