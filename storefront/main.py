from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException
from contextlib import asynccontextmanager
from datetime import timedelta
from pathlib import Path
from typing import Optional
import asyncio
import logging
import time
from storefront.auth import SessionRegistry
from storefront.cache import ResponseCache
from storefront.config import Settings, get_settings
from storefront.inquiries import InquiryLog
from storefront.logging_config import setup_logging
from storefront.routers import auth_router, inquiries, products, uploads
from storefront.store import CatalogStore
from storefront.uploads import IMAGE_URL_PREFIX

VERSION = "1.0.0"

logger = logging.getLogger(__name__)


async def _prune_sessions_forever(sessions: SessionRegistry, interval_seconds: float):
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            sessions.prune_expired()
        except Exception:
            logger.exception("Session pruning failed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.
    Runs the periodic session prune for as long as the app is up.
    """
    settings: Settings = app.state.settings
    task = asyncio.create_task(
        _prune_sessions_forever(app.state.sessions, settings.session_prune_interval_seconds)
    )
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


def create_app(settings: Optional[Settings] = None, store: Optional[CatalogStore] = None) -> FastAPI:
    """
    Build the application and every process-wide collaborator it uses.

    Nothing is shared between two apps built by separate calls, which is
    what the tests rely on for isolation.
    """
    settings = settings or get_settings()
    if settings.configure_logging:
        setup_logging(settings.log_level, log_file=Path(settings.log_file) if settings.log_file else None)
    if store is None:
        store = CatalogStore(
            settings.database_url,
            admin_username=settings.admin_username,
            admin_password=settings.admin_password,
        )

    app = FastAPI(
        title="Storefront Catalog",
        description="Product catalog, inquiries and admin API for a textile manufacturer",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.cache = ResponseCache(ttl_seconds=settings.cache_ttl_seconds)
    app.state.sessions = SessionRegistry(
        store.session_factory,
        lifetime=timedelta(hours=settings.session_expire_hours),
    )
    app.state.inquiries = InquiryLog()

    # CORS is only opened up for local development
    if settings.debug:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(GZipMiddleware, minimum_size=1024)

    @app.middleware("http")
    async def log_api_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        if request.url.path.startswith("/api"):
            duration_ms = (time.perf_counter() - start) * 1000
            logger.info(
                "%s %s %s in %.0fms",
                request.method, request.url.path, response.status_code, duration_ms,
            )
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        # The browser client reads `error`; FastAPI clients read `detail`
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail, "error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={
                "detail": "Invalid request data",
                "error": "Invalid request data",
                "errors": jsonable_encoder(exc.errors()),
            },
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        # Full detail goes to the log, never to the client
        logger.exception("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal server error", "error": "Internal server error"},
        )

    app.include_router(auth_router.router)
    app.include_router(products.router)
    app.include_router(uploads.router)
    app.include_router(inquiries.router)

    image_dir = Path(settings.image_dir)
    image_dir.mkdir(parents=True, exist_ok=True)
    app.mount(IMAGE_URL_PREFIX, StaticFiles(directory=image_dir), name="generated_images")

    @app.get("/api/health")
    async def health():
        """
        Health check endpoint.
        """
        return {
            "status": "running",
            "version": VERSION,
            "cache": app.state.cache.stats(),
        }

    return app


def run():
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_config=None,
    )


if __name__ == "__main__":
    run()
