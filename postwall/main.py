import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import routes
from .backend import InMemoryBackend, KeyValueBackend, RedisBackend
from .config import Settings, settings as default_settings
from .errors import BackendFailure, PostWallError, ValidationError
from .logging_config import configure_logging
from .service import now_ms, seed_default_post
from .storage import PostStore

logger = logging.getLogger(__name__)
http_logger = logging.getLogger("postwall.http")


def build_backend(settings: Settings) -> KeyValueBackend:
    kind = settings.STORE_BACKEND.lower()
    if kind == "memory":
        return InMemoryBackend()
    if kind == "redis":
        return RedisBackend.from_url(settings.REDIS_URL)
    raise ValueError(f"unknown STORE_BACKEND {settings.STORE_BACKEND!r}")


def error_body(message: str, field: Optional[str] = None) -> dict:
    body = {"success": False, "error": message}
    if field:
        body["field"] = field
    return body


async def post_wall_error_handler(request: Request, exc: PostWallError):
    if isinstance(exc, BackendFailure):
        logger.error("%s %s: %s", request.method, request.url.path, exc.message)
    field = exc.field if isinstance(exc, ValidationError) else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message, field))


async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)),
                        headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if not errors:
        return JSONResponse(status_code=400, content=error_body("Invalid request"))
    first = errors[0]
    loc = [str(part) for part in first.get("loc", ()) if part != "body"]
    if first.get("type") == "json_invalid":
        return JSONResponse(status_code=400, content=error_body("Invalid JSON body"))
    return JSONResponse(
        status_code=400,
        content=error_body(first.get("msg", "Invalid request"), ".".join(loc) or None),
    )


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


def create_app(settings: Optional[Settings] = None, store: Optional[PostStore] = None) -> FastAPI:
    settings = settings or default_settings
    configure_logging(settings.LOG_LEVEL)
    if store is None:
        store = PostStore(build_backend(settings))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.SEED_DEFAULT_POST:
            seed_default_post(app.state.store)
        yield

    app = FastAPI(title="Post Wall API", version="1.0", lifespan=lifespan)
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration = (time.perf_counter() - start) * 1000
        http_logger.info("%s %s - %s - %dms", request.method, request.url.path,
                         response.status_code, duration)
        return response

    app.add_exception_handler(PostWallError, post_wall_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    app.include_router(routes.router)

    @app.get("/health")
    def health():
        backend = "ok" if app.state.store.backend.ping() else "unavailable"
        return {"status": "ok", "backend": backend, "timestamp": now_ms()}

    return app
