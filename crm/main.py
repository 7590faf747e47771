"""
main.py — FastAPI application: middleware, error handlers, router mounts

Business Rules:
- Every response carries X-Request-ID (8 chars) and the security headers
- Every error is rendered as ErrorResponse {error, status_code, request_id,
  detail}
- Service errors (CRMError) map to their own status code; unexpected
  exceptions are logged with traceback and become a generic 500

Called by: uvicorn (crm.main:app)
Depends on: config, logging_config, startup, routers/*
"""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from .config import APP_VERSION, settings
from .http_client import close_clients
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers.auth import router as auth_router
from .routers.contractors import router as contractors_router
from .routers.emails import router as emails_router
from .routers.notifications import router as notifications_router
from .routers.offers import router as offers_router
from .routers.search import router as search_router
from .routers.smtp import router as smtp_router
from .routers.stats import router as stats_router
from .routers.support import router as support_router
from .routers.tasks import router as tasks_router
from .routers.users import router as users_router
from .schemas.errors import ErrorResponse, field_errors
from .services.errors import CRMError, DeliveryError, ValidationError
from .startup import run_startup_tasks

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    "X-API-Version": "v1",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    run_startup_tasks()
    logger.info("CRM {} started", APP_VERSION)
    yield
    await close_clients()


app = FastAPI(title="Small-business CRM", version=APP_VERSION, lifespan=lifespan)
app.add_middleware(
    SessionMiddleware,
    secret_key=settings.secret_key,
    https_only=settings.is_production,
    same_site="lax",
)
app.state.limiter = limiter
app.add_middleware(SlowAPIMiddleware)


# ── Middleware ────────────────────────────────────────────────────────


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    start = time.perf_counter()
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000
        if request.url.path != "/health":
            logger.info(
                "{} {} → {} ({:.0f}ms)",
                request.method, request.url.path, response.status_code, elapsed_ms,
            )
    response.headers["X-Request-ID"] = request_id
    for name, value in SECURITY_HEADERS.items():
        response.headers[name] = value
    return response


# ── Error handlers ────────────────────────────────────────────────────


def _error(request: Request, status_code: int, message: str, detail=None, headers=None) -> JSONResponse:
    body = ErrorResponse(
        error=message,
        status_code=status_code,
        request_id=getattr(request.state, "request_id", ""),
        detail=detail,
    )
    return JSONResponse(body.model_dump(), status_code=status_code, headers=headers)


@app.exception_handler(CRMError)
async def crm_error_handler(request: Request, exc: CRMError):
    detail = None
    if isinstance(exc, ValidationError) and exc.fields:
        detail = exc.fields
    elif isinstance(exc, DeliveryError) and exc.record_id:
        detail = {"record_id": exc.record_id}
    if exc.status_code >= 500:
        logger.warning("{} {}: {}", request.method, request.url.path, exc.message)
    return _error(request, exc.status_code, exc.message, detail)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return _error(request, exc.status_code, message, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return _error(request, 422, "Validation error", field_errors(exc.errors()))


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return _error(request, 429, f"Rate limit exceeded: {exc.detail}")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return _error(request, 500, "Internal server error")


# ── Routes ────────────────────────────────────────────────────────────

for r in (
    auth_router,
    contractors_router,
    tasks_router,
    offers_router,
    emails_router,
    support_router,
    notifications_router,
    search_router,
    users_router,
    smtp_router,
    stats_router,
):
    app.include_router(r)


@app.get("/health")
async def health():
    return {"status": "ok", "version": APP_VERSION}
