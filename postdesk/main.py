# postdesk/main.py

import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from postdesk import __version__
from postdesk.config import get_settings
from postdesk.database import init_db
from postdesk.errors import PostLifecycleError
from postdesk.logging_config import configure_logging, trace_id_var
from postdesk.routers import assets_router, posts_router
from postdesk.storage.factory import get_storage_provider

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, build the storage provider, create tables outside production."""
    configure_logging(json_format=settings.LOG_JSON, level=settings.LOG_LEVEL)
    if settings.ENVIRONMENT != "production":
        init_db()
    get_storage_provider(settings)
    logger.info(f"postdesk {__version__} started ({settings.ENVIRONMENT})")
    yield


app = FastAPI(title="Postdesk API", version=__version__, lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", "X-User-Id", "X-User-Name"],
)

app.include_router(posts_router)
app.include_router(assets_router)


@app.middleware("http")
async def bind_trace_id(request: Request, call_next):
    """Tag every log line of a request with one trace id."""
    trace_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
    token = trace_id_var.set(trace_id)
    try:
        response = await call_next(request)
    finally:
        trace_id_var.reset(token)
    response.headers["X-Request-ID"] = trace_id
    return response


@app.exception_handler(PostLifecycleError)
async def lifecycle_error_handler(request: Request, exc: PostLifecycleError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------

@app.get("/health")
def health() -> dict:
    return {"status": "ok", "service": "postdesk-api", "version": __version__}


@app.get("/ping", response_class=PlainTextResponse)
def ping() -> str:
    """Keep-alive probe for hosts that sleep idle instances."""
    return "pong"
