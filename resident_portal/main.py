import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from . import __version__
from .config import ALLOWED_ORIGINS, SECURITY_HEADERS_ENABLED
from .domain.messages.router import router as messages_router
from .domain.reports.router import router as reports_router
from .domain.reports.router import updates_router as report_updates_router
from .domain.scheduling.router import availability_router
from .domain.scheduling.router import router as appointments_router
from .domain.users.router import router as users_router
from .json_store import StorageError, get_store
from .rate_limiter import get_redis_client
from .routes.auth import router as auth_router
from .routes.board import router as board_router
from .routes.bulletin import router as bulletin_router
from .routes.documents import router as documents_router
from .routes.notices import router as notices_router
from .routes.notifications import router as notifications_router
from .routes.posts import router as posts_router
from .security_headers import SecurityHeadersMiddleware

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Keep TestClient/httpx request lines out of the portal log
for noisy in ("httpx", "httpcore"):
    logging.getLogger(noisy).setLevel(logging.WARNING)

UNAUTHENTICATED_DETAIL = "Not authenticated. Please provide a valid Bearer token in the Authorization header."


@asynccontextmanager
async def lifespan(app: FastAPI):
    store = get_store()
    logger.info(f"🚀 Resident portal {__version__} starting, data in {store.data_dir} ({store.mode} mode)")
    if get_redis_client() is not None:
        logger.info("📡 Auth rate limits shared through Redis")
    yield
    logger.info("👋 Resident portal shutting down")


app = FastAPI(title="Resident Portal API", version=__version__, lifespan=lifespan)


def _is_authorization_error(error: dict) -> bool:
    return "authorization" in str(error.get("loc", "")).lower()


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """422 for bad input, 401 when the Authorization header is what failed"""
    errors = exc.errors()
    if any(_is_authorization_error(e) for e in errors):
        logger.warning(f"🔒 Missing or malformed Authorization header on {request.url.path}")
        return JSONResponse(status_code=401, content={"detail": UNAUTHENTICATED_DETAIL})

    logger.warning(f"⚠️ Rejected input on {request.method} {request.url.path}: {errors}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(errors)})


@app.exception_handler(StorageError)
async def storage_exception_handler(request: Request, exc: StorageError):
    logger.error(f"❌ Storage failure on {request.method} {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "An internal error occurred while accessing portal data"},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"❌ {request.method} {request.url.path} failed: {e}")
        raise
    elapsed_ms = (time.perf_counter() - started) * 1000
    logger.debug(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.0f} ms)")
    return response


if SECURITY_HEADERS_ENABLED:
    app.add_middleware(SecurityHeadersMiddleware, exclude_paths=["/health", "/docs", "/openapi.json"])
else:
    logger.warning("⚠️ Security headers disabled, do not run like this in production")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["Authorization", "Content-Type"],
)

# report_updates_router goes before reports_router so /reports/updates is not read as a report id
for router in (
    auth_router,
    users_router,
    notices_router,
    report_updates_router,
    reports_router,
    appointments_router,
    availability_router,
    board_router,
    bulletin_router,
    documents_router,
    messages_router,
    notifications_router,
    posts_router,
):
    app.include_router(router)


@app.get("/")
def root():
    return {"message": "Resident Portal API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}
