import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

# Import models so they are registered with SQLAlchemy Base
from . import models  # noqa: F401
from .cache import Cache, RedisCache, get_cache
from .config import ALLOWED_ORIGINS, LOG_LEVEL
from .database import Base, engine
from .domain.timeline import router as timeline_router
from .domain.timeline.errors import TimelineError
from .routes.automation import router as automation_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Reduce verbosity of third-party libraries
logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
logging.getLogger("redis").setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Studio timeline API starting up...")
    try:
        Base.metadata.create_all(bind=engine, checkfirst=True)
        logger.info("✅ Timeline tables ready")
    except Exception as e:
        # Ignore "already exists" errors from race conditions between workers
        error_msg = str(e)
        if "already exists" in error_msg or "duplicate key" in error_msg:
            logger.info("Database tables already exist (created by another worker)")
        else:
            logger.error(f"Failed to create database tables: {e}")
            raise

    yield
    logger.info("👋 Studio timeline API shutting down...")


app = FastAPI(title="Studio Timeline API", version="1.0.0", lifespan=lifespan)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    logger.warning(f"Validation error for {request.url.path}: {exc.errors()}")
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(TimelineError)
async def timeline_exception_handler(request: Request, exc: TimelineError):
    """Map timeline domain errors onto their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"❌ {request.method} {request.url.path} - {exc.message}")
    else:
        logger.info(f"⚠️ {request.method} {request.url.path} - {type(exc).__name__}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error": type(exc).__name__},
    )


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    try:
        response = await call_next(request)
    except Exception as e:
        logger.error(f"{request.method} {request.url.path} - Error: {str(e)}")
        raise
    duration_ms = (time.time() - start_time) * 1000
    logger.debug(f"{request.method} {request.url.path} - {response.status_code} ({duration_ms:.1f}ms)")
    return response


# Log CORS configuration for debugging
logger.info(f"CORS allowed origins: {ALLOWED_ORIGINS}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH"],
    allow_headers=["*"],
)

# Routes
app.include_router(timeline_router)
app.include_router(automation_router)


@app.get("/")
def root():
    return {"message": "Studio Timeline API is running"}


@app.get("/health")
def health():
    return {"status": "healthy"}


@app.get("/health/redis")
async def redis_health_check(cache: Cache = Depends(get_cache)):
    """Check Redis connectivity for monitoring"""
    if not isinstance(cache, RedisCache):
        return {"status": "healthy", "redis": {"connected": False, "backend": "memory"}}

    start_time = time.time()
    stats = cache.stats()
    response_time = (time.time() - start_time) * 1000  # Convert to milliseconds

    if not stats.get("available"):
        return {"status": "unhealthy", "redis": {"connected": False, "error": stats.get("error")}}

    return {
        "status": "healthy",
        "redis": {
            "connected": True,
            "response_time_ms": round(response_time, 2),
            "used_memory_human": stats.get("used_memory"),
            "connected_clients": stats.get("connected_clients"),
            "hit_rate": round(stats.get("hit_rate", 0), 2),
        },
    }
