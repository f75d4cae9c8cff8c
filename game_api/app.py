from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging

from fastapi import FastAPI, Depends, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from game_api.core import APITags, GameApiError
from game_api.core.env import (
    Environment,
    get_env,
    initialize_environment,
    reset_environment,
)
from game_api.database import JsonStore, get_json_store, startup_store, shutdown_store
from game_api.realtime import (
    ConnectionRegistry,
    get_connection_registry,
    startup_connection_registry,
    shutdown_connection_registry,
)
from game_api.routes import auth_router, games_router, realtime_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """FastAPI lifespan events for startup and shutdown."""
    # Startup
    try:
        env = initialize_environment()
        logger.info("Environment initialized successfully")
        logger.info(f"Configuration:\n{env}")

        await startup_store(env)
        logger.info("JSON store initialized")

        await startup_connection_registry()

    except ValueError as e:
        logger.error(f"Environment initialization failed: {e}")
        raise
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise

    yield

    # Shutdown
    try:
        await shutdown_connection_registry()
        logger.info("Connection registry closed")

        await shutdown_store()

        reset_environment()
        logger.info("Environment reset")

    except Exception as e:
        logger.error(f"Shutdown error: {e}")


app = FastAPI(
    title="Game API",
    description="REST API for turn-based games with realtime updates over websockets",
    lifespan=lifespan,
    docs_url="/api-docs",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_env().cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router)
app.include_router(games_router)
app.include_router(realtime_router)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info(f"{request.method} {request.url.path}")
    return await call_next(request)


# === Error handling === #


@app.exception_handler(GameApiError)
async def game_api_error_handler(request: Request, exc: GameApiError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "Malformed JSON body"
    else:
        fields = [str(err["loc"][-1]) for err in errors if err.get("loc")]
        message = f"Invalid {', '.join(fields)}" if fields else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(status_code=404, content={"error": "Route not found"})
    return JSONResponse(
        status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


@app.get("/health", tags=[APITags.SYSTEM])
async def health_check(
    store: JsonStore = Depends(get_json_store),
    registry: ConnectionRegistry = Depends(get_connection_registry),
    env: Environment = Depends(get_env),
):
    """Health check endpoint that verifies storage and reports live sockets."""
    storage_ok = store.health_check()
    return {
        "status": "ok" if storage_ok else "degraded",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": env.app_env,
        "storage": "ready" if storage_ok else "unavailable",
        "connections": registry.connection_count(),
    }
