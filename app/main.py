"""Car Service API: application factory, health probes and router wiring."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.core.config import settings
from app.core.exceptions import register_exception_handlers
from app.db.base import async_session_factory, engine
from app.middleware.request_logging import RequestLoggingMiddleware
from app.schemas.common import HealthResponse
from app.services import background

from app.routers.v1.analytics import router as analytics_v1_router
from app.routers.v1.customers import router as customers_v1_router
from app.routers.v1.makes import router as makes_v1_router
from app.routers.v1.models import router as models_v1_router
from app.routers.v1.orders import router as orders_v1_router
from app.routers.v1.share import router as share_v1_router
from app.routers.v1.suppliers import router as suppliers_v1_router
from app.routers.v1.vehicles import router as vehicles_v1_router

logger = logging.getLogger(__name__)

_V1_ROUTERS = (
    vehicles_v1_router,
    makes_v1_router,
    models_v1_router,
    customers_v1_router,
    suppliers_v1_router,
    orders_v1_router,
    analytics_v1_router,
    share_v1_router,
)

SCHEMA_NAME = "cars"


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    if settings.is_development:
        level = logging.DEBUG
    else:
        level = logging.getLevelName(settings.log_level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    for name in ("sqlalchemy.engine", "httpcore", "httpx", "botocore", "boto3"):
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting %s (env=%s)", settings.app_name, settings.app_env)
    yield
    # let in-flight notifications finish before the pool goes away
    await background.drain()
    await engine.dispose()
    logger.info("Shutdown complete")


async def check_database() -> tuple[bool, bool]:
    """Return (database reachable, ``cars`` schema present)."""
    try:
        async with async_session_factory() as session:
            await session.execute(text("SELECT 1"))
            result = await session.execute(
                text("SELECT 1 FROM information_schema.schemata WHERE schema_name = :name"),
                {"name": SCHEMA_NAME},
            )
            return True, result.first() is not None
    except Exception as exc:
        logger.error("Database health check failed: %s", exc)
        return False, False


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version="1.0.0",
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    origins = settings.cors_origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Request logging ---
    app.add_middleware(RequestLoggingMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/car-service/api/v1/*) ---
    for router in _V1_ROUTERS:
        app.include_router(router, prefix=settings.api_prefix)

    # --- Health checks ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        db_ok, schema_ok = await check_database()
        body = HealthResponse(
            status="ok" if db_ok and schema_ok else "unhealthy",
            app=settings.app_name,
            env=settings.app_env,
            database="connected" if db_ok else "unreachable",
            schema_name=SCHEMA_NAME if schema_ok else None,
        )
        if body.status != "ok":
            return JSONResponse(status_code=503, content=body.model_dump())
        return body

    @app.get("/health/live", tags=["Health"])
    async def live():
        return {"status": "alive"}

    @app.get("/health/ready", tags=["Health"])
    async def ready():
        db_ok, schema_ok = await check_database()
        if not (db_ok and schema_ok):
            return JSONResponse(status_code=503, content={"status": "not ready"})
        return {"status": "ready"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.app_port)
