"""
Grinder Telemetry Relay - Backend API

FastAPI application that provides:
- Gateway ingest (state snapshots, fault events)
- Dashboard access to live state with gateway liveness
- Reset handshake between dashboard and gateway
- Alarm listing and acknowledgment
- User authentication

Fault events are stored in Supabase (PostgreSQL) when configured,
otherwise in memory.
"""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import Callable, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from . import __version__
from .common.exceptions import RelayError
from .common.logging_setup import configure_service_loggers, get_service_logger
from .config import Settings, get_settings
from .dependencies.services import build_services
from .routers import alarms, auth, gateway, grinder
from .services.device_state import utc_now
from .services.event_store import EventStore

logger = get_service_logger("api")


# ============================================
# APPLICATION LIFESPAN
# ============================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application startup and shutdown events.

    Startup:
    - Log configuration summary
    - Verify event store connectivity (the relay starts even if it fails)
    """
    relay = app.state.relay
    settings = relay.settings
    logger.info("Starting Grinder Telemetry Relay...")
    logger.info(f"Environment: {settings.environment}")
    logger.info(f"Allowed Origins: {settings.origins}")
    logger.info(f"Event store: {relay.store.name}")

    if not settings.user_auth_configured:
        logger.warning("ADMIN_USER/ADMIN_PASS/JWT_SECRET not set - logins will fail")
    if not settings.gateway_token:
        logger.warning("GATEWAY_TOKEN not set - gateway requests will be rejected")

    if not relay.store.is_connected():
        logger.error("Event store unreachable - starting without database")

    yield

    logger.info("Shutting down relay...")


# ============================================
# ERROR HANDLERS
# ============================================

async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            extra={"error": exc.error},
        )
    return JSONResponse(status_code=exc.status_code, content=exc.to_response())


async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": "HTTP Error", "message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=422,
        content={
            "success": False,
            "error": "Validation Error",
            "message": "Invalid request body",
            "details": jsonable_errors(exc),
        },
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error on {request.method} {request.url.path}: {exc}",
        exc_info=exc,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": "Internal Server Error", "message": "Internal server error"},
    )


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Location and message of each validation error."""
    return [
        {"loc": [str(part) for part in error.get("loc", ())], "msg": error.get("msg", "")}
        for error in exc.errors()
    ]


# ============================================
# CREATE APPLICATION
# ============================================

def create_app(
    settings: Optional[Settings] = None,
    store: Optional[EventStore] = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Relay settings (default: from environment)
        store: Event store override (default: Supabase or in-memory)
        clock: Time source for snapshots, resets and alarms
    """
    settings = settings or get_settings()
    configure_service_loggers(settings.relay_log_level, settings.log_json)

    app = FastAPI(
        title="Grinder Telemetry Relay API",
        description="""
        Relay between the grinder gateway and dashboard users.

        ## Features
        - **Gateway**: state snapshots, fault events, reset polling
        - **Grinder**: live state with gateway liveness, reset requests
        - **Alarms**: list, count, acknowledge and delete fault events
        - **Auth**: admin login with 8 hour bearer tokens
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.relay = build_services(settings, store=store, clock=clock)

    # ============================================
    # CORS MIDDLEWARE
    # ============================================

    origins = settings.origins
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=origins != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(HTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # ============================================
    # INCLUDE ROUTERS
    # ============================================

    app.include_router(auth.router, prefix="/api", tags=["Authentication"])
    app.include_router(gateway.router, prefix="/api", tags=["Gateway"])
    app.include_router(grinder.router, prefix="/api", tags=["Grinder"])
    app.include_router(alarms.router, prefix="/api/alarms", tags=["Alarms"])

    # ============================================
    # HEALTH ENDPOINTS
    # ============================================

    @app.get("/", tags=["Health"])
    async def root():
        """Basic API information."""
        return {
            "name": "Grinder Telemetry Relay API",
            "version": __version__,
            "status": "running",
            "docs": "/docs",
        }

    @app.get("/health", tags=["Health"])
    async def health_check(request: Request):
        """
        Detailed health check.

        Checks:
        - Event store connectivity
        - Gateway liveness (age of last state push)
        """
        relay = request.app.state.relay
        store_ok = relay.store.is_connected()
        return {
            "status": "healthy" if store_ok else "degraded",
            "database": "connected" if store_ok else "unreachable",
            "event_store": relay.store.name,
            "gateway_connected": relay.device_state.is_connected(),
            "gateway_last_seen_seconds": relay.device_state.last_seen_age(),
            "version": __version__,
        }

    return app
