"""
Service Dependencies

One RelayServices container is built per application and stored on
`app.state.relay`. Routes receive individual components through the
getters below.

Usage:
    from grinder_relay.dependencies.services import get_fault_log

    @router.get("/")
    async def my_route(fault_log: FaultLog = Depends(get_fault_log)):
        return fault_log.list_events()
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from fastapi import Request

from ..common.logging_setup import get_service_logger
from ..config import Settings
from ..services.device_state import DeviceStateCache, utc_now
from ..services.event_store import EventStore, InMemoryEventStore, SupabaseEventStore
from ..services.fault_log import FaultLog
from ..services.reset_coordinator import ResetCoordinator
from ..services.supabase import SupabaseService
from ..services.tokens import TokenSigner

logger = get_service_logger("services")


@dataclass
class RelayServices:
    """Process-wide components shared by every request."""
    settings: Settings
    store: EventStore
    device_state: DeviceStateCache
    fault_log: FaultLog
    reset_coordinator: ResetCoordinator
    tokens: TokenSigner


def create_event_store(settings: Settings) -> EventStore:
    """Supabase when configured, otherwise the in-memory store."""
    if settings.supabase_configured:
        return SupabaseEventStore(SupabaseService(settings))

    logger.warning(
        "Supabase not configured - fault events are kept in memory only"
    )
    return InMemoryEventStore()


def build_services(
    settings: Settings,
    store: Optional[EventStore] = None,
    clock: Callable[[], datetime] = utc_now,
) -> RelayServices:
    """
    Wire the relay components together.

    Args:
        settings: Relay settings
        store: Event store override (tests); default from settings
        clock: Time source shared by every component
    """
    store = store if store is not None else create_event_store(settings)
    fault_log = FaultLog(store, clock=clock)

    def token_clock() -> float:
        return clock().timestamp()

    return RelayServices(
        settings=settings,
        store=store,
        device_state=DeviceStateCache(
            liveness_window_seconds=settings.liveness_window_seconds,
            clock=clock,
        ),
        fault_log=fault_log,
        reset_coordinator=ResetCoordinator(fault_log, clock=clock),
        tokens=TokenSigner(
            settings.jwt_secret,
            ttl_hours=settings.token_ttl_hours,
            clock=token_clock,
        ),
    )


# ============================================
# FASTAPI DEPENDENCIES
# ============================================

def get_services(request: Request) -> RelayServices:
    return request.app.state.relay


def get_settings_dep(request: Request) -> Settings:
    return get_services(request).settings


def get_device_state(request: Request) -> DeviceStateCache:
    return get_services(request).device_state


def get_fault_log(request: Request) -> FaultLog:
    return get_services(request).fault_log


def get_reset_coordinator(request: Request) -> ResetCoordinator:
    return get_services(request).reset_coordinator


def get_token_signer(request: Request) -> TokenSigner:
    return get_services(request).tokens
