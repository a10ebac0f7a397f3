"""
Dependency injection

Services are built once in the app lifespan and handed to routes through
FastAPI's Depends.
"""

from dataclasses import dataclass

from fastapi import HTTPException

from core.config.loader import Settings, get_settings
from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import Broadcaster


def get_app_settings() -> Settings:
    return get_settings()


@dataclass
class SchemeServices:
    """Objects shared by every request"""

    engine: LedgerEngine
    history: LedgerHistory
    broadcaster: Broadcaster | None = None


# Set by the lifespan (or by tests)
_services: SchemeServices | None = None


def set_services(services: SchemeServices | None) -> None:
    """Install (or clear, with None) the shared services"""
    global _services
    _services = services


def get_services() -> SchemeServices:
    if _services is None:
        raise HTTPException(status_code=503, detail="Ledger engine not initialized")
    return _services


def get_engine() -> LedgerEngine:
    return get_services().engine


def get_history() -> LedgerHistory:
    return get_services().history


def get_broadcaster() -> Broadcaster:
    broadcaster = get_services().broadcaster
    if broadcaster is None:
        raise HTTPException(status_code=503, detail="Messaging not configured")
    return broadcaster
