"""
Messaging routes

Bulk WhatsApp messages and backend status
"""

from fastapi import APIRouter, Depends, HTTPException, Path

from adapters.whatsapp import WhatsAppClient
from core.ledger import LedgerEngine, LedgerHistory
from core.messaging import Broadcaster
from core.types import MessageKind
from web.dependencies import get_broadcaster, get_engine, get_history
from web.models.responses import BroadcastResponse, WhatsAppStatusResponse
from web.services.messaging_service import MessagingService

router = APIRouter(prefix="/api", tags=["Messages"])


@router.post("/months/{month}/messages/{kind}", response_model=BroadcastResponse)
async def send_messages(
    month: str = Path(..., description="Month identifier"),
    kind: MessageKind = Path(..., description="reminders / tokens / draw / receipts"),
    engine: LedgerEngine = Depends(get_engine),
    history: LedgerHistory = Depends(get_history),
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> BroadcastResponse:
    """Send one message kind to the relevant members of the month"""
    service = MessagingService(engine, history, broadcaster)
    result = await service.send(month, kind)
    return BroadcastResponse(kind=kind.value, month=month, **result.to_dict())


@router.get("/whatsapp/status", response_model=WhatsAppStatusResponse)
async def whatsapp_status(
    broadcaster: Broadcaster = Depends(get_broadcaster),
) -> WhatsAppStatusResponse:
    """WhatsApp backend reachability and session state"""
    messenger = broadcaster.messenger
    if not isinstance(messenger, WhatsAppClient):
        raise HTTPException(status_code=503, detail="WhatsApp backend not configured")

    status = await messenger.check_status()
    return WhatsAppStatusResponse(**status.to_dict())
