"""
Web models package

Pydantic schemas
"""

from web.models.requests import (
    DeclareWinnerRequest,
    MemberCreateRequest,
    MemberUpdateRequest,
)
from web.models.responses import (
    AdvanceResponse,
    BroadcastResponse,
    ErrorResponse,
    HealthResponse,
    HistoryResponse,
    MemberResponse,
    MonthsResponse,
    MonthStatsResponse,
    ReconcileResponse,
    TokenAuditResponse,
    WhatsAppStatusResponse,
    WinnersResponse,
)

__all__ = [
    # Requests
    "DeclareWinnerRequest",
    "MemberCreateRequest",
    "MemberUpdateRequest",
    # Responses
    "AdvanceResponse",
    "BroadcastResponse",
    "ErrorResponse",
    "HealthResponse",
    "HistoryResponse",
    "MemberResponse",
    "MonthsResponse",
    "MonthStatsResponse",
    "ReconcileResponse",
    "TokenAuditResponse",
    "WhatsAppStatusResponse",
    "WinnersResponse",
]
