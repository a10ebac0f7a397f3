"""
Web services package

Request-level orchestration on top of the ledger engine
"""

from web.services.messaging_service import MessagingService
from web.services.scheme_service import SchemeService

__all__ = [
    "MessagingService",
    "SchemeService",
]
