"""
WhatsApp adapter

HTTP client for the WhatsApp backend (IMessenger implementation).
"""

from adapters.whatsapp.client import BackendStatus, WhatsAppClient

__all__ = [
    "BackendStatus",
    "WhatsAppClient",
]
