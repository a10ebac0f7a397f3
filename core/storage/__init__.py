"""
Storage module

SQLite-backed member store (one table per month).
"""

from core.storage.member_store import SQLiteMemberStore, encode_value

__all__ = [
    "SQLiteMemberStore",
    "encode_value",
]
