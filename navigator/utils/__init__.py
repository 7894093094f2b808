"""Utility helpers for navigation."""

from .credentials import CredentialStore, GEMINI_SLOT, GOOGLE_MAPS_SLOT
from .request_log import LogEntry, LogType, RequestLog
from .text import strip_html

__all__ = [
    "CredentialStore",
    "GEMINI_SLOT",
    "GOOGLE_MAPS_SLOT",
    "LogEntry",
    "LogType",
    "RequestLog",
    "strip_html",
]
