# ABOUTME: Browser automation capability used for album harvesting
# ABOUTME: Exports the session protocol; backends are imported from their own modules

from .base import BrowserSession, BrowserSessionFactory, WaitPolicy

__all__ = [
    "BrowserSession",
    "BrowserSessionFactory",
    "WaitPolicy",
]
