# ABOUTME: Main package for the newsdesk multi-tenant publishing backend.
# ABOUTME: Exports settings and the core submission and result models.

from newsdesk.config import get_settings
from newsdesk.models import AIMode, LocationRef, PublicationResult, Submission

__all__ = [
    "get_settings",
    "AIMode",
    "LocationRef",
    "PublicationResult",
    "Submission",
]
