# ABOUTME: Database module initialization.
# ABOUTME: Exports core database components for persistence layer.

from newsdesk.db.models import (
    Article,
    Base,
    Category,
    Domain,
    NewspaperArticle,
    Reporter,
    TenantFeatureFlags,
    TenantWebArticle,
    User,
)
from newsdesk.db.session import get_session, init_db

__all__ = [
    "Article",
    "Base",
    "Category",
    "Domain",
    "NewspaperArticle",
    "Reporter",
    "TenantFeatureFlags",
    "TenantWebArticle",
    "User",
    "get_session",
    "init_db",
]
