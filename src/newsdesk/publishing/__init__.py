# ABOUTME: Publishing pipeline module initialization.
# ABOUTME: Exports the orchestrator, resolvers and article service.

from newsdesk.publishing.ai_mode import AIModeDecider, parse_override
from newsdesk.publishing.articles import NewspaperArticleService
from newsdesk.publishing.categories import CategoryResolver, dice_similarity
from newsdesk.publishing.domains import DomainResolver
from newsdesk.publishing.external_id import ExternalIdGenerator, format_external_id
from newsdesk.publishing.location import LocationResolver
from newsdesk.publishing.normalizer import ContentNormalizer
from newsdesk.publishing.orchestrator import PublicationOrchestrator, PublishingRepositories
from newsdesk.publishing.tenancy import require_tenant_scope, resolve_tenant_scope

__all__ = [
    "AIModeDecider",
    "CategoryResolver",
    "ContentNormalizer",
    "DomainResolver",
    "ExternalIdGenerator",
    "LocationResolver",
    "NewspaperArticleService",
    "PublicationOrchestrator",
    "PublishingRepositories",
    "dice_similarity",
    "format_external_id",
    "parse_override",
    "require_tenant_scope",
    "resolve_tenant_scope",
]
