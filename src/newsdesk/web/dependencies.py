# ABOUTME: FastAPI dependency injection for database sessions and services.
# ABOUTME: Provides reusable dependencies for route handlers.

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.db.repository import ArticleRepository, NewspaperArticleRepository
from newsdesk.db.session import RequestTransaction, get_db_session
from newsdesk.publishing.articles import NewspaperArticleService
from newsdesk.publishing.orchestrator import PublicationOrchestrator, PublishingRepositories

# Type aliases for common dependencies
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


async def get_publication_orchestrator(
    session: DbSession,
) -> AsyncGenerator[PublicationOrchestrator]:
    """Get the publication pipeline bound to the request session."""
    yield PublicationOrchestrator(PublishingRepositories.from_session(session))


Orchestrator = Annotated[PublicationOrchestrator, Depends(get_publication_orchestrator)]


async def get_newspaper_service(
    session: DbSession,
) -> AsyncGenerator[NewspaperArticleService]:
    """Get newspaper article service with session."""
    yield NewspaperArticleService(
        NewspaperArticleRepository(session),
        ArticleRepository(session),
        transaction=RequestTransaction(session),
    )


NewspaperSvc = Annotated[NewspaperArticleService, Depends(get_newspaper_service)]
