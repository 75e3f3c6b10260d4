# ABOUTME: Newspaper article routes: unified submission, list, detail, edit and AI status.
# ABOUTME: Submissions answer 202 Accepted because AI rewriting continues asynchronously.

from datetime import datetime
from typing import Any

import structlog
from fastapi import APIRouter, Body, Query, Request
from pydantic import ConfigDict

from newsdesk.errors import PublicationError
from newsdesk.models import CamelModel, PublicationResult
from newsdesk.web.dependencies import NewspaperSvc, Orchestrator
from newsdesk.web.middleware.principal import CurrentPrincipal

router = APIRouter(tags=["newspaper"])
log = structlog.get_logger()


class NewspaperArticleOut(CamelModel):
    """Print article as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    tenant_id: str
    author_id: str
    language_id: str | None = None
    base_article_id: str | None = None
    external_article_id: str | None = None
    title: str
    sub_title: str | None = None
    heading: str
    points: list[str] = []
    dateline: str
    content: str
    place_name: str | None = None
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class NewspaperArticleList(CamelModel):
    total: int
    items: list[NewspaperArticleOut]


@router.post(
    "/articles/newspaper",
    status_code=202,
    response_model=PublicationResult,
)
async def create_newspaper_article(
    request: Request,
    orchestrator: Orchestrator,
    principal: CurrentPrincipal,
    payload: Any = Body(None),
    force_ai_rewrite_enabled: str | None = Query(None, alias="forceAiRewriteEnabled"),
    tenant_id: str | None = Query(None, alias="tenantId"),
):
    """Submit one payload to become print, web and short-news articles."""
    try:
        return await orchestrator.create(
            principal,
            payload if payload is not None else {},
            force_ai_rewrite=force_ai_rewrite_enabled,
            requested_tenant_id=tenant_id,
            request_host=request.url.hostname,
        )
    except PublicationError:
        raise
    except Exception as e:
        log.exception("create_newspaper_article_failed")
        raise PublicationError("Failed to create newspaper article") from e


@router.get("/articles/newspaper", response_model=NewspaperArticleList)
async def list_newspaper_articles(
    service: NewspaperSvc,
    principal: CurrentPrincipal,
    tenant_id: str | None = Query(None, alias="tenantId"),
    status: str | None = Query(None),
    date: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
):
    """List print articles in the caller's tenant scope."""
    total, items = await service.list_articles(
        principal, tenant_id, status=status, day=date, limit=limit, offset=offset
    )
    return NewspaperArticleList(
        total=total, items=[NewspaperArticleOut.model_validate(i) for i in items]
    )


@router.get("/articles/newspaper/{article_id}", response_model=NewspaperArticleOut)
async def get_newspaper_article(
    article_id: str,
    service: NewspaperSvc,
    principal: CurrentPrincipal,
    tenant_id: str | None = Query(None, alias="tenantId"),
):
    """Get one print article."""
    article = await service.get_article(principal, article_id, tenant_id)
    return NewspaperArticleOut.model_validate(article)


@router.patch("/articles/newspaper/{article_id}", response_model=NewspaperArticleOut)
async def update_newspaper_article(
    article_id: str,
    service: NewspaperSvc,
    principal: CurrentPrincipal,
    changes: Any = Body(None),
    tenant_id: str | None = Query(None, alias="tenantId"),
):
    """Edit a print article's text fields; the body is checked like a submission."""
    article = await service.update_article(principal, article_id, changes, tenant_id)
    return NewspaperArticleOut.model_validate(article)


@router.get("/articles/{article_id}/ai-status")
async def article_ai_status(article_id: str, service: NewspaperSvc, principal: CurrentPrincipal):
    """AI pipeline status for a base article."""
    return await service.ai_status(principal, article_id)
