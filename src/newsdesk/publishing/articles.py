# ABOUTME: Tenant-scoped reads and edits of newspaper articles and AI pipeline status.
# ABOUTME: Backs the list/get/patch newspaper endpoints and the ai-status endpoint.

from collections.abc import Sequence
from datetime import date, timedelta
from typing import Any

import pydantic
import structlog

from newsdesk.config import Settings, get_settings
from newsdesk.db.models import Article, NewspaperArticle
from newsdesk.db.repository import ArticleRepository, NewspaperArticleRepository
from newsdesk.db.session import RequestTransaction
from newsdesk.errors import AuthorizationError, NotFoundError, ValidationError
from newsdesk.models import ArticleStatus, NewspaperArticlePatch, Principal, RoleName
from newsdesk.publishing.external_id import utc_day_bounds
from newsdesk.publishing.normalizer import normalize_status
from newsdesk.publishing.tenancy import resolve_tenant_scope
from newsdesk.utils.text import word_count

log = structlog.get_logger()

# Columns a PATCH may not set to null
REQUIRED_FIELDS = ("title", "heading", "dateline", "content", "status")


class NewspaperArticleService:
    """Reads and edits print articles within the caller's tenant scope."""

    def __init__(
        self,
        newspaper_articles: NewspaperArticleRepository,
        articles: ArticleRepository,
        transaction: RequestTransaction | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.newspaper_articles = newspaper_articles
        self.articles = articles
        self.transaction = transaction
        self.settings = settings or get_settings()

    async def list_articles(
        self,
        principal: Principal | None,
        requested_tenant_id: str | None = None,
        status: str | None = None,
        day: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, Sequence[NewspaperArticle]]:
        """List print articles, newest first.

        A ``day`` that is not ``YYYY-MM-DD`` is ignored rather than rejected.
        """
        tenant_id = resolve_tenant_scope(principal, requested_tenant_id)

        created_from = created_to = None
        if day:
            try:
                start, _ = utc_day_bounds(date.fromisoformat(day))
            except ValueError:
                log.debug("newspaper_list_bad_date", day=day)
            else:
                created_from, created_to = start, start + timedelta(days=1)

        return await self.newspaper_articles.list_filtered(
            tenant_id=tenant_id,
            status=status.upper() if status else None,
            created_from=created_from,
            created_to=created_to,
            limit=limit,
            offset=offset,
        )

    async def get_article(
        self, principal: Principal | None, article_id: str, requested_tenant_id: str | None = None
    ) -> NewspaperArticle:
        """Get one print article.

        Raises:
            NotFoundError: No such article.
            AuthorizationError: Article belongs to another tenant.
        """
        tenant_id = resolve_tenant_scope(principal, requested_tenant_id)
        article = await self.newspaper_articles.get_by_id(article_id)
        if article is None:
            raise NotFoundError("Not found")
        if tenant_id and article.tenant_id != tenant_id:
            raise AuthorizationError("Access denied")
        return article

    def validate_patch(self, changes: Any) -> dict[str, Any]:
        """Check a PATCH body against the submission limits.

        Returns:
            Column name to new value, for the keys the body supplied.

        Raises:
            ValidationError: Body is not an object, a field has the wrong type,
                a required field is null, or a limit is exceeded.
        """
        if not isinstance(changes, dict):
            raise ValidationError("Request body must be a JSON object")
        try:
            patch = NewspaperArticlePatch.model_validate(changes)
        except pydantic.ValidationError as e:
            raise ValidationError("Malformed update", errors=e.errors()) from e

        supplied = patch.model_dump(include=patch.model_fields_set)
        if supplied.get("points") is None:
            supplied.pop("points", None)
        for field in REQUIRED_FIELDS:
            if field in supplied and supplied[field] is None:
                raise ValidationError(f"{field} cannot be null")

        s = self.settings
        title = supplied.get("title")
        if title is not None:
            if not title.strip():
                raise ValidationError("title is required")
            if len(title) > s.title_max_chars:
                raise ValidationError(f"title max {s.title_max_chars} characters")
        sub_title = supplied.get("sub_title")
        if sub_title and len(sub_title) > s.subtitle_max_chars:
            raise ValidationError(f"subTitle max {s.subtitle_max_chars} characters")
        content = supplied.get("content")
        if content and word_count(content) > s.content_max_words:
            raise ValidationError(f"content max {s.content_max_words} words")
        points = supplied.get("points")
        if points is not None:
            if len(points) > s.bullet_points_max_items:
                raise ValidationError(f"points max {s.bullet_points_max_items} items")
            for point in points:
                if word_count(point) > s.bullet_point_max_words:
                    raise ValidationError(
                        f"Each point max {s.bullet_point_max_words} words", point=point
                    )

        if "status" in supplied:
            status = normalize_status(supplied["status"])
            if not isinstance(status, ArticleStatus):
                raise ValidationError(
                    "status must be one of DRAFT, PENDING, PUBLISHED", status=supplied["status"]
                )
            supplied["status"] = status.value
        return supplied

    async def update_article(
        self,
        principal: Principal | None,
        article_id: str,
        changes: Any,
        requested_tenant_id: str | None = None,
    ) -> NewspaperArticle:
        """Apply a partial update; only supplied fields change.

        The body is validated before the article is loaded, so a rejected
        update never touches the database.

        Raises:
            ValidationError: Invalid update body.
            NotFoundError: No such article.
            AuthorizationError: Article belongs to another tenant.
        """
        updates = self.validate_patch(changes)
        article = await self.get_article(principal, article_id, requested_tenant_id)

        for attr, value in updates.items():
            setattr(article, attr, value)

        saved = await self.newspaper_articles.save(article)
        if self.transaction is not None:
            await self.transaction.commit()
        log.info("newspaper_article_updated", id=article_id, fields=sorted(updates))
        return saved

    async def ai_status(self, principal: Principal | None, article_id: str) -> dict[str, Any]:
        """Pipeline status of a base article as recorded by the AI worker.

        Super admins see any tenant's article; everyone else only their own.
        """
        article: Article | None
        if principal is not None and principal.role == RoleName.SUPER_ADMIN.value:
            article = await self.articles.get_by_id(article_id)
        else:
            tenant_id = resolve_tenant_scope(principal)
            article = await self.articles.get_for_tenant(article_id, tenant_id)
        if article is None:
            raise NotFoundError("Not found")

        descriptor = article.content_json or {}
        queue = descriptor.get("aiQueue") or {}
        return {
            "articleId": article.id,
            "tenantId": article.tenant_id,
            "status": article.status,
            "ai": {
                "aiStatus": descriptor.get("aiStatus"),
                "aiMode": descriptor.get("aiMode")
                or (descriptor.get("aiDecision") or {}).get("mode"),
                "aiStartedAt": descriptor.get("aiStartedAt"),
                "aiFinishedAt": descriptor.get("aiFinishedAt"),
                "aiError": descriptor.get("aiError"),
                "aiSkipReason": descriptor.get("aiSkipReason"),
                "queue": {
                    "web": bool(queue.get("web")),
                    "short": bool(queue.get("short")),
                    "newspaper": bool(queue.get("newspaper")),
                },
                "outputs": {
                    "webArticleId": descriptor.get("webArticleId"),
                    "shortNewsId": descriptor.get("shortNewsId"),
                    "newspaperArticleId": descriptor.get("newspaperArticleId"),
                },
            },
            "externalArticleId": descriptor.get("externalArticleId"),
            "callbackUrl": descriptor.get("callbackUrl"),
            "createdAt": article.created_at.isoformat() if article.created_at else None,
            "updatedAt": article.updated_at.isoformat() if article.updated_at else None,
        }
