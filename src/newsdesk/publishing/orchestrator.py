# ABOUTME: Unified publication pipeline turning one submission into linked articles.
# ABOUTME: Validates, resolves context, writes base/web/print articles and queues AI work.

from dataclasses import dataclass
from typing import Any

import pydantic
import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.config import Settings, get_settings
from newsdesk.db.models import Article, NewspaperArticle, TenantWebArticle
from newsdesk.db.repository import (
    ArticleRepository,
    CategoryRepository,
    DomainRepository,
    ExternalIdCounterRepository,
    LanguageRepository,
    LocationRepository,
    NewspaperArticleRepository,
    TenantFlagsRepository,
    WebArticleRepository,
)
from newsdesk.db.session import RequestTransaction
from newsdesk.errors import ValidationError
from newsdesk.models import (
    AIDecision,
    AIMode,
    ArticleStatus,
    CreationStatus,
    LocationRef,
    Principal,
    PublicationResult,
    QueueDescriptor,
    Submission,
    TenantContext,
)
from newsdesk.publishing.ai_mode import AIModeDecider, parse_override
from newsdesk.publishing.categories import CategoryResolver
from newsdesk.publishing.domains import DomainResolver
from newsdesk.publishing.external_id import ExternalIdGenerator
from newsdesk.publishing.location import LocationResolver
from newsdesk.publishing.normalizer import (
    ContentNormalizer,
    is_http_url,
    normalize_status,
    parse_timestamp,
)
from newsdesk.publishing.tenancy import require_tenant_scope
from newsdesk.utils.text import word_count

log = structlog.get_logger()

SUBMISSION_SOURCE = "newspaper.post"


@dataclass
class PublishingRepositories:
    """Every repository the pipeline talks to, bound to one session."""

    articles: ArticleRepository
    newspaper_articles: NewspaperArticleRepository
    web_articles: WebArticleRepository
    languages: LanguageRepository
    flags: TenantFlagsRepository
    locations: LocationRepository
    domains: DomainRepository
    categories: CategoryRepository
    counters: ExternalIdCounterRepository
    transaction: RequestTransaction

    @classmethod
    def from_session(cls, session: AsyncSession) -> "PublishingRepositories":
        return cls(
            articles=ArticleRepository(session),
            newspaper_articles=NewspaperArticleRepository(session),
            web_articles=WebArticleRepository(session),
            languages=LanguageRepository(session),
            flags=TenantFlagsRepository(session),
            locations=LocationRepository(session),
            domains=DomainRepository(session),
            categories=CategoryRepository(session),
            counters=ExternalIdCounterRepository(session),
            transaction=RequestTransaction(session),
        )


@dataclass
class ValidatedSubmission:
    """A submission that passed validation, with derived print fields."""

    submission: Submission
    heading: str
    status: ArticleStatus | str
    content_text: str
    callback_url: str | None


class PublicationOrchestrator:
    """Creates the base, web and print articles for one submission.

    All writes share the request transaction, which is committed before the
    result is returned. Lookups, category auto-creation and the web article
    each run in a SAVEPOINT: a database error there rolls back only that
    step. A failed web article is logged and the submission is reported as
    ``PARTIALLY_CREATED``.
    """

    def __init__(self, repos: PublishingRepositories, settings: Settings | None = None) -> None:
        self.repos = repos
        self.settings = settings or get_settings()
        self.normalizer = ContentNormalizer(self.settings)
        savepoint = repos.transaction.savepoint
        self.locations = LocationResolver(repos.locations, savepoint)
        self.ai_modes = AIModeDecider(repos.flags, savepoint)
        self.domains = DomainResolver(repos.domains, savepoint)
        self.categories = CategoryResolver(repos.categories, repos.languages)
        self.external_ids = ExternalIdGenerator(
            repos.counters, repos.newspaper_articles, prefix=self.settings.external_id_prefix
        )

    def validate(self, payload: dict[str, Any] | Submission) -> ValidatedSubmission:
        """Fail-closed validation; runs before anything is written.

        Raises:
            ValidationError: First rule the submission breaks.
        """
        s = self.settings
        if isinstance(payload, Submission):
            submission = payload
        else:
            if not isinstance(payload, dict):
                raise ValidationError("Request body must be a JSON object")
            try:
                submission = Submission.model_validate(payload)
            except pydantic.ValidationError as e:
                raise ValidationError("Malformed submission", errors=e.errors()) from e

        if not submission.title:
            raise ValidationError("title is required")
        if len(submission.title) > s.title_max_chars:
            raise ValidationError(f"title max {s.title_max_chars} characters")
        if submission.sub_title and len(submission.sub_title) > s.subtitle_max_chars:
            raise ValidationError(f"subTitle max {s.subtitle_max_chars} characters")

        heading = submission.heading or submission.title
        if not heading:
            raise ValidationError("heading is required (or provide title)")

        content_text = submission.content_text
        if content_text and word_count(content_text) > s.content_max_words:
            raise ValidationError(f"content max {s.content_max_words} words")

        if len(submission.bullet_points) > s.bullet_points_max_items:
            raise ValidationError(f"bulletPoints max {s.bullet_points_max_items} items")
        for point in submission.bullet_points:
            if word_count(point) > s.bullet_point_max_words:
                raise ValidationError(
                    f"Each bulletPoint max {s.bullet_point_max_words} words", bulletPoint=point
                )

        callback_url = submission.callback_url if is_http_url(submission.callback_url) else None
        if submission.callback_url and callback_url is None:
            log.info("callback_url_dropped", callback_url=submission.callback_url)

        return ValidatedSubmission(
            submission=submission,
            heading=heading,
            status=normalize_status(submission.status),
            content_text=content_text,
            callback_url=callback_url,
        )

    async def _resolve_language_id(self, language_code: str | None) -> str | None:
        if not language_code:
            return None
        language = await self.repos.languages.get_by_code(language_code)
        if language is None:
            raise ValidationError("Invalid language code")
        return language.id

    async def _resolve_category_ids(self, submission: Submission) -> list[str]:
        """Explicit id wins; a name goes through fuzzy matching. Failures mean no category."""
        if submission.category_id:
            return [submission.category_id]
        if not submission.category:
            return []
        try:
            async with self.repos.transaction.savepoint():
                match = await self.categories.resolve(
                    submission.category,
                    language_code=submission.language_code,
                    similarity_threshold=self.settings.category_similarity_threshold,
                    auto_create=True,
                )
        except Exception as e:
            log.warning("category_resolution_degraded", category=submission.category, error=str(e))
            return []
        return [match.category_id] if match else []

    async def create(
        self,
        principal: Principal,
        payload: dict[str, Any] | Submission,
        force_ai_rewrite: str | bool | None = None,
        requested_tenant_id: str | None = None,
        request_host: str | None = None,
    ) -> PublicationResult:
        """Run the pipeline for one submission.

        Raises:
            ValidationError: Invalid submission, missing tenant scope or unknown language.
            AuthenticationError: No principal.
            AuthorizationError: Role not allowed, unlinked reporter, or forbidden override.
        """
        validated = self.validate(payload)
        submission = validated.submission

        tenant_id = require_tenant_scope(principal, requested_tenant_id)
        bound = log.bind(tenant_id=tenant_id, user_id=principal.user_id)

        location_ref = await self.locations.resolve(submission.location)
        decision = await self.ai_modes.decide(
            tenant_id, parse_override(force_ai_rewrite), principal.role
        )

        language_id = await self._resolve_language_id(submission.language_code)
        category_ids = await self._resolve_category_ids(submission)
        tenant, domain_degraded = await self.domains.resolve(
            tenant_id, submission.domain_id, request_host
        )

        media_urls = self.normalizer.collect_media_urls(submission)
        place_name = location_ref.display_name
        dateline = self.normalizer.dateline(submission, place_name)
        external_id = await self.external_ids.generate(tenant_id)

        queue = QueueDescriptor(web=True, short=True, newspaper=decision.mode == AIMode.FULL)
        should_publish = validated.status == ArticleStatus.PUBLISHED

        base = await self.repos.articles.save(
            Article(
                title=submission.title,
                content=validated.content_text or submission.title,
                type="reporter",
                status=ArticleStatus.PUBLISHED.value if should_publish else ArticleStatus.DRAFT.value,
                author_id=principal.user_id,
                tenant_id=tenant_id,
                language_id=language_id,
                images=media_urls,
                tags=submission.tags[: self.settings.tags_max_items],
                categories=list(await self.repos.categories.list_by_ids(category_ids)),
                content_json=self._descriptor(
                    validated,
                    external_id=external_id,
                    tenant=tenant,
                    location_ref=location_ref,
                    decision=decision,
                    queue=queue,
                    category_ids=category_ids,
                    media_urls=media_urls,
                    dateline=dateline,
                    domain_degraded=domain_degraded,
                ),
            )
        )
        bound.info(
            "publication_base_article_created",
            base_article_id=base.id,
            external_id=external_id,
            ai_mode=decision.mode.value,
        )

        web_article_id: str | None = None
        creation_status = CreationStatus.FULLY_CREATED
        if decision.mode == AIMode.LIMITED:
            try:
                async with self.repos.transaction.savepoint():
                    web_article_id = await self._create_web_article(
                        validated, tenant, principal, language_id, category_ids, media_urls
                    )
            except Exception:
                # Secondary artifact: the submission still succeeds without it
                bound.exception("publication_web_article_failed", base_article_id=base.id)
                web_article_id = None
                creation_status = CreationStatus.PARTIALLY_CREATED
            else:
                await self.repos.articles.merge_content_json(base, webArticleId=web_article_id)
                bound.info("publication_web_article_created", web_article_id=web_article_id)

        printed = await self.repos.newspaper_articles.save(
            NewspaperArticle(
                tenant_id=tenant_id,
                author_id=principal.user_id,
                language_id=language_id,
                base_article_id=base.id,
                external_article_id=external_id,
                title=submission.title,
                sub_title=submission.sub_title,
                heading=validated.heading,
                points=list(submission.bullet_points),
                dateline=dateline,
                content=validated.content_text or submission.title,
                place_name=place_name,
                status=ArticleStatus.PUBLISHED.value if should_publish else ArticleStatus.DRAFT.value,
            )
        )
        await self.repos.transaction.commit()
        bound.info(
            "publication_queued",
            base_article_id=base.id,
            newspaper_article_id=printed.id,
            creation_status=creation_status.value,
        )

        return PublicationResult(
            message=self._message(decision, category_ids),
            external_article_id=external_id,
            article_id=base.id,
            base_article_id=base.id,
            newspaper_article_id=printed.id,
            web_article_id=web_article_id,
            tenant_ai_rewrite_enabled=decision.tenant_ai_rewrite_enabled,
            ai_mode=decision.mode,
            queued=queue,
            status_url=f"/articles/{base.id}/ai-status",
            callback_url_accepted=validated.callback_url is not None,
            creation_status=creation_status,
        )

    async def _create_web_article(
        self,
        validated: ValidatedSubmission,
        tenant: TenantContext,
        principal: Principal,
        language_id: str | None,
        category_ids: list[str],
        media_urls: list[str],
    ) -> str:
        submission = validated.submission
        draft = self.normalizer.build_web_article(
            submission,
            domain_name=tenant.domain_name,
            category_ids=category_ids,
            media_urls=media_urls,
        )
        should_publish = validated.status == ArticleStatus.PUBLISHED
        published_at = None
        if should_publish:
            published_at = parse_timestamp(submission.published_at) or self.normalizer.now()

        web = await self.repos.web_articles.save(
            TenantWebArticle(
                tenant_id=tenant.tenant_id,
                domain_id=tenant.domain_id,
                author_id=principal.user_id,
                language_id=language_id,
                title=draft.title,
                slug=draft.slug,
                status=ArticleStatus.PUBLISHED.value if should_publish else ArticleStatus.DRAFT.value,
                category_id=category_ids[0] if category_ids else None,
                content_json=draft.model_dump(mode="json", by_alias=True),
                seo_title=draft.meta.get("seoTitle"),
                meta_description=draft.meta.get("metaDescription"),
                json_ld=draft.json_ld,
                tags=draft.tags,
                cover_image_url=media_urls[0] if media_urls else None,
                published_at=published_at,
            )
        )
        return web.id

    def _descriptor(
        self,
        validated: ValidatedSubmission,
        *,
        external_id: str,
        tenant: TenantContext,
        location_ref: LocationRef,
        decision: AIDecision,
        queue: QueueDescriptor,
        category_ids: list[str],
        media_urls: list[str],
        dateline: str,
        domain_degraded: bool,
    ) -> dict[str, Any]:
        """Descriptor stored on the base article for the AI worker.

        ``raw`` is the normalized payload the worker rewrites from; ``aiStatus``
        belongs to the worker once written.
        """
        submission = validated.submission
        location = location_ref.model_dump(mode="json", by_alias=True)
        degraded = list(location_ref.degraded)
        if domain_degraded:
            degraded.append("domain")
        return {
            "externalArticleId": external_id,
            "source": SUBMISSION_SOURCE,
            "raw": {
                "title": submission.title,
                "content": validated.content_text,
                "categoryIds": category_ids,
                "languageCode": submission.language_code or "",
                "domainId": tenant.domain_id,
                "images": media_urls,
                "coverImageUrl": media_urls[0] if media_urls else None,
                "locationRef": location,
                "publishedAt": submission.published_at,
                "dateline": dateline,
                "bulletPoints": list(submission.bullet_points),
            },
            "rawNewspaper": submission.model_dump(mode="json", by_alias=True, exclude_none=True),
            "location": submission.location.model_dump(mode="json", by_alias=True, exclude_none=True),
            "locationRef": location,
            "callbackUrl": validated.callback_url,
            "aiDecision": decision.model_dump(mode="json", by_alias=True),
            "aiQueue": queue.model_dump(mode="json"),
            "aiStatus": "PENDING",
            "aiSkipReason": None,
            "lookupDegraded": degraded,
        }

    @staticmethod
    def _message(decision: AIDecision, category_ids: list[str]) -> str:
        if decision.mode == AIMode.FULL:
            return "Newspaper article stored; FULL AI rewrite queued"
        if category_ids:
            return "Newspaper article stored; LIMITED AI (SEO + shortnews) queued"
        return "Newspaper article stored; LIMITED AI (SEO + shortnews) queued (category will be inferred)"
