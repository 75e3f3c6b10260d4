# ABOUTME: Repository classes for database access patterns.
# ABOUTME: Wraps tenant, location, category and article queries behind small async APIs.

from collections.abc import Sequence
from datetime import date, datetime

from sqlalchemy import func, or_, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from newsdesk.db.models import (
    Article,
    Category,
    CategoryTranslation,
    District,
    Domain,
    ExternalIdCounter,
    Language,
    Mandal,
    NewspaperArticle,
    State,
    TenantFeatureFlags,
    TenantWebArticle,
    User,
    Village,
)


class UserRepository:
    """Repository for authenticated users."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_id(self, user_id: str) -> User | None:
        """Get a user with role and reporter profile loaded."""
        result = await self.session.execute(
            select(User)
            .options(joinedload(User.role), joinedload(User.reporter))
            .where(User.id == user_id)
        )
        return result.unique().scalar_one_or_none()


class TenantFlagsRepository:
    """Repository for per-tenant feature flags."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_flags(self, tenant_id: str) -> TenantFeatureFlags | None:
        """Get feature flags for a tenant, None when never configured."""
        return await self.session.get(TenantFeatureFlags, tenant_id)


class DomainRepository:
    """Repository for tenant domains."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_for_tenant(self, domain_id: str, tenant_id: str) -> Domain | None:
        """Get a domain by id, only if it belongs to the tenant."""
        result = await self.session.execute(
            select(Domain).where(Domain.id == domain_id, Domain.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_by_name(self, name: str, tenant_id: str) -> Domain | None:
        """Get a tenant domain by hostname."""
        result = await self.session.execute(
            select(Domain).where(Domain.domain == name, Domain.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def get_primary_active(self, tenant_id: str) -> Domain | None:
        """Get the tenant's active domain, primary first, then newest."""
        result = await self.session.execute(
            select(Domain)
            .where(Domain.tenant_id == tenant_id, Domain.status == "ACTIVE")
            .order_by(Domain.is_primary.desc(), Domain.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest(self, tenant_id: str) -> Domain | None:
        """Get the tenant's newest domain regardless of status."""
        result = await self.session.execute(
            select(Domain)
            .where(Domain.tenant_id == tenant_id)
            .order_by(Domain.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


class LanguageRepository:
    """Repository for content languages."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_by_code(self, code: str) -> Language | None:
        """Get a language by ISO code."""
        result = await self.session.execute(select(Language).where(Language.code == code))
        return result.scalar_one_or_none()

    async def list_active_codes(self) -> Sequence[str]:
        """List codes of all non-deleted languages."""
        result = await self.session.execute(
            select(Language.code).where(Language.is_deleted.is_(False)).order_by(Language.code)
        )
        return result.scalars().all()


class LocationRepository:
    """Repository for the state > district > mandal > village hierarchy."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_village(self, village_id: str) -> Village | None:
        """Get a village with its full ancestor chain loaded."""
        result = await self.session.execute(
            select(Village)
            .options(
                joinedload(Village.mandal).joinedload(Mandal.district).joinedload(District.state)
            )
            .where(Village.id == village_id)
        )
        return result.unique().scalar_one_or_none()

    async def get_mandal(self, mandal_id: str) -> Mandal | None:
        """Get a mandal by ID."""
        return await self.session.get(Mandal, mandal_id)

    async def get_district(self, district_id: str) -> District | None:
        """Get a district by ID."""
        return await self.session.get(District, district_id)

    async def get_state(self, state_id: str) -> State | None:
        """Get a state by ID."""
        return await self.session.get(State, state_id)


class CategoryRepository:
    """Repository for categories and their translations."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_active(self, limit: int = 2000) -> Sequence[Category]:
        """List non-deleted categories."""
        result = await self.session.execute(
            select(Category).where(Category.is_deleted.is_(False)).limit(limit)
        )
        return result.scalars().all()

    async def list_translations(
        self, language: str, limit: int = 4000
    ) -> Sequence[CategoryTranslation]:
        """List category translations for one language."""
        result = await self.session.execute(
            select(CategoryTranslation).where(CategoryTranslation.language == language).limit(limit)
        )
        return result.scalars().all()

    async def list_by_ids(self, category_ids: list[str]) -> Sequence[Category]:
        """Get categories by ID list."""
        if not category_ids:
            return []
        result = await self.session.execute(select(Category).where(Category.id.in_(category_ids)))
        return result.scalars().all()

    async def list_slugs_like(self, base_slug: str) -> set[str]:
        """Slugs equal to ``base_slug`` or suffixed from it, deleted categories included.

        Soft-deleted rows still hold their slug in the unique index.
        """
        result = await self.session.execute(
            select(Category.slug).where(
                or_(Category.slug == base_slug, Category.slug.like(f"{base_slug}-%"))
            )
        )
        return set(result.scalars().all())

    async def create(self, name: str, slug: str) -> Category:
        """Create a category."""
        category = Category(name=name, slug=slug, is_deleted=False)
        self.session.add(category)
        await self.session.flush()
        return category

    async def add_translations(self, category_id: str, name: str, languages: list[str]) -> None:
        """Insert placeholder translations, skipping languages that already have one."""
        if not languages:
            return
        result = await self.session.execute(
            select(CategoryTranslation.language).where(
                CategoryTranslation.category_id == category_id
            )
        )
        existing = set(result.scalars().all())
        missing = [code for code in dict.fromkeys(languages) if code not in existing]
        self.session.add_all(
            CategoryTranslation(category_id=category_id, language=code, name=name)
            for code in missing
        )
        await self.session.flush()


class ArticleRepository:
    """Repository for base articles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, article: Article) -> Article:
        """Save an article (insert or update)."""
        self.session.add(article)
        await self.session.flush()
        return article

    async def get_by_id(self, article_id: str) -> Article | None:
        """Get article by ID."""
        return await self.session.get(Article, article_id)

    async def get_for_tenant(self, article_id: str, tenant_id: str) -> Article | None:
        """Get an article by ID, only if it belongs to the tenant."""
        result = await self.session.execute(
            select(Article).where(Article.id == article_id, Article.tenant_id == tenant_id)
        )
        return result.scalar_one_or_none()

    async def merge_content_json(self, article: Article, **fields) -> Article:
        """Add keys to the article descriptor.

        JSONB columns are not mutation-tracked, so the dict is replaced.
        """
        article.content_json = {**(article.content_json or {}), **fields}
        return await self.save(article)


class NewspaperArticleRepository:
    """Repository for print-form articles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, article: NewspaperArticle) -> NewspaperArticle:
        """Save a newspaper article (insert or update)."""
        self.session.add(article)
        await self.session.flush()
        return article

    async def get_by_id(self, article_id: str) -> NewspaperArticle | None:
        """Get newspaper article by ID."""
        return await self.session.get(NewspaperArticle, article_id)

    async def count_created_between(self, tenant_id: str, start: datetime, end: datetime) -> int:
        """Count a tenant's newspaper articles created within [start, end]."""
        result = await self.session.execute(
            select(func.count(NewspaperArticle.id)).where(
                NewspaperArticle.tenant_id == tenant_id,
                NewspaperArticle.created_at >= start,
                NewspaperArticle.created_at <= end,
            )
        )
        return result.scalar_one()

    async def list_filtered(
        self,
        tenant_id: str | None = None,
        status: str | None = None,
        created_from: datetime | None = None,
        created_to: datetime | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[int, Sequence[NewspaperArticle]]:
        """List newspaper articles newest first.

        Returns:
            Tuple of (total matching, page of items)
        """
        conditions = []
        if tenant_id:
            conditions.append(NewspaperArticle.tenant_id == tenant_id)
        if status:
            conditions.append(NewspaperArticle.status == status)
        if created_from is not None:
            conditions.append(NewspaperArticle.created_at >= created_from)
        if created_to is not None:
            conditions.append(NewspaperArticle.created_at < created_to)

        count_result = await self.session.execute(
            select(func.count(NewspaperArticle.id)).where(*conditions)
        )
        total = count_result.scalar_one()

        result = await self.session.execute(
            select(NewspaperArticle)
            .where(*conditions)
            .order_by(NewspaperArticle.created_at.desc())
            .limit(limit)
            .offset(offset)
        )
        return total, result.scalars().all()


class WebArticleRepository:
    """Repository for tenant web articles."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def save(self, article: TenantWebArticle) -> TenantWebArticle:
        """Save a web article (insert or update)."""
        self.session.add(article)
        await self.session.flush()
        return article


class ExternalIdCounterRepository:
    """Atomic per-tenant, per-day sequence."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def next_value(self, tenant_id: str, day: date) -> int:
        """Increment and return the counter for (tenant, day), starting at 1."""
        stmt = (
            insert(ExternalIdCounter)
            .values(tenant_id=tenant_id, day=day, value=1)
            .on_conflict_do_update(
                index_elements=[ExternalIdCounter.tenant_id, ExternalIdCounter.day],
                set_={"value": ExternalIdCounter.value + 1},
            )
            .returning(ExternalIdCounter.value)
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()
