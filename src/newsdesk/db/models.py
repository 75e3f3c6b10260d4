# ABOUTME: SQLAlchemy ORM models for the multi-tenant publishing database.
# ABOUTME: Defines tenants, reporters, location hierarchy, categories and the three article forms.

from datetime import UTC, date, datetime
from uuid import uuid4

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    JSON,
    Integer,
    String,
    Table,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


# JSONB on PostgreSQL, plain JSON elsewhere
JSONDocument = JSON().with_variant(JSONB(), "postgresql")


def _uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class Role(Base):
    """A named permission role (SUPER_ADMIN, TENANT_ADMIN, REPORTER, ...)."""

    __tablename__ = "roles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)

    def __repr__(self) -> str:
        return f"<Role {self.name}>"


class User(Base):
    """An authenticated account. Reporters link a user to a tenant."""

    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    display_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    role_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("roles.id", ondelete="SET NULL"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    role: Mapped[Role | None] = relationship("Role", lazy="joined")
    reporter: Mapped["Reporter | None"] = relationship(
        "Reporter", back_populates="user", uselist=False, lazy="joined"
    )

    def __repr__(self) -> str:
        return f"<User {self.id[:8]}>"


class Tenant(Base):
    """An isolated publisher account."""

    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    def __repr__(self) -> str:
        return f"<Tenant {self.slug}>"


class TenantFeatureFlags(Base):
    """Per-tenant feature switches."""

    __tablename__ = "tenant_feature_flags"

    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True
    )
    ai_article_rewrite_enabled: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True
    )


class Reporter(Base):
    """A reporter profile binding a user to exactly one tenant."""

    __tablename__ = "reporters"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True
    )
    tenant_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="SET NULL"), nullable=True
    )

    user: Mapped[User] = relationship("User", back_populates="reporter")


class Domain(Base):
    """A public hostname bound to a tenant."""

    __tablename__ = "domains"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    domain: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    is_primary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (Index("ix_domains_tenant_id", "tenant_id"),)

    def __repr__(self) -> str:
        return f"<Domain {self.domain} ({self.status})>"


class Language(Base):
    """A content language identified by its ISO code."""

    __tablename__ = "languages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    code: Mapped[str] = mapped_column(String(10), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class State(Base):
    """Top level of the location hierarchy."""

    __tablename__ = "states"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)


class District(Base):
    """A district within a state."""

    __tablename__ = "districts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    state_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("states.id", ondelete="CASCADE"), nullable=False
    )

    state: Mapped[State] = relationship("State")


class Mandal(Base):
    """A mandal (sub-district) within a district."""

    __tablename__ = "mandals"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    district_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("districts.id", ondelete="CASCADE"), nullable=False
    )

    district: Mapped[District] = relationship("District")


class Village(Base):
    """The most specific location level."""

    __tablename__ = "villages"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    mandal_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("mandals.id", ondelete="CASCADE"), nullable=False
    )

    mandal: Mapped[Mandal] = relationship("Mandal")


article_categories = Table(
    "article_categories",
    Base.metadata,
    Column("article_id", String(36), ForeignKey("articles.id", ondelete="CASCADE"), primary_key=True),
    Column(
        "category_id", String(36), ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True
    ),
)


class Category(Base):
    """A news category shared across tenants."""

    __tablename__ = "categories"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), nullable=False, unique=True)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    def __repr__(self) -> str:
        return f"<Category {self.slug}>"


class CategoryTranslation(Base):
    """Localized category name."""

    __tablename__ = "category_translations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    category_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="CASCADE"), nullable=False
    )
    language: Mapped[str] = mapped_column(String(10), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)

    __table_args__ = (
        UniqueConstraint("category_id", "language", name="uq_category_translation"),
    )


class Article(Base):
    """The canonical base article every submission produces.

    ``content_json`` is the descriptor the asynchronous AI worker reads: the
    normalized submission, the AI decision, the queue descriptor and the
    worker-owned ``aiStatus``.
    """

    __tablename__ = "articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    language_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("languages.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(30), nullable=False, default="reporter")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    images: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    tags: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    content_json: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    categories: Mapped[list[Category]] = relationship("Category", secondary=article_categories)

    __table_args__ = (Index("ix_articles_tenant_id", "tenant_id"),)

    def __repr__(self) -> str:
        return f"<Article {self.id[:8]}: {self.title[:50]}>"


class NewspaperArticle(Base):
    """The print layout form of a submission, 1:1 with its base article."""

    __tablename__ = "newspaper_articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    language_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("languages.id", ondelete="SET NULL"), nullable=True
    )
    base_article_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("articles.id", ondelete="SET NULL"), nullable=True
    )
    external_article_id: Mapped[str | None] = mapped_column(String(20), nullable=True)
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    sub_title: Mapped[str | None] = mapped_column(String(500), nullable=True)
    heading: Mapped[str] = mapped_column(String(500), nullable=False)
    points: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    dateline: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    place_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    base_article: Mapped[Article | None] = relationship("Article")

    __table_args__ = (
        Index("ix_newspaper_articles_tenant_id", "tenant_id"),
        Index("ix_newspaper_articles_created_at", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<NewspaperArticle {self.external_article_id or self.id[:8]}: {self.title[:40]}>"


class TenantWebArticle(Base):
    """The website CMS form of a submission."""

    __tablename__ = "tenant_web_articles"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), nullable=False
    )
    domain_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("domains.id", ondelete="SET NULL"), nullable=True
    )
    author_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="RESTRICT"), nullable=False
    )
    language_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("languages.id", ondelete="SET NULL"), nullable=True
    )
    category_id: Mapped[str | None] = mapped_column(
        String(36), ForeignKey("categories.id", ondelete="SET NULL"), nullable=True
    )
    title: Mapped[str] = mapped_column(String(500), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="DRAFT")
    content_json: Mapped[dict] = mapped_column(JSONDocument, nullable=False, default=dict)
    seo_title: Mapped[str | None] = mapped_column(String(200), nullable=True)
    meta_description: Mapped[str | None] = mapped_column(String(300), nullable=True)
    json_ld: Mapped[dict | None] = mapped_column(JSONDocument, nullable=True)
    tags: Mapped[list[str]] = mapped_column(JSONDocument, nullable=False, default=list)
    cover_image_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    published_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now
    )

    __table_args__ = (Index("ix_tenant_web_articles_tenant_slug", "tenant_id", "slug"),)

    def __repr__(self) -> str:
        return f"<TenantWebArticle {self.slug} ({self.status})>"


class ExternalIdCounter(Base):
    """Per-tenant, per-UTC-day sequence backing external article ids."""

    __tablename__ = "external_id_counters"

    tenant_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("tenants.id", ondelete="CASCADE"), primary_key=True
    )
    day: Mapped[date] = mapped_column(Date, primary_key=True)
    value: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
