# ABOUTME: Session-backed tests of the request transaction on a SQLite database.
# ABOUTME: Checks SAVEPOINT isolation of best-effort steps and what a request leaves committed.

from collections.abc import AsyncGenerator
from dataclasses import replace
from unittest.mock import AsyncMock

import httpx
import pytest
from sqlalchemy import event, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from newsdesk.config import Settings
from newsdesk.db.models import (
    Article,
    Base,
    Category,
    CategoryTranslation,
    Language,
    NewspaperArticle,
    Tenant,
    TenantFeatureFlags,
    TenantWebArticle,
    User,
)
from newsdesk.db.repository import (
    ArticleRepository,
    CategoryRepository,
    LocationRepository,
    NewspaperArticleRepository,
    WebArticleRepository,
)
from newsdesk.db.session import RequestTransaction
from newsdesk.models import CreationStatus, Principal
from newsdesk.publishing.articles import NewspaperArticleService
from newsdesk.publishing.orchestrator import PublicationOrchestrator, PublishingRepositories

TENANT_ID = "tenant-1"


@pytest.fixture
async def engine(tmp_path) -> AsyncGenerator:
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'newsdesk.db'}")

    # pysqlite's own transaction handling skips BEGIN, which breaks SAVEPOINT
    @event.listens_for(engine.sync_engine, "connect")
    def _connect(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def session_factory(engine, reporter: Principal) -> async_sessionmaker[AsyncSession]:
    factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )
    async with factory() as session:
        session.add_all(
            [
                Tenant(id=TENANT_ID, name="Test Daily", slug="test-daily"),
                User(id=reporter.user_id, display_name="Reporter"),
                Language(code="te", name="Telugu"),
            ]
        )
        await session.commit()
    return factory


def _repos(session: AsyncSession, **overrides) -> PublishingRepositories:
    """Repositories on a real session; the PostgreSQL counter upsert is stubbed."""
    counters = AsyncMock()
    counters.next_value = AsyncMock(return_value=1)
    return replace(PublishingRepositories.from_session(session), counters=counters, **overrides)


async def _count(factory: async_sessionmaker[AsyncSession], model) -> int:
    async with factory() as session:
        result = await session.execute(select(func.count()).select_from(model))
        return result.scalar_one()


async def _limited_tenant(factory: async_sessionmaker[AsyncSession]) -> None:
    async with factory() as session:
        session.add(TenantFeatureFlags(tenant_id=TENANT_ID, ai_article_rewrite_enabled=False))
        await session.commit()


class _FailingWebArticles(WebArticleRepository):
    """Writes the row, then hits a database error before returning."""

    async def save(self, article: TenantWebArticle) -> TenantWebArticle:
        await super().save(article)
        await self.session.execute(text("INSERT INTO missing_table VALUES (1)"))
        return article


class _FailingLocations(LocationRepository):
    async def get_state(self, state_id: str):
        await self.session.execute(text("SELECT name FROM missing_table"))


class TestSavepoints:
    async def test_web_failure_keeps_base_and_print(
        self, session_factory, mock_settings: Settings, reporter, sample_payload
    ) -> None:
        await _limited_tenant(session_factory)

        async with session_factory() as session:
            repos = _repos(session, web_articles=_FailingWebArticles(session))
            result = await PublicationOrchestrator(repos, mock_settings).create(
                reporter, sample_payload
            )

        assert result.creation_status == CreationStatus.PARTIALLY_CREATED
        assert result.web_article_id is None
        assert await _count(session_factory, TenantWebArticle) == 0
        assert await _count(session_factory, Article) == 1
        assert await _count(session_factory, NewspaperArticle) == 1
        async with session_factory() as session:
            base = await session.get(Article, result.base_article_id)
            assert "webArticleId" not in base.content_json

    async def test_web_article_committed_with_the_rest(
        self, session_factory, mock_settings, reporter, sample_payload
    ) -> None:
        await _limited_tenant(session_factory)

        async with session_factory() as session:
            result = await PublicationOrchestrator(_repos(session), mock_settings).create(
                reporter, sample_payload
            )

        assert result.creation_status == CreationStatus.FULLY_CREATED
        async with session_factory() as session:
            web = await session.get(TenantWebArticle, result.web_article_id)
            base = await session.get(Article, result.base_article_id)
            assert web.slug == "rains-lash-hyderabad"
            assert base.content_json["webArticleId"] == web.id

    async def test_deleted_category_slug_gets_suffix(
        self, session_factory, mock_settings, reporter, sample_payload
    ) -> None:
        async with session_factory() as session:
            session.add(Category(name="Crime News", slug="crime-news", is_deleted=True))
            await session.commit()
        sample_payload["category"] = "Crime News"

        async with session_factory() as session:
            result = await PublicationOrchestrator(_repos(session), mock_settings).create(
                reporter, sample_payload
            )

        async with session_factory() as session:
            created = (
                await session.execute(select(Category).where(Category.slug == "crime-news-1"))
            ).scalar_one()
            translations = (
                await session.execute(
                    select(CategoryTranslation.language).where(
                        CategoryTranslation.category_id == created.id
                    )
                )
            ).scalars().all()
            base = await session.get(Article, result.base_article_id)
        assert translations == ["te"]
        assert base.content_json["raw"]["categoryIds"] == [created.id]

    async def test_category_insert_conflict_is_swallowed(
        self, session_factory, mock_settings, reporter, sample_payload, monkeypatch
    ) -> None:
        async with session_factory() as session:
            session.add(Category(name="Crime News", slug="crime-news", is_deleted=True))
            await session.commit()
        # Another request took the slug between the check and the insert
        monkeypatch.setattr(CategoryRepository, "list_slugs_like", AsyncMock(return_value=set()))
        sample_payload["category"] = "Crime News"

        async with session_factory() as session:
            result = await PublicationOrchestrator(_repos(session), mock_settings).create(
                reporter, sample_payload
            )

        assert result.success is True
        assert await _count(session_factory, Category) == 1
        assert await _count(session_factory, Article) == 1
        assert await _count(session_factory, NewspaperArticle) == 1
        async with session_factory() as session:
            base = await session.get(Article, result.base_article_id)
            assert base.content_json["raw"]["categoryIds"] == []

    async def test_failed_lookup_degrades(
        self, session_factory, mock_settings, reporter, sample_payload
    ) -> None:
        sample_payload["location"] = {"stateId": "state-ts", "city": "Hyderabad"}

        async with session_factory() as session:
            repos = _repos(session, locations=_FailingLocations(session))
            result = await PublicationOrchestrator(repos, mock_settings).create(
                reporter, sample_payload
            )

        assert result.success is True
        async with session_factory() as session:
            base = await session.get(Article, result.base_article_id)
            assert base.content_json["lookupDegraded"] == ["state"]
        assert await _count(session_factory, NewspaperArticle) == 1


@pytest.fixture
def app(session_factory, mock_settings: Settings, reporter: Principal):
    """The API wired to the SQLite database; sessions are never committed on teardown."""
    from newsdesk.web.app import create_app
    from newsdesk.web.dependencies import get_newspaper_service, get_publication_orchestrator
    from newsdesk.web.middleware.principal import get_current_principal

    async def _orchestrator() -> AsyncGenerator[PublicationOrchestrator]:
        async with session_factory() as session:
            yield PublicationOrchestrator(_repos(session), mock_settings)

    async def _service() -> AsyncGenerator[NewspaperArticleService]:
        async with session_factory() as session:
            yield NewspaperArticleService(
                NewspaperArticleRepository(session),
                ArticleRepository(session),
                transaction=RequestTransaction(session),
                settings=mock_settings,
            )

    app = create_app()
    app.dependency_overrides[get_current_principal] = lambda: reporter
    app.dependency_overrides[get_publication_orchestrator] = _orchestrator
    app.dependency_overrides[get_newspaper_service] = _service
    return app


@pytest.fixture
async def client(app) -> AsyncGenerator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client


class TestRequestOutcome:
    async def test_accepted_submission_is_committed(
        self, client, session_factory, sample_payload
    ) -> None:
        response = await client.post("/articles/newspaper", json=sample_payload)

        assert response.status_code == 202
        assert await _count(session_factory, Article) == 1
        assert await _count(session_factory, NewspaperArticle) == 1

    async def test_forbidden_override_writes_nothing(
        self, client, session_factory, sample_payload
    ) -> None:
        response = await client.post(
            "/articles/newspaper?forceAiRewriteEnabled=true", json=sample_payload
        )

        assert response.status_code == 403
        assert await _count(session_factory, Article) == 0
        assert await _count(session_factory, NewspaperArticle) == 0

    async def test_invalid_submission_writes_nothing(
        self, client, session_factory, sample_payload
    ) -> None:
        sample_payload["title"] = "x" * 51

        response = await client.post("/articles/newspaper", json=sample_payload)

        assert response.status_code == 400
        assert response.json() == {"error": "title max 50 characters"}
        assert await _count(session_factory, Article) == 0
        assert await _count(session_factory, NewspaperArticle) == 0

    async def test_patch_is_committed(self, client, session_factory, sample_payload) -> None:
        created = await client.post("/articles/newspaper", json=sample_payload)
        print_id = created.json()["newspaperArticleId"]

        response = await client.patch(
            f"/articles/newspaper/{print_id}", json={"title": "Rains ease", "status": "draft"}
        )

        assert response.status_code == 200
        assert response.json()["status"] == "DRAFT"
        async with session_factory() as session:
            stored = await session.get(NewspaperArticle, print_id)
            assert stored.title == "Rains ease"
            assert stored.status == "DRAFT"

    async def test_rejected_patch_leaves_row_unchanged(
        self, client, session_factory, sample_payload
    ) -> None:
        created = await client.post("/articles/newspaper", json=sample_payload)
        print_id = created.json()["newspaperArticleId"]

        response = await client.patch(f"/articles/newspaper/{print_id}", json={"title": None})

        assert response.status_code == 400
        assert response.json() == {"error": "title cannot be null"}
        async with session_factory() as session:
            stored = await session.get(NewspaperArticle, print_id)
            assert stored.title == "Rains lash Hyderabad"
