# ABOUTME: Tests for tenant-scoped newspaper article reads, edits and AI status.
# ABOUTME: Uses mocked repositories; no database required.

from datetime import UTC, datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from newsdesk.config import Settings
from newsdesk.errors import AuthorizationError, NotFoundError, ValidationError
from newsdesk.models import Principal
from newsdesk.publishing.articles import NewspaperArticleService


def _printed(**overrides) -> SimpleNamespace:
    fields = {
        "id": "print-1",
        "tenant_id": "tenant-1",
        "title": "Old title",
        "heading": "Old heading",
        "sub_title": None,
        "points": ["a"],
        "dateline": "Hyderabad, Oct 16, 2026",
        "place_name": "Hyderabad",
        "content": "Body",
        "status": "DRAFT",
    }
    fields.update(overrides)
    return SimpleNamespace(**fields)


@pytest.fixture
def newspaper_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.list_filtered = AsyncMock(return_value=(0, []))
    repo.get_by_id = AsyncMock(return_value=_printed())
    repo.save = AsyncMock(side_effect=lambda article: article)
    return repo


@pytest.fixture
def article_repo() -> AsyncMock:
    repo = AsyncMock()
    repo.get_by_id = AsyncMock(return_value=None)
    repo.get_for_tenant = AsyncMock(return_value=None)
    return repo


@pytest.fixture
def transaction() -> MagicMock:
    transaction = MagicMock()
    transaction.commit = AsyncMock()
    return transaction


@pytest.fixture
def service(
    newspaper_repo: AsyncMock,
    article_repo: AsyncMock,
    transaction: MagicMock,
    mock_settings: Settings,
) -> NewspaperArticleService:
    return NewspaperArticleService(
        newspaper_repo, article_repo, transaction=transaction, settings=mock_settings
    )


class TestListArticles:
    async def test_reporter_scoped_to_tenant(self, service, newspaper_repo, reporter: Principal):
        await service.list_articles(reporter, "other-tenant", status="published")

        kwargs = newspaper_repo.list_filtered.await_args.kwargs
        assert kwargs["tenant_id"] == "tenant-1"
        assert kwargs["status"] == "PUBLISHED"
        assert kwargs["created_from"] is None

    async def test_super_admin_global(self, service, newspaper_repo, super_admin: Principal):
        await service.list_articles(super_admin, limit=10, offset=20)

        kwargs = newspaper_repo.list_filtered.await_args.kwargs
        assert kwargs["tenant_id"] is None
        assert kwargs["limit"] == 10
        assert kwargs["offset"] == 20

    async def test_date_filter_is_utc_day(self, service, newspaper_repo, reporter):
        await service.list_articles(reporter, day="2026-10-16")

        kwargs = newspaper_repo.list_filtered.await_args.kwargs
        assert kwargs["created_from"] == datetime(2026, 10, 16, tzinfo=UTC)
        assert kwargs["created_to"] == datetime(2026, 10, 17, tzinfo=UTC)

    async def test_bad_date_ignored(self, service, newspaper_repo, reporter):
        await service.list_articles(reporter, day="16/10/2026")
        assert newspaper_repo.list_filtered.await_args.kwargs["created_from"] is None


class TestGetAndUpdate:
    async def test_not_found(self, service, newspaper_repo, reporter):
        newspaper_repo.get_by_id.return_value = None
        with pytest.raises(NotFoundError):
            await service.get_article(reporter, "missing")

    async def test_other_tenant_denied(self, service, newspaper_repo, reporter):
        newspaper_repo.get_by_id.return_value = _printed(tenant_id="tenant-2")
        with pytest.raises(AuthorizationError, match="Access denied"):
            await service.get_article(reporter, "print-1")

    async def test_super_admin_reads_any(self, service, newspaper_repo, super_admin):
        newspaper_repo.get_by_id.return_value = _printed(tenant_id="tenant-2")
        article = await service.get_article(super_admin, "print-1")
        assert article.tenant_id == "tenant-2"

    async def test_partial_update(self, service, newspaper_repo, transaction, reporter):
        article = await service.update_article(
            reporter,
            "print-1",
            {"title": "New title", "subTitle": "New sub", "points": ["x", "y"], "unknown": 1},
        )

        assert article.title == "New title"
        assert article.sub_title == "New sub"
        assert article.points == ["x", "y"]
        assert article.heading == "Old heading"
        newspaper_repo.save.assert_awaited_once()
        transaction.commit.assert_awaited_once()

    async def test_points_only_when_list(self, service, reporter):
        article = await service.update_article(reporter, "print-1", {"points": "x"})
        assert article.points == ["a"]

    async def test_status_normalized(self, service, reporter):
        article = await service.update_article(reporter, "print-1", {"status": "publish"})
        assert article.status == "PUBLISHED"

    async def test_optional_field_cleared(self, service, reporter):
        article = await service.update_article(reporter, "print-1", {"placeName": None})
        assert article.place_name is None


class TestUpdateValidation:
    """Edits that must be rejected before the article is loaded."""

    @pytest.mark.parametrize(
        "changes, message",
        [
            ({"title": None}, "title cannot be null"),
            ({"content": None}, "content cannot be null"),
            ({"title": "   "}, "title is required"),
            ({"title": "x" * 80}, "title max 50 characters"),
            ({"subTitle": "s" * 51}, "subTitle max 50 characters"),
            ({"content": "word " * 2001}, "content max 2000 words"),
            ({"points": ["a", "b", "c", "d", "e", "f"]}, "points max 5 items"),
            ({"points": ["one two three four five six"]}, "Each point max 5 words"),
            ({"status": "archived"}, "status must be one of DRAFT, PENDING, PUBLISHED"),
        ],
    )
    async def test_rejected(
        self, service, newspaper_repo, transaction, reporter, changes: dict, message: str
    ):
        with pytest.raises(ValidationError) as exc:
            await service.update_article(reporter, "print-1", changes)

        assert exc.value.status_code == 400
        assert exc.value.message == message
        newspaper_repo.get_by_id.assert_not_awaited()
        newspaper_repo.save.assert_not_awaited()
        transaction.commit.assert_not_awaited()

    @pytest.mark.parametrize("changes", [{"content": {"html": "<p>x</p>"}}, {"title": 12}])
    async def test_wrong_type(self, service, newspaper_repo, reporter, changes: dict):
        with pytest.raises(ValidationError, match="Malformed update"):
            await service.update_article(reporter, "print-1", changes)
        newspaper_repo.save.assert_not_awaited()

    async def test_non_object_body(self, service, reporter):
        with pytest.raises(ValidationError, match="must be a JSON object"):
            await service.update_article(reporter, "print-1", ["title"])

    async def test_title_at_limit_accepted(self, service, reporter):
        article = await service.update_article(reporter, "print-1", {"title": "x" * 50})
        assert article.title == "x" * 50


class TestAiStatus:
    async def test_reporter_scoped(self, service, article_repo, reporter):
        with pytest.raises(NotFoundError):
            await service.ai_status(reporter, "base-1")
        article_repo.get_for_tenant.assert_awaited_once_with("base-1", "tenant-1")
        article_repo.get_by_id.assert_not_awaited()

    async def test_status_shape(self, service, article_repo, super_admin):
        article_repo.get_by_id.return_value = SimpleNamespace(
            id="base-1",
            tenant_id="tenant-1",
            status="PUBLISHED",
            content_json={
                "aiStatus": "DONE",
                "aiDecision": {"mode": "LIMITED"},
                "aiQueue": {"web": True, "short": True, "newspaper": False},
                "webArticleId": "web-1",
                "externalArticleId": "ART202610160001",
            },
            created_at=datetime(2026, 10, 16, 5, 30, tzinfo=UTC),
            updated_at=None,
        )

        status = await service.ai_status(super_admin, "base-1")

        assert status["ai"]["aiStatus"] == "DONE"
        assert status["ai"]["aiMode"] == "LIMITED"
        assert status["ai"]["queue"] == {"web": True, "short": True, "newspaper": False}
        assert status["ai"]["outputs"]["webArticleId"] == "web-1"
        assert status["externalArticleId"] == "ART202610160001"
        assert status["createdAt"] == "2026-10-16T05:30:00+00:00"
        assert status["updatedAt"] is None
