# ABOUTME: Pytest fixtures and configuration for newsdesk tests.
# ABOUTME: Provides test settings, principals, mocked repositories and sample submissions.

from contextlib import nullcontext
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import SecretStr

from newsdesk.config import Settings
from newsdesk.models import Principal, RoleName
from newsdesk.publishing.orchestrator import PublishingRepositories

TENANT_ID = "tenant-1"


@pytest.fixture
def mock_settings() -> Settings:
    """Create settings for testing."""
    return Settings(
        db_host="localhost",
        db_name="newsdesk_test",
        db_user="tester",
        db_password=SecretStr("test-password"),
        seo_publisher_name="Test Daily",
        seo_publisher_logo="/static/logo.png",
        newsroom_timezone="Asia/Kolkata",
        log_level="DEBUG",
    )


@pytest.fixture
def reporter() -> Principal:
    """A reporter linked to the test tenant."""
    return Principal(
        user_id="user-reporter",
        role=RoleName.REPORTER.value,
        reporter_tenant_id=TENANT_ID,
    )


@pytest.fixture
def super_admin() -> Principal:
    """A super admin without a reporter profile."""
    return Principal(user_id="user-admin", role=RoleName.SUPER_ADMIN.value)


def _assign_id(new_id: str):
    """Mimic a flush assigning a primary key."""

    async def _save(entity):
        if not getattr(entity, "id", None):
            entity.id = new_id
        return entity

    return _save


@pytest.fixture
def mock_repos() -> PublishingRepositories:
    """Repositories for the publishing pipeline, all lookups empty."""
    articles = AsyncMock()
    articles.save = AsyncMock(side_effect=_assign_id("base-1"))
    articles.merge_content_json = AsyncMock(side_effect=lambda article, **_: article)

    newspaper_articles = AsyncMock()
    newspaper_articles.save = AsyncMock(side_effect=_assign_id("print-1"))
    newspaper_articles.count_created_between = AsyncMock(return_value=0)

    web_articles = AsyncMock()
    web_articles.save = AsyncMock(side_effect=_assign_id("web-1"))

    languages = AsyncMock()
    languages.get_by_code = AsyncMock(return_value=SimpleNamespace(id="lang-te", code="te"))
    languages.list_active_codes = AsyncMock(return_value=["en", "te"])

    flags = AsyncMock()
    flags.get_flags = AsyncMock(return_value=None)

    locations = AsyncMock()
    locations.get_village = AsyncMock(return_value=None)
    locations.get_mandal = AsyncMock(return_value=None)
    locations.get_district = AsyncMock(return_value=None)
    locations.get_state = AsyncMock(return_value=None)

    domains = AsyncMock()
    domains.get_for_tenant = AsyncMock(return_value=None)
    domains.get_by_name = AsyncMock(return_value=None)
    domains.get_primary_active = AsyncMock(
        return_value=SimpleNamespace(id="dom-1", domain="news.example.com")
    )
    domains.get_latest = AsyncMock(return_value=None)

    categories = AsyncMock()
    categories.list_active = AsyncMock(return_value=[])
    categories.list_translations = AsyncMock(return_value=[])
    categories.list_by_ids = AsyncMock(return_value=[])
    categories.create = AsyncMock(
        side_effect=lambda name, slug: SimpleNamespace(id="cat-new", name=name, slug=slug)
    )
    categories.list_slugs_like = AsyncMock(return_value=set())
    categories.add_translations = AsyncMock(return_value=None)

    counters = AsyncMock()
    counters.next_value = AsyncMock(return_value=1)

    transaction = MagicMock()
    transaction.savepoint = MagicMock(side_effect=lambda: nullcontext())
    transaction.commit = AsyncMock()

    return PublishingRepositories(
        articles=articles,
        newspaper_articles=newspaper_articles,
        web_articles=web_articles,
        languages=languages,
        flags=flags,
        locations=locations,
        domains=domains,
        categories=categories,
        counters=counters,
        transaction=transaction,
    )


@pytest.fixture
def village_chain() -> SimpleNamespace:
    """A village with its mandal, district and state loaded."""
    state = SimpleNamespace(id="state-ts", name="Telangana")
    district = SimpleNamespace(id="dist-rr", name="Rangareddy", state=state)
    mandal = SimpleNamespace(id="mandal-sh", name="Shamshabad", district=district)
    return SimpleNamespace(id="vil-1", name="Kothur", mandal=mandal)


@pytest.fixture
def sample_payload() -> dict:
    """A well-formed newspaper submission."""
    return {
        "title": "Rains lash Hyderabad",
        "subTitle": "Schools shut for two days",
        "lead": "Heavy overnight rain flooded low-lying areas.",
        "content": [
            {"type": "paragraph", "text": "The municipal corporation opened relief camps."},
            {"type": "image", "url": "https://cdn.example.com/rain.jpg"},
            {"type": "paragraph", "text": "More rain is forecast for the weekend."},
        ],
        "bulletPoints": ["Relief camps opened", "Schools closed"],
        "location": {"city": "Hyderabad"},
        "language": "te",
        "tags": ["rain", "hyderabad"],
        "status": "published",
        "publishedAt": "2026-10-16T05:30:00Z",
        "callbackUrl": "https://partner.example.com/hooks/article",
    }
