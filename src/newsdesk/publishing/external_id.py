# ABOUTME: Human-facing external article ids of the form ART{YYYYMMDD}{seq:04d}.
# ABOUTME: Sequence comes from an atomic per-tenant, per-UTC-day counter.

from datetime import UTC, date, datetime, time, timedelta

import structlog

from newsdesk.db.repository import ExternalIdCounterRepository, NewspaperArticleRepository

log = structlog.get_logger()


def utc_day_bounds(day: date) -> tuple[datetime, datetime]:
    """Return the first and last instant of a UTC day."""
    start = datetime.combine(day, time.min, tzinfo=UTC)
    end = start + timedelta(days=1) - timedelta(microseconds=1)
    return start, end


def format_external_id(day: date, sequence: int, prefix: str = "ART") -> str:
    """Format an external id, e.g. ``ART202610160007``."""
    return f"{prefix}{day:%Y%m%d}{sequence:04d}"


class ExternalIdGenerator:
    """Generates tenant/day-scoped external ids."""

    def __init__(
        self,
        counters: ExternalIdCounterRepository,
        newspaper_articles: NewspaperArticleRepository | None = None,
        prefix: str = "ART",
    ) -> None:
        self.counters = counters
        self.newspaper_articles = newspaper_articles
        self.prefix = prefix

    async def generate(self, tenant_id: str, now: datetime | None = None) -> str:
        """Allocate the next id from the atomic counter.

        Unique per tenant and day even under concurrent submissions.
        """
        day = (now or datetime.now(UTC)).astimezone(UTC).date()
        sequence = await self.counters.next_value(tenant_id, day)
        external_id = format_external_id(day, sequence, self.prefix)
        log.debug("external_id_allocated", tenant_id=tenant_id, external_id=external_id)
        return external_id

    async def generate_advisory(self, tenant_id: str, now: datetime | None = None) -> str:
        """Derive an id from today's print article count.

        Not collision-free: two concurrent callers can observe the same count.
        """
        if self.newspaper_articles is None:
            raise RuntimeError("advisory ids need a newspaper article repository")
        day = (now or datetime.now(UTC)).astimezone(UTC).date()
        start, end = utc_day_bounds(day)
        count = await self.newspaper_articles.count_created_between(tenant_id, start, end)
        return format_external_id(day, count + 1, self.prefix)
