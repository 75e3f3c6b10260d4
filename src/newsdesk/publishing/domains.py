# ABOUTME: Picks the tenant domain that anchors canonical web article URLs.
# ABOUTME: Tries requested id, request host, primary active, then newest; never raises.

import structlog

from newsdesk.db.repository import DomainRepository
from newsdesk.db.session import SavepointFactory, no_savepoint
from newsdesk.models import Lookup, TenantContext

log = structlog.get_logger()


class DomainResolver:
    """Resolves the publishing domain for a tenant."""

    def __init__(
        self, repo: DomainRepository, savepoint: SavepointFactory = no_savepoint
    ) -> None:
        self.repo = repo
        self.savepoint = savepoint

    async def resolve(
        self,
        tenant_id: str,
        requested_domain_id: str | None = None,
        request_host: str | None = None,
    ) -> tuple[TenantContext, bool]:
        """Return the tenant context and whether any lookup degraded."""
        degraded = False
        attempts = []
        if requested_domain_id:
            attempts.append(("requested", self.repo.get_for_tenant, (requested_domain_id, tenant_id)))
        if request_host:
            attempts.append(("host", self.repo.get_by_name, (request_host, tenant_id)))
        attempts.append(("primary", self.repo.get_primary_active, (tenant_id,)))
        attempts.append(("latest", self.repo.get_latest, (tenant_id,)))

        for step, fetch, args in attempts:
            try:
                async with self.savepoint():
                    found = await fetch(*args)
                lookup = Lookup.ok(found)
            except Exception as e:
                log.warning("domain_lookup_degraded", tenant_id=tenant_id, step=step, error=str(e))
                lookup = Lookup.failed(e)
            degraded = degraded or lookup.degraded
            if lookup.value is not None:
                return (
                    TenantContext(
                        tenant_id=tenant_id,
                        domain_id=lookup.value.id,
                        domain_name=lookup.value.domain,
                    ),
                    degraded,
                )

        return TenantContext(tenant_id=tenant_id), degraded
