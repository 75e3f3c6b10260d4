# ABOUTME: Resolves the calling user from the header set by the upstream auth gateway.
# ABOUTME: Loads role and reporter link so tenant scoping needs no further lookups.

from typing import Annotated

import structlog
from fastapi import Depends, Request

from newsdesk.config import get_settings
from newsdesk.db.repository import UserRepository
from newsdesk.models import Principal
from newsdesk.web.dependencies import DbSession

log = structlog.get_logger()


async def get_current_principal(request: Request, session: DbSession) -> Principal | None:
    """Return the authenticated principal, or None when the request carries no identity.

    Tenant scoping turns a missing principal into a 401.
    """
    settings = get_settings()
    user_id = (request.headers.get(settings.auth_user_header) or "").strip()
    if not user_id:
        log.debug("principal_missing_header", header=settings.auth_user_header)
        return None

    user = await UserRepository(session).get_by_id(user_id)
    if user is None:
        log.warning("principal_unknown_user", user_id=user_id)
        return None

    reporter = user.reporter
    return Principal(
        user_id=user.id,
        role=user.role.name if user.role else None,
        reporter_tenant_id=reporter.tenant_id if reporter else None,
    )


CurrentPrincipal = Annotated[Principal | None, Depends(get_current_principal)]
