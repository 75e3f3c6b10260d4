# ABOUTME: Tenant scope resolution for authenticated callers.
# ABOUTME: Super admins may pick any tenant; tenant roles are pinned to their reporter profile.

import structlog

from newsdesk.errors import AuthenticationError, AuthorizationError, ValidationError
from newsdesk.models import TENANT_SCOPED_ROLES, Principal, RoleName

log = structlog.get_logger()


def resolve_tenant_scope(principal: Principal | None, requested_tenant_id: str | None = None) -> str | None:
    """Determine which tenant the caller may act on.

    Returns:
        The tenant id, or None for a super admin acting globally.

    Raises:
        AuthenticationError: No principal or no role.
        AuthorizationError: Role not allowed, or reporter profile not linked to a tenant.
    """
    if principal is None or not principal.role:
        raise AuthenticationError("Unauthorized")

    if principal.role == RoleName.SUPER_ADMIN.value:
        tenant_id = (requested_tenant_id or "").strip() or None
        log.debug("tenant_scope_super_admin", tenant_id=tenant_id)
        return tenant_id

    if principal.role in TENANT_SCOPED_ROLES:
        # The request's tenantId is ignored for tenant-scoped roles
        if not principal.reporter_tenant_id:
            log.warning("tenant_scope_unlinked", user_id=principal.user_id, role=principal.role)
            raise AuthorizationError("Reporter profile not linked to tenant")
        return principal.reporter_tenant_id

    log.warning("tenant_scope_forbidden_role", user_id=principal.user_id, role=principal.role)
    raise AuthorizationError("Forbidden")


def require_tenant_scope(principal: Principal | None, requested_tenant_id: str | None = None) -> str:
    """Like resolve_tenant_scope, but a concrete tenant is mandatory."""
    tenant_id = resolve_tenant_scope(principal, requested_tenant_id)
    if not tenant_id:
        raise ValidationError("tenantId scope required")
    return tenant_id
