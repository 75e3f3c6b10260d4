# ABOUTME: Decides FULL vs LIMITED AI rewriting from the tenant flag and a request override.
# ABOUTME: Only super admins may force FULL; anyone may force LIMITED.

import structlog

from newsdesk.db.repository import TenantFlagsRepository
from newsdesk.db.session import SavepointFactory, no_savepoint
from newsdesk.errors import AuthorizationError
from newsdesk.models import AIDecision, AIMode, DecisionSource, RoleName

log = structlog.get_logger()

REWRITE_PROMPT_FULL = "ai_rewrite_prompt_true"
REWRITE_PROMPT_LIMITED = "ai_rewrite_prompt_false"

_TRUTHY = frozenset({"true", "1", "yes"})


def parse_override(raw: str | bool | None) -> bool | None:
    """Parse ``forceAiRewriteEnabled``: absent is None, anything not truthy is False."""
    if raw is None:
        return None
    if isinstance(raw, bool):
        return raw
    return raw.strip().lower() in _TRUTHY


class AIModeDecider:
    """Turns the tenant's ``aiArticleRewriteEnabled`` flag plus an override into a decision.

    The override is a per-request switch and is never written back to the
    tenant's flags.
    """

    def __init__(
        self, flags_repo: TenantFlagsRepository, savepoint: SavepointFactory = no_savepoint
    ) -> None:
        self.flags_repo = flags_repo
        self.savepoint = savepoint

    async def tenant_flag(self, tenant_id: str) -> bool:
        """Read the tenant flag; missing row or failed lookup means enabled."""
        try:
            async with self.savepoint():
                flags = await self.flags_repo.get_flags(tenant_id)
        except Exception as e:
            log.warning("tenant_flags_lookup_degraded", tenant_id=tenant_id, error=str(e))
            return True
        if flags is None:
            return True
        return flags.ai_article_rewrite_enabled is not False

    async def decide(self, tenant_id: str, override: bool | None, role: str | None) -> AIDecision:
        """Decide the rewrite mode.

        Raises:
            AuthorizationError: Override forces FULL and the caller is not a super admin.
        """
        if override is True and role != RoleName.SUPER_ADMIN.value:
            log.warning("ai_override_forbidden", tenant_id=tenant_id, role=role)
            raise AuthorizationError("forceAiRewriteEnabled=true is SUPER_ADMIN only")

        if override is None:
            enabled = await self.tenant_flag(tenant_id)
            source = DecisionSource.TENANT_FLAG
        else:
            enabled = override
            source = DecisionSource.OVERRIDE

        mode = AIMode.FULL if enabled else AIMode.LIMITED
        decision = AIDecision(
            mode=mode,
            tenant_ai_rewrite_enabled=enabled,
            source=source,
            prompts_to_run=[REWRITE_PROMPT_FULL if enabled else REWRITE_PROMPT_LIMITED],
        )
        log.info("ai_mode_decided", tenant_id=tenant_id, mode=mode.value, source=source.value)
        return decision
