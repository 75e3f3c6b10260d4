# ABOUTME: Tests for the AI rewrite mode decision.
# ABOUTME: Covers tenant flag defaults, override parsing and the super admin rule.

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from newsdesk.errors import AuthorizationError
from newsdesk.models import AIMode, DecisionSource, RoleName
from newsdesk.publishing.ai_mode import (
    REWRITE_PROMPT_FULL,
    REWRITE_PROMPT_LIMITED,
    AIModeDecider,
    parse_override,
)


def _flags(enabled: bool | None) -> AsyncMock:
    repo = AsyncMock()
    value = None if enabled is None else SimpleNamespace(ai_article_rewrite_enabled=enabled)
    repo.get_flags = AsyncMock(return_value=value)
    return repo


class TestParseOverride:
    """Tests for parse_override."""

    @pytest.mark.parametrize("raw", ["true", "TRUE", "1", "yes", " Yes "])
    def test_truthy(self, raw: str) -> None:
        assert parse_override(raw) is True

    @pytest.mark.parametrize("raw", ["false", "0", "no", "", "maybe"])
    def test_anything_else_is_false(self, raw: str) -> None:
        assert parse_override(raw) is False

    def test_absent(self) -> None:
        assert parse_override(None) is None


class TestAIModeDecider:
    """Tests for AIModeDecider.decide."""

    async def test_missing_flags_default_full(self) -> None:
        decision = await AIModeDecider(_flags(None)).decide("t1", None, RoleName.REPORTER.value)

        assert decision.mode == AIMode.FULL
        assert decision.tenant_ai_rewrite_enabled is True
        assert decision.source == DecisionSource.TENANT_FLAG
        assert decision.prompts_to_run == [REWRITE_PROMPT_FULL]

    async def test_flag_disabled_is_limited(self) -> None:
        decision = await AIModeDecider(_flags(False)).decide("t1", None, RoleName.REPORTER.value)

        assert decision.mode == AIMode.LIMITED
        assert decision.prompts_to_run == [REWRITE_PROMPT_LIMITED]

    async def test_flag_lookup_failure_defaults_full(self) -> None:
        repo = AsyncMock()
        repo.get_flags = AsyncMock(side_effect=RuntimeError("timeout"))

        decision = await AIModeDecider(repo).decide("t1", None, RoleName.REPORTER.value)

        assert decision.mode == AIMode.FULL

    async def test_override_false_any_role(self) -> None:
        """Anyone may force LIMITED; the flag is not consulted."""
        repo = _flags(True)
        decision = await AIModeDecider(repo).decide("t1", False, RoleName.REPORTER.value)

        assert decision.mode == AIMode.LIMITED
        assert decision.source == DecisionSource.OVERRIDE
        repo.get_flags.assert_not_awaited()

    async def test_override_true_super_admin(self) -> None:
        decision = await AIModeDecider(_flags(False)).decide(
            "t1", True, RoleName.SUPER_ADMIN.value
        )

        assert decision.mode == AIMode.FULL
        assert decision.source == DecisionSource.OVERRIDE

    async def test_override_true_forbidden_for_others(self) -> None:
        repo = _flags(False)
        with pytest.raises(AuthorizationError) as exc:
            await AIModeDecider(repo).decide("t1", True, RoleName.TENANT_ADMIN.value)

        assert exc.value.status_code == 403
        repo.get_flags.assert_not_awaited()
