"""
Unit tests for plan and limit resolution.

Tests precedence order and the difference between authoritative CLI values
and advisory environment values.
"""

import pytest

from copilot_usage.core.errors import ConfigurationError
from copilot_usage.core.limits import resolve_limit, resolve_plan


class TestResolveLimit:
    """Test limit precedence."""

    def test_cli_override_wins(self):
        """CLI=500, env=200, plan=pro resolves to 500."""
        assert resolve_limit(500, "200", "pro") == 500

    def test_env_override_beats_plan(self):
        """CLI absent, env=200, plan=pro resolves to 200."""
        assert resolve_limit(None, "200", "pro") == 200

    def test_plan_default(self):
        """Both overrides absent, plan=pro resolves to 300."""
        assert resolve_limit(None, None, "pro") == 300

    def test_fallback_without_plan(self):
        """Everything absent resolves to 1500."""
        assert resolve_limit(None, None, None) == 1500

    def test_config_limit_between_env_and_plan(self):
        """Config file limit applies only when CLI and env do not."""
        assert resolve_limit(None, None, "pro", config_limit=700) == 700
        assert resolve_limit(None, "200", "pro", config_limit=700) == 200
        assert resolve_limit(500, "200", "pro", config_limit=700) == 500

    @pytest.mark.parametrize("cli_value", [0, -5])
    def test_non_positive_cli_override_rejected(self, cli_value):
        """Non-positive CLI limits are configuration errors."""
        with pytest.raises(ConfigurationError, match="--limit must be a positive number"):
            resolve_limit(cli_value, "200", "pro")

    @pytest.mark.parametrize("env_value", ["", "   ", "abc", "0", "-10", "1.5"])
    def test_unusable_env_override_ignored(self, env_value):
        """Unparseable or non-positive env limits fall through to the plan."""
        assert resolve_limit(None, env_value, "pro") == 300

    def test_env_override_whitespace_tolerated(self):
        """Surrounding whitespace in env values is ignored."""
        assert resolve_limit(None, " 250 ", "pro") == 250

    def test_unknown_plan_is_error(self):
        """An explicitly named unknown plan is not silently replaced."""
        with pytest.raises(ConfigurationError, match="Unknown plan"):
            resolve_limit(None, None, "platinum")


class TestResolvePlan:
    """Test plan precedence and validation."""

    def test_cli_plan_wins(self):
        """Verify CLI plan beats environment and config."""
        assert resolve_plan("free", "business", "enterprise") == "free"

    def test_cli_plan_normalized(self):
        """Verify CLI plan is lower-cased."""
        assert resolve_plan("PRO") == "pro"

    def test_unknown_cli_plan_rejected(self):
        """An unknown CLI plan is always rejected loudly."""
        with pytest.raises(ConfigurationError, match='Unknown plan "gold"'):
            resolve_plan("gold", "pro")

    def test_env_plan_used_when_no_cli_plan(self):
        """Verify environment plan is used (case-insensitively)."""
        assert resolve_plan(None, "Business") == "business"

    def test_unknown_env_plan_silently_ignored(self):
        """An unknown environment plan falls through without error."""
        assert resolve_plan(None, "gold") == "pro+"
        assert resolve_plan(None, "gold", "free") == "free"

    def test_config_plan_used_after_env(self):
        """Verify config plan applies when CLI and env give nothing."""
        assert resolve_plan(None, None, "enterprise") == "enterprise"

    def test_default_plan(self):
        """Verify default plan when nothing is configured."""
        assert resolve_plan(None) == "pro+"
