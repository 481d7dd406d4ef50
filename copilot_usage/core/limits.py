"""
Plan and limit resolution.

Determines the effective monthly quota with strict precedence.

Resolution Order:
1. Explicit CLI value - authoritative, validated loudly
2. Environment value - advisory, ignored when unusable
3. Configuration file value - validated when the file is loaded
4. Plan table default
5. Hard-coded fallback (limit only)
"""

import logging
from typing import Optional

from .errors import ConfigurationError
from .plans import DEFAULT_PLAN, FALLBACK_LIMIT, PLAN_TABLE

logger = logging.getLogger(__name__)

ENV_PLAN = "GH_COPILOT_PLAN"
ENV_LIMIT = "GH_COPILOT_LIMIT"


def resolve_plan(
    cli_plan: Optional[str],
    env_plan: Optional[str] = None,
    config_plan: Optional[str] = None,
) -> str:
    """Resolve the plan name used for display and quota lookup.

    An explicit CLI plan must be in the plan table. An environment plan that
    is not recognized is skipped so the next source applies.

    Raises:
        ConfigurationError: If the CLI or config plan is unknown
    """
    if cli_plan:
        return PLAN_TABLE.normalize(cli_plan)

    if env_plan:
        if PLAN_TABLE.is_known(env_plan):
            return PLAN_TABLE.normalize(env_plan)
        logger.debug("Ignoring unrecognized %s=%r", ENV_PLAN, env_plan)

    if config_plan:
        return PLAN_TABLE.normalize(config_plan)

    return DEFAULT_PLAN


def _parse_env_limit(env_limit: Optional[str]) -> Optional[int]:
    if env_limit is None or not env_limit.strip():
        return None
    try:
        parsed = int(env_limit.strip())
    except ValueError:
        logger.debug("Ignoring non-numeric %s=%r", ENV_LIMIT, env_limit)
        return None
    if parsed <= 0:
        logger.debug("Ignoring non-positive %s=%r", ENV_LIMIT, env_limit)
        return None
    return parsed


def resolve_limit(
    cli_override: Optional[int],
    env_override: Optional[str],
    plan_name: Optional[str],
    config_limit: Optional[int] = None,
) -> int:
    """Resolve the effective monthly limit.

    Args:
        cli_override: Value of --limit, if given
        env_override: Raw GH_COPILOT_LIMIT value, if set
        plan_name: Plan whose quota applies when no override is usable
        config_limit: Limit from the configuration file, if any

    Returns:
        A positive integer limit

    Raises:
        ConfigurationError: If the CLI override is not positive, or the plan
            name is not in the plan table
    """
    if cli_override is not None:
        if cli_override <= 0:
            raise ConfigurationError("--limit must be a positive number")
        return cli_override

    env_limit = _parse_env_limit(env_override)
    if env_limit is not None:
        return env_limit

    if config_limit is not None:
        if config_limit <= 0:
            raise ConfigurationError("limit must be a positive number")
        return config_limit

    if plan_name:
        return PLAN_TABLE.get_quota(plan_name)

    return FALLBACK_LIMIT
