"""
Configuration management and loading.

Handles the optional YAML settings file and the environment variables that
provide advisory defaults.
"""

import os
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from ..core.errors import ConfigurationError
from ..core.plans import PLAN_TABLE
from ..statusbar.multiplexer import DEFAULT_REFRESH_INTERVAL

ENV_CONFIG = "GH_COPILOT_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".config" / "copilot-usage" / "config.yaml"

DEFAULT_STATUS_COMMAND = ("i3status", "-c", "~/.config/i3status/config")
DEFAULT_TIMEOUT = 30.0


@dataclass(frozen=True)
class Settings:
    """Settings read from the configuration file, with defaults applied."""
    plan: Optional[str] = None
    limit: Optional[int] = None
    gh_path: str = "gh"
    timeout: float = DEFAULT_TIMEOUT
    status_command: Tuple[str, ...] = DEFAULT_STATUS_COMMAND
    refresh_interval: float = DEFAULT_REFRESH_INTERVAL


def find_config_file(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Locate the configuration file.

    An explicit path or GH_COPILOT_CONFIG must point to an existing file. The
    default location is used only if it exists.

    Raises:
        ConfigurationError: If an explicitly named file does not exist
    """
    environ = os.environ if environ is None else environ
    explicit = path or environ.get(ENV_CONFIG)
    if explicit:
        config_path = Path(explicit).expanduser()
        if not config_path.is_file():
            raise ConfigurationError(f"Config file not found: {explicit}")
        return config_path

    if DEFAULT_CONFIG_PATH.is_file():
        return DEFAULT_CONFIG_PATH
    return None


def load_settings(
    path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Load and validate settings.

    Strict validation: unknown keys and invalid values are errors rather than
    being ignored.

    Args:
        path: Explicit config file path (--config)
        environ: Environment mapping, defaults to os.environ

    Returns:
        Validated Settings; all defaults when no file is found

    Raises:
        ConfigurationError: If the file is missing, unreadable or invalid
    """
    config_path = find_config_file(path, environ)
    if config_path is None:
        return Settings()

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML in config file {config_path}: {e}")
    except OSError as e:
        raise ConfigurationError(f"Could not read config file {config_path}: {e}")

    if raw_config is None:
        return Settings()
    if not isinstance(raw_config, dict):
        raise ConfigurationError(f"Config file {config_path} must contain a mapping")

    return parse_settings(raw_config)


def parse_settings(raw_config: Dict[str, Any]) -> Settings:
    """Validate a raw configuration mapping into Settings.

    Raises:
        ConfigurationError: If any key is unknown or any value invalid
    """
    allowed_top_keys = {'plan', 'limit', 'gh_path', 'timeout', 'statusbar'}
    unknown_keys = set(raw_config.keys()) - allowed_top_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown configuration keys: {sorted(unknown_keys)}")

    values: Dict[str, Any] = {}

    if raw_config.get('plan') is not None:
        plan = raw_config['plan']
        if not isinstance(plan, str):
            raise ConfigurationError("'plan' must be a string")
        values['plan'] = PLAN_TABLE.normalize(plan)

    if raw_config.get('limit') is not None:
        values['limit'] = _positive_int(raw_config['limit'], 'limit')

    if raw_config.get('gh_path') is not None:
        gh_path = raw_config['gh_path']
        if not isinstance(gh_path, str) or not gh_path.strip():
            raise ConfigurationError("'gh_path' must be a non-empty string")
        values['gh_path'] = gh_path

    if raw_config.get('timeout') is not None:
        values['timeout'] = _positive_number(raw_config['timeout'], 'timeout')

    statusbar = raw_config.get('statusbar')
    if statusbar is not None:
        values.update(_parse_statusbar(statusbar))

    return Settings(**values)


def _parse_statusbar(data: Any) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise ConfigurationError("'statusbar' must be a dictionary")

    allowed_keys = {'command', 'refresh_interval'}
    unknown_keys = set(data.keys()) - allowed_keys
    if unknown_keys:
        raise ConfigurationError(f"Unknown keys in statusbar: {sorted(unknown_keys)}")

    values: Dict[str, Any] = {}

    command = data.get('command')
    if command is not None:
        if isinstance(command, str):
            command = shlex.split(command)
        if (not isinstance(command, list) or not command
                or not all(isinstance(arg, str) for arg in command)):
            raise ConfigurationError(
                "'statusbar.command' must be a non-empty string or list of strings"
            )
        values['status_command'] = tuple(command)

    if data.get('refresh_interval') is not None:
        values['refresh_interval'] = _positive_number(
            data['refresh_interval'], 'statusbar.refresh_interval'
        )

    return values


def _positive_int(value: Any, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigurationError(f"'{name}' must be a positive integer")
    return value


def _positive_number(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
        raise ConfigurationError(f"'{name}' must be > 0")
    return float(value)
