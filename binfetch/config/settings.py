"""YAML configuration for binfetch.

Settings are layered: built-in defaults, then an optional ``binfetch.yaml``,
then ``BINFETCH_*`` environment variables.
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from binfetch import __version__
from binfetch.core.directory import get_cache_dir, get_default_bin_dir
from binfetch.core.download import DEFAULT_MAX_REDIRECTS, TRUSTED_API_HOST
from binfetch.core.environment import Environment
from binfetch.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "binfetch.yaml"
TOKEN_ENV_VAR = "GITHUB_TOKEN"

ENV_OVERRIDES = {
    "BINFETCH_VERSION": "version",
    "BINFETCH_BIN_DIR": "bin_dir",
    "BINFETCH_CACHE_DIR": "cache_dir",
}


@dataclass
class InstallerConfig:
    """Everything needed to install one tool from its GitHub releases."""

    tool_name: str = "aidbox-cli"
    repo: str = "octoshikari/aidbox-cli"
    version: str = "v0.4.3"
    api_host: str = TRUSTED_API_HOST
    user_agent: str = "aidbox-cli"
    bin_dir: Path = field(default_factory=get_default_bin_dir)
    cache_dir: Optional[Path] = None
    max_redirects: int = DEFAULT_MAX_REDIRECTS
    timeout: Optional[float] = None

    def resolved_cache_dir(self) -> Path:
        """Cache directory, derived from the installer version when unset."""
        if self.cache_dir is not None:
            return self.cache_dir
        return get_cache_dir(self.tool_name, __version__)


def _coerce(name: str, value: Any) -> Any:
    if name in ("bin_dir", "cache_dir"):
        if value is None and name == "cache_dir":
            return None
        if not isinstance(value, (str, Path)):
            raise ConfigError(f"'{name}' must be a path, got {type(value).__name__}")
        return Path(value).expanduser()

    if name == "max_redirects":
        if isinstance(value, bool) or not isinstance(value, (int, str)):
            raise ConfigError(f"'max_redirects' must be an integer, got {value!r}")
        try:
            value = int(value)
        except ValueError:
            raise ConfigError(f"'max_redirects' must be an integer, got {value!r}")
        if value < 0:
            raise ConfigError("'max_redirects' must not be negative")
        return value

    if name == "timeout":
        if value is None:
            return None
        if isinstance(value, bool):
            raise ConfigError(f"'timeout' must be a number, got {value!r}")
        try:
            value = float(value)
        except (TypeError, ValueError):
            raise ConfigError(f"'timeout' must be a number, got {value!r}")
        if value <= 0:
            raise ConfigError("'timeout' must be positive")
        return value

    if not isinstance(value, str) or not value:
        raise ConfigError(f"'{name}' must be a non-empty string, got {value!r}")
    return value


def load_yaml_file(config_file: Path) -> Dict[str, Any]:
    """
    Read a configuration file.

    Keys may sit at the top level or under a ``binfetch:`` mapping.

    Raises:
        ConfigError: If the file cannot be read or parsed
    """
    try:
        with open(config_file, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_file}: {e}")
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_file} must contain a mapping")

    if "binfetch" in data:
        data = data["binfetch"] or {}
        if not isinstance(data, dict):
            raise ConfigError("'binfetch' section must be a mapping")

    return data


def load_config(
    config_file: Optional[Path] = None, env: Optional[Environment] = None
) -> InstallerConfig:
    """
    Build the installer configuration.

    Args:
        config_file: Explicit YAML file (must exist). If None, ``binfetch.yaml``
            in the working directory is used when present.
        env: Environment for ``BINFETCH_*`` overrides

    Returns:
        InstallerConfig

    Raises:
        ConfigError: On unreadable files, unknown keys or invalid values
    """
    if env is None:
        env = Environment.from_process()

    values: Dict[str, Any] = {}

    if config_file is not None:
        config_file = Path(config_file)
        if not config_file.exists():
            raise ConfigError(f"Configuration file not found: {config_file}")
    else:
        default = Path.cwd() / DEFAULT_CONFIG_FILE
        config_file = default if default.exists() else None

    if config_file is not None:
        logger.debug(f"Loading configuration from {config_file}")
        values.update(load_yaml_file(config_file))

    for var, key in ENV_OVERRIDES.items():
        value = env.get(var)
        if value:
            logger.debug(f"{var} overrides '{key}'")
            values[key] = value

    known = {f.name for f in fields(InstallerConfig)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    return InstallerConfig(**{k: _coerce(k, v) for k, v in values.items()})


def get_token(env: Optional[Environment] = None) -> Optional[str]:
    """API credential from GITHUB_TOKEN, if set."""
    if env is None:
        env = Environment.from_process()
    return env.get(TOKEN_ENV_VAR) or None


__all__ = [
    "DEFAULT_CONFIG_FILE",
    "TOKEN_ENV_VAR",
    "InstallerConfig",
    "load_config",
    "load_yaml_file",
    "get_token",
]
