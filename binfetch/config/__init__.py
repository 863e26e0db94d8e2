"""Configuration loading for binfetch."""

from .settings import (
    DEFAULT_CONFIG_FILE,
    TOKEN_ENV_VAR,
    InstallerConfig,
    get_token,
    load_config,
)

__all__ = [
    "DEFAULT_CONFIG_FILE",
    "TOKEN_ENV_VAR",
    "InstallerConfig",
    "get_token",
    "load_config",
]
