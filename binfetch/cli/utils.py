"""
Shared utilities for CLI commands.
"""

import logging
from typing import Optional, Tuple

from binfetch.config.settings import InstallerConfig, load_config
from binfetch.core.environment import Environment

logger = logging.getLogger(__name__)


def load_command_context(
    args, env: Optional[Environment] = None
) -> Tuple[InstallerConfig, Environment]:
    """
    Build the configuration and environment a command runs with.

    Args:
        args: Parsed arguments (uses the global --config option)
        env: Environment override, the current process if None

    Returns:
        (config, env) tuple
    """
    if env is None:
        env = Environment.from_process()
    config = load_config(getattr(args, "config", None), env=env)
    logger.debug(f"Configuration: {config}")
    return config, env
