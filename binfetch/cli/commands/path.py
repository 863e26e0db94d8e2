"""
Path command implementation.

Prints where the installed binary lives.
"""

import logging

from binfetch import get_binary_path
from binfetch.cli.utils import load_command_context
from binfetch.core.filesystem import is_executable

logger = logging.getLogger(__name__)


def run(args, env=None) -> int:
    """
    Run the path command.

    Returns:
        0 if the binary is installed, 1 otherwise
    """
    config, env = load_command_context(args, env)
    binary = get_binary_path(config, env)

    if not binary.exists():
        logger.error(f"{config.tool_name} is not installed (expected {binary})")
        return 1

    if not env.is_windows and not is_executable(binary):
        logger.error(f"{binary} is not executable; reinstall with --force")
        return 1

    print(binary)
    return 0
