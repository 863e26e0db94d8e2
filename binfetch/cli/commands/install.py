"""
Install command implementation.

Downloads the release asset for this host and installs the binary. This is
the command a package manager's post-install hook runs.
"""

import logging

from binfetch.cli.utils import load_command_context
from binfetch.config.settings import get_token
from binfetch.core.exceptions import BinfetchError
from binfetch.core.platform import get_supported_targets, resolve_target
from binfetch.install.installer import InstallRequest, Installer

logger = logging.getLogger(__name__)


def run(args, env=None) -> int:
    """
    Run the install command.

    Args:
        args: Parsed command-line arguments
        env: Environment override (tests)

    Returns:
        Exit code (0 for success, 1 on failure)
    """
    config, env = load_command_context(args, env)
    if getattr(args, "arch", None):
        env = env.with_overrides(BINFETCH_ARCH=args.arch)

    if args.force:
        logger.info("--force, ignoring caches")

    try:
        target = args.target or resolve_target(env)
        if target not in get_supported_targets():
            logger.warning(f"{target} is not a known release target")
        request = InstallRequest(
            version=args.release or config.version,
            target=target,
            dest_dir=args.bin_dir or config.bin_dir,
            force=args.force,
            token=get_token(env),
        )
        Installer(config, env=env).install(request)
    except BinfetchError as e:
        logger.error(f"Downloading {config.tool_name} failed: {e}")
        if getattr(args, "verbose", False):
            logger.exception("Details")
        return 1

    return 0
