"""
Target command implementation.

Prints the release target resolved for this host.
"""

import logging

from binfetch.core.environment import Environment
from binfetch.core.exceptions import UnsupportedPlatformError
from binfetch.core.platform import get_supported_targets, resolve_target

logger = logging.getLogger(__name__)


def run(args, env=None) -> int:
    if getattr(args, "list", False):
        for target in get_supported_targets():
            print(target)
        return 0

    if env is None:
        env = Environment.from_process()
    if getattr(args, "arch", None):
        env = env.with_overrides(BINFETCH_ARCH=args.arch)

    try:
        print(resolve_target(env))
    except UnsupportedPlatformError as e:
        logger.error(str(e))
        return 1
    return 0
