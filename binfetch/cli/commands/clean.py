"""
Clean command implementation.

Deletes the download cache so the next install fetches a fresh asset.
"""

import logging

from binfetch.cli.utils import load_command_context
from binfetch.core.directory import clean_cache_dir

logger = logging.getLogger(__name__)


def run(args, env=None) -> int:
    config, env = load_command_context(args, env)
    cache_dir = config.resolved_cache_dir()

    if not clean_cache_dir(cache_dir):
        logger.info(f"Nothing to clean at {cache_dir}")
    return 0
